"""Tests for settings and logging setup."""

from __future__ import annotations

import logging

import pytest

from order_relay.config import Settings
from order_relay.logging_config import configure_logging


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("PORT", "FTP_PORT", "METAFIELD_KEY", "SHOPIFY_API_VERSION"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.port == 8080
        assert settings.ftp_port == 21
        assert settings.metafield_key == "vitisoft_id"
        assert settings.shopify_api_version == "2023-01"
        assert settings.enrich_concurrency == 1

    def test_reads_legacy_env_names(self, monkeypatch):
        monkeypatch.setenv("PORT", "3000")
        monkeypatch.setenv("SHOP", "vitisoft.myshopify.com")
        monkeypatch.setenv("SHOPIFY_SECRET_KEY", "shpat_abc")
        monkeypatch.setenv("SHOPIFY_SECRET_API_KEY", "whsec")
        monkeypatch.setenv("HOST_NAME", "relay.example.com")
        monkeypatch.setenv("FTP_HOST", "ftp.example.com")
        monkeypatch.setenv("FTP_PORT", "2121")
        monkeypatch.setenv("FTP_USER", "relay")
        monkeypatch.setenv("FTP_PASSWORD", "pw")

        settings = Settings(_env_file=None)
        assert settings.port == 3000
        assert settings.shop == "vitisoft.myshopify.com"
        assert settings.shopify_access_token == "shpat_abc"
        assert settings.shopify_webhook_secret == "whsec"
        assert settings.webhook_address == "https://relay.example.com/webhooks"
        assert settings.ftp_port == 2121
        assert settings.ftp_password == "pw"

    def test_unused_legacy_env_ignored(self, monkeypatch):
        monkeypatch.setenv("SHOPIFY_API_KEY", "legacy-key")
        settings = Settings(_env_file=None)
        assert not hasattr(settings, "shopify_api_key")

    def test_scope_list(self):
        settings = Settings(_env_file=None, scopes="read_orders, read_products,,")
        assert settings.scope_list == ["read_orders", "read_products"]

    def test_empty_scopes(self):
        assert Settings(_env_file=None, scopes="").scope_list == []


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger("order_relay")
        saved = (list(logger.handlers), logger.level)
        yield
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        for handler in saved[0]:
            logger.addHandler(handler)
        logger.setLevel(saved[1])

    def test_console_and_file_sinks(self, tmp_path):
        log_file = tmp_path / "vitisoft.log"
        logger = configure_logging(Settings(_env_file=None, log_file=str(log_file)))

        kinds = sorted(type(h).__name__ for h in logger.handlers)
        assert kinds == ["FileHandler", "StreamHandler"]

        logging.getLogger("order_relay.orders.pipeline").info("New order received, id: %s", 42)
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "INFO" in text
        assert "New order received, id: 42" in text

    def test_reconfigure_does_not_duplicate_handlers(self, tmp_path):
        settings = Settings(_env_file=None, log_file=str(tmp_path / "a.log"))
        configure_logging(settings)
        logger = configure_logging(settings)
        assert len(logger.handlers) == 2

    def test_level_and_console_only(self):
        logger = configure_logging(Settings(_env_file=None, log_file="", log_level="error"))
        assert logger.level == logging.ERROR
        assert [type(h).__name__ for h in logger.handlers] == ["StreamHandler"]
