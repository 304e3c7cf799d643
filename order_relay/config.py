"""Order relay configuration."""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Environment-driven settings for the order relay service."""

    port: int = 8080
    host_name: str = ""

    # Shopify custom app
    shop: str = ""
    shopify_access_token: str = Field(
        default="",
        validation_alias=AliasChoices("SHOPIFY_ACCESS_TOKEN", "SHOPIFY_SECRET_KEY"),
    )
    shopify_webhook_secret: str = Field(
        default="",
        validation_alias=AliasChoices("SHOPIFY_WEBHOOK_SECRET", "SHOPIFY_SECRET_API_KEY"),
    )
    scopes: str = ""
    shopify_api_version: str = "2023-01"
    shopify_timeout: float = 30.0
    register_webhooks: bool = True

    # Enrichment
    metafield_key: str = "vitisoft_id"
    enrich_concurrency: int = 1

    # FTP sink
    ftp_host: str = ""
    ftp_port: int = 21
    ftp_user: str = ""
    ftp_password: str = ""
    ftp_remote_dir: str = ""
    ftp_timeout: float = 60.0

    # Logging
    log_file: str = "./vitisoft.log"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore", "populate_by_name": True}

    @property
    def scope_list(self) -> list[str]:
        """SCOPES is a comma-separated list, e.g. ``read_orders,read_products``."""
        return [s.strip() for s in self.scopes.split(",") if s.strip()]

    @property
    def webhook_address(self) -> str:
        return f"https://{self.host_name}/webhooks"


def get_settings() -> Settings:
    return Settings()
