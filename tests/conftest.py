"""Shared fixtures for the order relay test suite."""

from __future__ import annotations

import base64
import copy
import hashlib
import hmac
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from order_relay.config import Settings
from order_relay.orders.pipeline import AppContext
from order_relay.serve import create_app
from order_relay.tools.ftp_tool import DeliveryResult
from order_relay.tools.shopify_tool import WebhookRegistration

WEBHOOK_SECRET = "test-secret"

SAMPLE_ORDER = {
    "id": 820982911946154508,
    "order_number": 1001,
    "email": "jon@example.com",
    "created_at": "2023-03-14T10:12:05+01:00",
    "gateway": "shopify_payments",
    "note": None,
    "total_price": "25.50",
    "currency": "EUR",
    "customer": {"id": 115310627314723954, "email": "jon@example.com"},
    "billing_address": {
        "first_name": "Jon",
        "last_name": "Snow",
        "company": None,
        "address1": "1 Rue du Mur",
        "address2": None,
        "zip": "75001",
        "city": "Paris",
        "country": "France",
        "phone": "+33600000000",
    },
    "shipping_address": {
        "first_name": "Arya",
        "last_name": "Stark",
        "company": "Winterfell SARL",
        "address1": "2 Rue du Nord",
        "address2": "Bat B",
        "zip": "69001",
        "city": "Lyon",
        "country": "France",
        "phone": None,
    },
    "shipping_lines": [{"title": "Colissimo", "price": "7.50"}],
    "total_shipping_price_set": {
        "shop_money": {"amount": "7.50", "currency_code": "EUR"},
        "presentment_money": {"amount": "7.50", "currency_code": "EUR"},
    },
    "line_items": [
        {
            "id": 466157049,
            "variant_id": 39072856,
            "product_id": 632910392,
            "name": "Chablis 2019",
            "price": "10.00",
            "quantity": 2,
            "grams": 1500,
            "tax_lines": [{"rate": 0.2, "title": "TVA", "price": "3.00"}],
            "discount_allocations": [
                {"amount": "1.50", "discount_application_index": 0},
                {"amount": "0.50", "discount_application_index": 1},
            ],
        },
        {
            "id": 518995019,
            "variant_id": 49148385,
            "product_id": 632910393,
            "name": "Corkscrew",
            "price": "5.50",
            "quantity": 1,
            "grams": 200,
            "tax_lines": [],
            "discount_allocations": [],
        },
    ],
}


def sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Compute a valid Shopify signature for ``body``."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


@pytest.fixture()
def order_payload() -> dict:
    return copy.deepcopy(SAMPLE_ORDER)


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        _env_file=None,
        port=8080,
        host_name="relay.example.com",
        shop="vitisoft-test.myshopify.com",
        shopify_access_token="shpat_test",
        shopify_webhook_secret=WEBHOOK_SECRET,
        ftp_host="ftp.example.com",
        ftp_user="relay",
        ftp_password="secret",
        log_file="",
    )


@pytest.fixture()
def context(settings: Settings) -> AppContext:
    """App context with the Shopify client and FTP sink mocked out."""
    shopify = MagicMock()
    shopify.variant_metafields.return_value = [
        {"key": "other", "value": "nope"},
        {"key": "vitisoft_id", "value": "VS-42"},
    ]
    shopify.register_webhook.return_value = WebhookRegistration("orders/create", "registered", "1")

    delivery = MagicMock()
    delivery.deliver.side_effect = lambda doc: DeliveryResult(doc.filename, doc.filename, True)
    return AppContext(settings=settings, shopify=shopify, delivery=delivery)


@pytest.fixture()
def client(context: AppContext):
    """TestClient with lifespan (webhook registration) enabled."""
    with TestClient(create_app(context), raise_server_exceptions=False) as c:
        yield c
