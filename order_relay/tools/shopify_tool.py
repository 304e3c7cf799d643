"""Shopify Admin REST API client.

Covers the two things the relay needs from Shopify:
- reading product-variant metafields (vendor identifier lookup)
- registering the orders/create webhook at startup

One client is built per process and injected through the app context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from order_relay.config import Settings
from order_relay.tools.retry import retry_with_backoff

logger = logging.getLogger(__name__)

ORDERS_CREATE_TOPIC = "orders/create"


@dataclass
class WebhookRegistration:
    """Outcome of a startup webhook registration."""

    topic: str
    status: str  # registered, already_registered, failed
    detail: str = ""

    @property
    def success(self) -> bool:
        return self.status != "failed"


class ShopifyClient:
    """Thin wrapper over ``httpx.Client`` bound to one shop and API version."""

    def __init__(
        self,
        shop: str,
        access_token: str,
        api_version: str = "2023-01",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.shop = shop
        self._http = httpx.Client(
            base_url=f"https://{shop}/admin/api/{api_version}",
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> ShopifyClient:
        return cls(
            shop=settings.shop,
            access_token=settings.shopify_access_token,
            api_version=settings.shopify_api_version,
            timeout=settings.shopify_timeout,
        )

    def close(self) -> None:
        self._http.close()

    @retry_with_backoff(max_retries=3, base_delay=1.0, max_delay=30.0)
    def _get(self, path: str, params: dict | None = None) -> dict:
        response = self._http.get(path, params=params)
        response.raise_for_status()
        return response.json()

    @retry_with_backoff(max_retries=2, base_delay=1.0, max_delay=30.0)
    def _post(self, path: str, payload: dict) -> dict:
        response = self._http.post(path, json=payload)
        response.raise_for_status()
        return response.json()

    def variant_metafields(self, variant_id: int) -> list[dict[str, Any]]:
        """All metafields attached to a product variant."""
        data = self._get(f"/variants/{variant_id}/metafields.json")
        return data.get("metafields", [])

    def list_webhooks(self, topic: str) -> list[dict[str, Any]]:
        data = self._get("/webhooks.json", params={"topic": topic})
        return data.get("webhooks", [])

    def create_webhook(self, topic: str, address: str) -> dict[str, Any]:
        payload = {"webhook": {"topic": topic, "address": address, "format": "json"}}
        data = self._post("/webhooks.json", payload)
        return data.get("webhook", {})

    def register_webhook(self, topic: str, address: str) -> WebhookRegistration:
        """Subscribe ``address`` to ``topic`` unless it already is.

        Never raises: failures come back as a ``failed`` registration so the
        caller can log them and keep serving.
        """
        try:
            existing = self.list_webhooks(topic)
            if any(w.get("address") == address for w in existing):
                return WebhookRegistration(topic, "already_registered", address)

            created = self.create_webhook(topic, address)
            return WebhookRegistration(topic, "registered", str(created.get("id", "")))
        except httpx.HTTPStatusError as e:
            return WebhookRegistration(
                topic, "failed", f"HTTP {e.response.status_code}: {e.response.text}"
            )
        except httpx.HTTPError as e:
            return WebhookRegistration(topic, "failed", f"{type(e).__name__}: {e}")
