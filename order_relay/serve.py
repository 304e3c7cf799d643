"""FastAPI application for the Shopify -> FTP order relay.

Run with ``order-relay`` (see ``main``) or
``uvicorn order_relay.serve:create_app --factory``.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from order_relay.config import Settings, get_settings
from order_relay.logging_config import configure_logging
from order_relay.orders.pipeline import AppContext
from order_relay.tools.ftp_tool import FtpDelivery
from order_relay.tools.shopify_tool import ORDERS_CREATE_TOPIC, ShopifyClient
from order_relay.webhooks.handlers import register_webhook_routes

logger = logging.getLogger(__name__)


def build_context(settings: Settings) -> AppContext:
    return AppContext(
        settings=settings,
        shopify=ShopifyClient.from_settings(settings),
        delivery=FtpDelivery.from_settings(settings),
    )


def register_order_webhook(context: AppContext) -> None:
    """Subscribe the relay to orders/create and log what happened."""
    registration = context.shopify.register_webhook(
        ORDERS_CREATE_TOPIC, context.settings.webhook_address
    )
    if registration.status == "already_registered":
        logger.info("Webhook already registered")
    elif registration.success:
        logger.info("Success: %s webhook registered (%s)", ORDERS_CREATE_TOPIC, registration.detail)
    else:
        logger.error("Failed to register %s webhook: %s", ORDERS_CREATE_TOPIC, registration.detail)


def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the app. Without ``context`` settings come from the environment."""
    if context is None:
        settings = get_settings()
        configure_logging(settings)
        context = build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Shopify custom app session for %s (scopes: %s)",
            context.settings.shop,
            ",".join(context.settings.scope_list) or "-",
        )
        if context.settings.register_webhooks:
            await asyncio.to_thread(register_order_webhook, context)
        logger.info(
            "Server started and listening at %s:%s",
            context.settings.host_name,
            context.settings.port,
        )
        yield
        close = getattr(context.shopify, "close", None)
        if close is not None:
            close()

    app = FastAPI(title="Order Relay", lifespan=lifespan)
    app.state.context = context
    register_webhook_routes(app)
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "order_relay.serve:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port,
    )


if __name__ == "__main__":
    main()
