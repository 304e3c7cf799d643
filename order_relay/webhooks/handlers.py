"""Webhook HTTP handlers: FastAPI routes for the Shopify order webhook.

The handler:
1. Reads the raw body (needed for HMAC verification)
2. Verifies the Shopify signature
3. Returns 200 immediately
4. Runs enrichment, CSV export and FTP delivery as a background task

Security contract:
- Never return error details to the webhook caller
- Return 401 only for signature failures, 500 when verification cannot run
- Nothing after the 200 is reported back; the pipeline logs its own outcome
"""

from __future__ import annotations

import logging

from fastapi import BackgroundTasks, Depends, FastAPI, Request
from fastapi.responses import PlainTextResponse

from order_relay.errors import PreconditionError, SignatureError
from order_relay.orders.pipeline import AppContext, process_order
from order_relay.webhooks.verification import authenticate_webhook

logger = logging.getLogger(__name__)


def get_context(request: Request) -> AppContext:
    return request.app.state.context


def _log_webhook(status: str, detail: str = "") -> None:
    """Audit log for webhook activity."""
    logger.info("WEBHOOK_AUDIT topic=orders/create status=%s %s", status, detail)


async def order_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    context: AppContext = Depends(get_context),
) -> PlainTextResponse:
    """Receive Shopify orders/create webhooks (signature-verified)."""
    body = await request.body()
    headers = {k.lower(): v for k, v in request.headers.items()}

    try:
        authenticate_webhook(body, headers, context.settings.shopify_webhook_secret)
    except SignatureError:
        _log_webhook("signature_failed")
        return PlainTextResponse("Unauthorized", status_code=SignatureError.status_code)
    except PreconditionError as e:
        logger.error("Validation failed: %s", e)
        return PlainTextResponse(
            "Internal Server Error", status_code=PreconditionError.status_code
        )

    background_tasks.add_task(process_order, context, body)
    _log_webhook("accepted", f"bytes={len(body)}")
    return PlainTextResponse("OK", status_code=200)


async def welcome() -> PlainTextResponse:
    return PlainTextResponse("Shopify webhook", status_code=200)


def register_webhook_routes(app: FastAPI) -> None:
    """Register the welcome route and the webhook endpoint on ``app``."""
    app.add_api_route("/", welcome, methods=["GET"])
    app.add_api_route("/webhooks", order_webhook, methods=["POST"])
    logger.debug("Webhook routes registered: GET /, POST /webhooks")
