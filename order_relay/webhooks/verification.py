"""Webhook signature verification: constant-time HMAC over the raw body.

Security contract:
- Verification uses hmac.compare_digest() (constant-time, no timing attacks)
- The MAC is computed over the untouched request body, before any JSON parsing
- Missing secret -> verification always fails (fail-closed)
- Missing body -> MissingBodyError (500), bad signature -> SignatureError (401)
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from collections.abc import Mapping

from order_relay.errors import MissingBodyError, PreconditionError, SignatureError

logger = logging.getLogger(__name__)

SHOPIFY_HMAC_HEADER = "x-shopify-hmac-sha256"


def compute_shopify_signature(body: bytes, secret: str) -> str:
    """Base64-encoded HMAC-SHA256 of ``body``, as Shopify sends it."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_shopify(body: bytes, signature_header: str | None, secret: str) -> bool:
    """Verify a Shopify webhook HMAC-SHA256 signature.

    Args:
        body: Raw request body bytes
        signature_header: Value of the X-Shopify-Hmac-SHA256 header
        secret: Shared webhook secret of the custom app

    Returns:
        True if signature is valid
    """
    if not secret:
        logger.error("Shopify webhook secret not configured, rejecting webhook")
        return False
    if not signature_header:
        return False

    computed = compute_shopify_signature(body, secret)
    return hmac.compare_digest(computed.encode("ascii"), signature_header.encode("utf-8"))


def authenticate_webhook(
    body: bytes | None, headers: Mapping[str, str], secret: str
) -> None:
    """Authenticate an inbound webhook or raise.

    Raises:
        MissingBodyError: no raw body to verify
        SignatureError: signature header missing or wrong
        PreconditionError: anything else went wrong while verifying
    """
    if not body:
        raise MissingBodyError("Raw request body is not available for signature verification")

    try:
        signature = headers.get(SHOPIFY_HMAC_HEADER)
        valid = verify_shopify(body, signature, secret)
    except Exception as e:
        raise PreconditionError(f"Signature verification failed: {e}") from e

    if not valid:
        raise SignatureError("Webhook signature mismatch")
