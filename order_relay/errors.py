"""Error taxonomy for the webhook-to-FTP pipeline.

Only the authentication boundary is visible to the webhook caller:
SignatureError maps to 401 and PreconditionError to 500. Everything raised
after the acknowledgement is logged and never reported back to Shopify.
"""

from __future__ import annotations


class OrderRelayError(Exception):
    """Base class for order relay errors."""


class SignatureError(OrderRelayError):
    """Webhook HMAC signature is missing or does not match."""

    status_code = 401


class PreconditionError(OrderRelayError):
    """The request could not be verified at all."""

    status_code = 500


class MissingBodyError(PreconditionError):
    """No raw request body was available for verification."""


class EnrichmentError(OrderRelayError):
    """A metafield lookup failed for one line item."""

    def __init__(self, variant_id: int | None, cause: Exception):
        super().__init__(f"Metafield lookup failed for variant {variant_id}: {cause}")
        self.variant_id = variant_id
        self.cause = cause


class DeliveryError(OrderRelayError):
    """FTP connection or upload failed."""
