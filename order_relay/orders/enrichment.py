"""Vendor identifier enrichment from product-variant metafields.

Each line item gets ``vendor_id`` set from the first metafield whose key
matches exactly. No match, no variant, or a failed lookup all leave an
explicit empty string, so every item still reaches the CSV.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Protocol

from order_relay.errors import EnrichmentError
from order_relay.orders.models import LineItem, Order

logger = logging.getLogger(__name__)

DEFAULT_METAFIELD_KEY = "vitisoft_id"


class MetafieldSource(Protocol):
    def variant_metafields(self, variant_id: int) -> list[dict[str, Any]]: ...


def select_metafield_value(metafields: list[dict[str, Any]], key: str) -> str:
    """Value of the first metafield named ``key``, else ``""``."""
    for metafield in metafields:
        if metafield.get("key") == key:
            value = metafield.get("value")
            return "" if value is None else str(value)
    return ""


def lookup_vendor_id(
    source: MetafieldSource, item: LineItem, key: str = DEFAULT_METAFIELD_KEY
) -> str:
    """Resolve the vendor identifier of one line item.

    Raises:
        EnrichmentError: the metafield request failed
    """
    if item.variant_id is None:
        return ""
    try:
        metafields = source.variant_metafields(item.variant_id)
    except Exception as e:
        raise EnrichmentError(item.variant_id, e) from e
    return select_metafield_value(metafields, key)


def _resolve(source: MetafieldSource, order_id: int, item: LineItem, key: str) -> str:
    try:
        return lookup_vendor_id(source, item, key)
    except EnrichmentError as e:
        logger.error(
            "Order %s: vendor id lookup failed for line item %s (variant %s), leaving it empty: %s",
            order_id,
            item.id,
            e.variant_id,
            e.cause,
        )
        return ""


def enrich_order(
    order: Order,
    source: MetafieldSource,
    key: str = DEFAULT_METAFIELD_KEY,
    max_workers: int = 1,
) -> Order:
    """Set ``vendor_id`` on every line item of ``order`` in place.

    With ``max_workers`` above 1 lookups fan out over a bounded thread pool;
    results are matched back to items by position.
    """
    items = order.line_items
    if max_workers <= 1 or len(items) <= 1:
        vendor_ids = [_resolve(source, order.id, item, key) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(items))) as pool:
            vendor_ids = list(pool.map(lambda item: _resolve(source, order.id, item, key), items))

    for item, vendor_id in zip(items, vendor_ids):
        item.vendor_id = vendor_id

    resolved = sum(1 for v in vendor_ids if v)
    logger.info("Order %s: resolved %d/%d vendor ids", order.id, resolved, len(items))
    return order
