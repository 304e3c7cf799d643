"""Post-acknowledgement order pipeline: parse -> enrich -> format -> deliver.

Runs after the webhook has already been answered with 200, so nothing here
can reach Shopify. Every failure is logged with the order id and the stage
it happened in, then the pipeline stops.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum

from pydantic import ValidationError

from order_relay.config import Settings
from order_relay.orders.csv_export import CsvDocument, build_order_csv
from order_relay.orders.enrichment import enrich_order
from order_relay.orders.models import Order
from order_relay.tools.ftp_tool import DeliveryResult, FtpDelivery
from order_relay.tools.shopify_tool import ShopifyClient

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    ACKNOWLEDGED = "acknowledged"
    ENRICHED = "enriched"
    FORMATTED = "formatted"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass
class PipelineResult:
    order_id: int | None
    stage: Stage
    document: CsvDocument | None = None
    delivery: DeliveryResult | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.stage is Stage.DELIVERED


@dataclass
class AppContext:
    """Process-wide collaborators handed to every request."""

    settings: Settings
    shopify: ShopifyClient
    delivery: FtpDelivery


def parse_order(body: bytes) -> Order:
    return Order.model_validate(json.loads(body))


def process_order(context: AppContext, body: bytes) -> PipelineResult:
    """Run the whole pipeline for one verified webhook body. Never raises."""
    try:
        order = parse_order(body)
    except (ValueError, ValidationError) as e:
        logger.error("Discarding webhook with unreadable order payload: %s", e)
        return PipelineResult(None, Stage.FAILED, errors=[str(e)])

    logger.info("New order received, id: %s (%d line items)", order.id, len(order.line_items))
    result = PipelineResult(order.id, Stage.ACKNOWLEDGED)

    try:
        enrich_order(
            order,
            context.shopify,
            key=context.settings.metafield_key,
            max_workers=context.settings.enrich_concurrency,
        )
        result.stage = Stage.ENRICHED

        result.document = build_order_csv(order)
        result.stage = Stage.FORMATTED
    except Exception as e:
        logger.exception("Order %s: processing failed after %s", order.id, result.stage.value)
        result.errors.append(str(e))
        result.stage = Stage.FAILED
        return result

    result.delivery = context.delivery.deliver(result.document)
    if result.delivery.success:
        result.stage = Stage.DELIVERED
    else:
        result.errors.append(result.delivery.error)
        result.stage = Stage.FAILED
    return result
