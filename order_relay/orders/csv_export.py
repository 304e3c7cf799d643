"""Order -> semicolon CSV export for the vendor back office.

One header line, then one row per line item. Order-level columns are
repeated on every row. Prices are derived per item:

    unit price   = listed price - round(sum(discounts) / quantity, 2)
    discount %   = round((1 - unit price / listed price) * 100)
    line total   = round(unit price * quantity, 2)

Rounding is half-up, matching what the back office expects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from order_relay.orders.models import Address, LineItem, Order

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "numero_commande",
    "mail_client",
    "date_heure_commande",
    "date_heure_reglement",
    "mode_reglement",
    "reference_commande_client",
    "nom_facturation",
    "prenom_facturation",
    "societe_facturation",
    "adresse1_facturation",
    "adresse2_facturation",
    "code_postal_facturation",
    "ville_facturation",
    "pays_facturation",
    "mobile_facturation",
    "telephone_facturation",
    "nom_livraison",
    "prenom_livraison",
    "societe_livraison",
    "adresse1_livraison",
    "adresse2_livraison",
    "code_postal_livraison",
    "ville_livraison",
    "pays_livraison",
    "telephone_livraison",
    "mobile_livraison",
    "transporteur",
    "commentaire",
    "montant_livraison_ttc",
    "total_ttc",
    "numéro_ligne",
    "numéro_produit",
    "designation",
    "quantite",
    "poids_unitaire",
    "taux_tva",
    "prix_unitaire_ttc",
    "prix_unitaire_sans_remise_ttc",
    "taux_remise_unitaire",
    "montant_remise_unitaire",
    "total_ttc_ligne",
]

DELIMITER = ";"
LINE_TERMINATOR = "\r\n"

_CENT = Decimal("0.01")
_UNIT = Decimal("1")


@dataclass(frozen=True)
class CsvDocument:
    """A generated order export, kept in memory until uploaded."""

    filename: str
    content: str

    def encode(self) -> bytes:
        return self.content.encode("utf-8")

    @property
    def row_count(self) -> int:
        # header excluded
        return max(self.content.count(LINE_TERMINATOR) - 1, 0)


@dataclass(frozen=True)
class LinePricing:
    """Derived price columns of one line item."""

    unit_price_with_tax: Decimal
    listed_price: Decimal
    discount_rate_percent: int
    discount_per_unit: Decimal
    line_total: Decimal


def _round_cents(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def price_line_item(item: LineItem) -> LinePricing:
    """Apply the discount rules to one line item."""
    listed = item.price
    unit_price = listed
    discount_per_unit = Decimal("0")
    rate = 0

    total_discount = item.total_discount
    if total_discount > 0 and item.quantity > 0:
        discount_per_unit = _round_cents(total_discount / item.quantity)

    if discount_per_unit > 0:
        unit_price = listed - discount_per_unit
        if listed:
            ratio = (1 - unit_price / listed) * 100
            rate = int(ratio.quantize(_UNIT, rounding=ROUND_HALF_UP))

    return LinePricing(
        unit_price_with_tax=unit_price,
        listed_price=listed,
        discount_rate_percent=rate,
        discount_per_unit=discount_per_unit,
        line_total=_round_cents(unit_price * item.quantity),
    )


def order_filename(order: Order) -> str:
    return f"order-{order.id}.csv"


def _text(value: Any) -> str:
    if value is None:
        return ""
    # one physical line per item
    return " ".join(str(value).splitlines())


def _money(value: Decimal) -> str:
    return str(_round_cents(value))


def _number(value: Decimal) -> str:
    """Plain decimal without trailing zeros: 0.2 * 100 -> ``20``."""
    normalized = value.normalize()
    return format(normalized, "f")


def _tax_rate(item: LineItem) -> str:
    if item.tax_lines and item.tax_lines[0].rate is not None:
        return _number(item.tax_lines[0].rate * 100)
    return ""


def _address_columns(address: Address | None, phone_pair: int = 2) -> list[str]:
    address = address or Address()
    return [
        _text(address.last_name),
        _text(address.first_name),
        _text(address.company),
        _text(address.address1),
        _text(address.address2),
        _text(address.zip),
        _text(address.city),
        _text(address.country),
    ] + [_text(address.phone)] * phone_pair


def _order_columns(order: Order) -> list[str]:
    return (
        [
            _text(order.id),
            _text(order.customer_email),
            _text(order.created_at),
            _text(order.created_at),
            _text(order.gateway),
            _text(order.order_number),
        ]
        + _address_columns(order.billing_address)
        + _address_columns(order.shipping_address)
        + [
            _text(order.carrier),
            _text(order.note),
            _text(order.shipping_amount),
            _text(order.total_price),
        ]
    )


def _item_columns(line_number: int, item: LineItem) -> list[str]:
    pricing = price_line_item(item)
    return [
        str(line_number),
        _text(item.vendor_id),
        _text(item.name),
        str(item.quantity),
        _text(item.grams),
        _tax_rate(item),
        _money(pricing.unit_price_with_tax),
        _money(pricing.listed_price),
        str(pricing.discount_rate_percent),
        _money(pricing.discount_per_unit),
        _money(pricing.line_total),
    ]


def strip_null_literals(content: str) -> str:
    """Drop every literal ``null`` from the document.

    Unset fields are already rendered empty; this keeps the output identical
    to what the back-office import has always received.
    """
    return content.replace("null", "")


def _field(value: str) -> str:
    """Quote only values that would split the row; inner quotes stay as-is."""
    if DELIMITER in value:
        return '"' + value.replace('"', '""') + '"'
    return value


def _row(values: list[str]) -> str:
    return DELIMITER.join(_field(v) for v in values) + LINE_TERMINATOR


def build_order_csv(order: Order) -> CsvDocument:
    """Render ``order`` as the back-office CSV document."""
    lines = [_row(CSV_COLUMNS)]

    order_columns = _order_columns(order)
    for line_number, item in enumerate(order.line_items, start=1):
        lines.append(_row(order_columns + _item_columns(line_number, item)))

    document = CsvDocument(
        filename=order_filename(order),
        content=strip_null_literals("".join(lines)),
    )
    logger.debug("Order %s: built %s with %d rows", order.id, document.filename, len(order.line_items))
    return document
