"""Shopify order payload models.

Only the fields the CSV export needs are declared; everything else in the
webhook payload is ignored. Optional fields are nullable because Shopify
sends explicit nulls for unset values (no company, no customer, ...).
"""

from __future__ import annotations

from decimal import Decimal

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _null_means_default(cls, data: Any) -> Any:
        """Explicit nulls on defaulted fields (lists, amounts) take the default."""
        if not isinstance(data, dict):
            return data
        fields = cls.model_fields
        return {
            key: value
            for key, value in data.items()
            if value is not None
            or key not in fields
            or fields[key].is_required()
            or fields[key].default is None
        }


class DiscountAllocation(_Payload):
    amount: Decimal = Decimal("0")


class TaxLine(_Payload):
    rate: Decimal | None = None
    title: str | None = None
    price: str | None = None


class ShippingLine(_Payload):
    title: str | None = None
    price: str | None = None


class Address(_Payload):
    first_name: str | None = None
    last_name: str | None = None
    company: str | None = None
    address1: str | None = None
    address2: str | None = None
    zip: str | None = None
    city: str | None = None
    country: str | None = None
    phone: str | None = None


class Customer(_Payload):
    id: int | None = None
    email: str | None = None


class Money(_Payload):
    amount: str | None = None
    currency_code: str | None = None


class MoneySet(_Payload):
    shop_money: Money | None = None


class LineItem(_Payload):
    """One product/quantity entry of an order.

    ``vendor_id`` is absent on arrival and set by the metafield enricher,
    either to the resolved value or to an empty string.
    """

    id: int | None = None
    variant_id: int | None = None
    product_id: int | None = None
    name: str | None = None
    price: Decimal = Decimal("0")
    quantity: int = 1
    grams: int | None = None
    tax_lines: list[TaxLine] = Field(default_factory=list)
    discount_allocations: list[DiscountAllocation] = Field(default_factory=list)
    vendor_id: str | None = None

    @property
    def total_discount(self) -> Decimal:
        return sum((d.amount for d in self.discount_allocations), Decimal("0"))


class Order(_Payload):
    """An ``orders/create`` webhook payload."""

    id: int
    order_number: int | None = None
    email: str | None = None
    customer: Customer | None = None
    created_at: str | None = None
    gateway: str | None = None
    billing_address: Address | None = None
    shipping_address: Address | None = None
    shipping_lines: list[ShippingLine] = Field(default_factory=list)
    total_shipping_price_set: MoneySet | None = None
    total_price: str | None = None
    note: str | None = None
    line_items: list[LineItem] = Field(default_factory=list)

    @property
    def customer_email(self) -> str | None:
        if self.customer is not None and self.customer.email:
            return self.customer.email
        return self.email

    @property
    def carrier(self) -> str | None:
        if self.shipping_lines:
            return self.shipping_lines[0].title
        return None

    @property
    def shipping_amount(self) -> str | None:
        price_set = self.total_shipping_price_set
        if price_set is None or price_set.shop_money is None:
            return None
        return price_set.shop_money.amount
