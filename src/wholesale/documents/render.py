from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from dateutil import tz

from wholesale.config import SellerDetails
from wholesale.orders.models import Order, OrderItem

from .grouping import GroupedProduct, group_order_items

VAT_RATE = 0.21
PAYMENT_TERMS_DAYS = 14
# Даты и год в номере документа считаются по времени продавца, а не по UTC
DOCUMENT_TIMEZONE = tz.gettz("Europe/Amsterdam")
CENT = Decimal("0.01")
CONFIRMATION = "confirmation"
INVOICE = "invoice"
DOCUMENT_PREFIXES = {CONFIRMATION: "F", INVOICE: "F"}
DOCUMENT_TITLES = {CONFIRMATION: "Order Confirmation", INVOICE: "Factuur / Invoice"}
CONFIRMATION_TERMS = [
    f"Payment due within {PAYMENT_TERMS_DAYS} days of order confirmation date.",
    "Prices are wholesale (WHS) and quoted in EUR.",
    "Delivery subject to stock availability.",
]
MONTHS = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def document_day(created_at: datetime) -> date:
    return created_at.astimezone(DOCUMENT_TIMEZONE).date()


def document_number(order: Order, kind: str = INVOICE) -> str:
    year = document_day(order.created_at).year
    return f"{DOCUMENT_PREFIXES[kind]}{year:04d}-{order.order_number:03d}"


def compute_tax(subtotal: float) -> float:
    """НДС с округлением половины цента вверх, как в печатной форме (55.125 -> 55.13)."""
    if not math.isfinite(subtotal):
        return subtotal * VAT_RATE
    tax = Decimal(str(subtotal)) * Decimal(str(VAT_RATE))
    return float(tax.quantize(CENT, rounding=ROUND_HALF_UP))


def due_date(created_at: datetime) -> date:
    return document_day(created_at) + timedelta(days=PAYMENT_TERMS_DAYS)


def format_document_date(value: date | datetime) -> str:
    if isinstance(value, datetime):
        value = document_day(value)
    return f"{value.day} {MONTHS[value.month - 1]} {value.year}"


def format_money(amount: float, symbol: str = "€") -> str:
    return f"{symbol} {amount:.2f}"


@dataclass(slots=True)
class OrderDocument:
    kind: str
    title: str
    number: str
    order: Order
    products: list[GroupedProduct]
    subtotal: float
    tax: float
    total_incl_tax: float
    document_date: date
    seller: SellerDetails
    due_date: date | None = None
    payment_terms_days: int | None = None
    terms: list[str] = field(default_factory=list)

    @property
    def total_pcs(self) -> int:
        return sum(product.total_pcs for product in self.products)

    @property
    def vat_rate(self) -> float:
        return VAT_RATE

    @property
    def date_display(self) -> str:
        return format_document_date(self.document_date)

    @property
    def due_date_display(self) -> str | None:
        return format_document_date(self.due_date) if self.due_date else None

    @property
    def payment_reference(self) -> str:
        return self.number

    def as_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "number": self.number,
            "date": self.date_display,
            "due_date": self.due_date_display,
            "payment_terms_days": self.payment_terms_days,
            "customer": {
                "company_name": self.order.company_name,
                "contact_name": self.order.contact_name,
                "email": self.order.email,
                "address": self.order.shipping_address,
                "postal_code": self.order.shipping_postal_code,
                "city": self.order.shipping_city,
                "country": self.order.shipping_country,
            },
            "products": [
                {
                    "index": index,
                    "product_title": product.product_title,
                    "sku": product.sku,
                    "image_url": product.image_url,
                    "unit_price": product.unit_price,
                    "total_pcs": product.total_pcs,
                    "total_value": round(product.total_value, 2),
                    "sizes": dict(product.sizes),
                }
                for index, product in enumerate(self.products, start=1)
            ],
            "total_pcs": self.total_pcs,
            "subtotal": self.subtotal,
            "vat_rate": self.vat_rate,
            "tax": self.tax,
            "total_incl_tax": self.total_incl_tax,
            "notes": self.order.notes,
            "terms": list(self.terms),
        }


def _build(kind: str, order: Order, items: Iterable[OrderItem], seller: SellerDetails) -> OrderDocument:
    products = group_order_items(items)
    # Сумма заказа хранится без НДС; NaN здесь не проверяется, его отсекает оформление заказа
    subtotal = float(order.total_price)
    tax = compute_tax(subtotal)
    return OrderDocument(
        kind=kind,
        title=DOCUMENT_TITLES[kind],
        number=document_number(order, kind),
        order=order,
        products=products,
        subtotal=subtotal,
        tax=tax,
        total_incl_tax=subtotal + tax,
        document_date=document_day(order.created_at),
        seller=seller,
    )


def build_order_confirmation(
    order: Order,
    items: Iterable[OrderItem],
    seller: SellerDetails | None = None,
) -> OrderDocument:
    document = _build(CONFIRMATION, order, items, seller or SellerDetails())
    document.terms = list(CONFIRMATION_TERMS)
    return document


def build_invoice(
    order: Order,
    items: Iterable[OrderItem],
    seller: SellerDetails | None = None,
) -> OrderDocument:
    document = _build(INVOICE, order, items, seller or SellerDetails())
    document.due_date = due_date(order.created_at)
    document.payment_terms_days = PAYMENT_TERMS_DAYS
    document.terms = [f"Please reference {document.number} with your payment."]
    return document


def build_document(
    kind: str,
    order: Order,
    items: Iterable[OrderItem],
    seller: SellerDetails | None = None,
) -> OrderDocument:
    if kind == CONFIRMATION:
        return build_order_confirmation(order, items, seller)
    if kind == INVOICE:
        return build_invoice(order, items, seller)
    raise ValueError(f"Неизвестный тип документа: {kind}")
