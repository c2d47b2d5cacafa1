from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

from dateutil import parser as dt_parser


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def is_terminal(self) -> bool:
        return self in {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


STATUS_LABELS = {
    OrderStatus.PENDING: "In afwachting",
    OrderStatus.CONFIRMED: "Bevestigd",
    OrderStatus.SHIPPED: "Verzonden",
    OrderStatus.DELIVERED: "Afgeleverd",
    OrderStatus.CANCELLED: "Geannuleerd",
}

# Линейный жизненный цикл; отмена доступна из любого нетерминального статуса
STATUS_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED},
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in STATUS_TRANSITIONS[current]


def parse_timestamp(value: str | datetime) -> datetime:
    parsed = value if isinstance(value, datetime) else dt_parser.isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(slots=True)
class BuyerProfile:
    user_id: str
    company_name: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    country: str = "NL"
    kvk_number: str | None = None
    btw_number: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> BuyerProfile:
        return cls(
            user_id=row["user_id"],
            company_name=row["company_name"] or "",
            contact_name=row["contact_name"] or "",
            email=row["email"] or "",
            phone=row["phone"],
            address=row["address"],
            city=row["city"],
            postal_code=row["postal_code"],
            country=row["country"] or "NL",
            kvk_number=row["kvk_number"],
            btw_number=row["btw_number"],
        )


@dataclass(slots=True, frozen=True)
class Order:
    id: str
    order_number: int
    user_id: str
    status: OrderStatus
    total_price: float
    currency: str
    company_name: str
    contact_name: str
    email: str
    phone: str | None
    shipping_address: str | None
    shipping_city: str | None
    shipping_postal_code: str | None
    shipping_country: str | None
    notes: str | None
    admin_notes: str | None
    created_at: datetime

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Order:
        return cls(
            id=row["id"],
            order_number=int(row["order_number"]),
            user_id=row["user_id"],
            status=OrderStatus(row["status"]),
            total_price=float(row["total_price"]),
            currency=row["currency"],
            company_name=row["company_name"] or "",
            contact_name=row["contact_name"] or "",
            email=row["email"] or "",
            phone=row["phone"],
            shipping_address=row["shipping_address"],
            shipping_city=row["shipping_city"],
            shipping_postal_code=row["shipping_postal_code"],
            shipping_country=row["shipping_country"],
            notes=row["notes"],
            admin_notes=row["admin_notes"],
            created_at=parse_timestamp(row["created_at"]),
        )


@dataclass(slots=True, frozen=True)
class OrderItem:
    product_title: str
    variant_title: str | None
    sku: str | None
    quantity: int
    unit_price: float
    total_price: float
    image_url: str | None = None
    variant_id: str | None = None
    order_id: str | None = None
    id: int | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> OrderItem:
        return cls(
            id=row["id"],
            order_id=row["order_id"],
            variant_id=row["variant_id"],
            product_title=row["product_title"],
            variant_title=row["variant_title"],
            sku=row["sku"],
            quantity=int(row["quantity"]),
            unit_price=float(row["unit_price"]),
            total_price=float(row["total_price"]),
            image_url=row["image_url"],
        )
