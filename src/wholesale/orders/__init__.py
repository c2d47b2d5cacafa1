from .models import (
    STATUS_TRANSITIONS,
    BuyerProfile,
    Order,
    OrderItem,
    OrderStatus,
    can_transition,
    parse_timestamp,
)

__all__ = [
    "STATUS_TRANSITIONS",
    "BuyerProfile",
    "Order",
    "OrderItem",
    "OrderStatus",
    "can_transition",
    "parse_timestamp",
]
