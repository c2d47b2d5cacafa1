from __future__ import annotations

import logging

from wholesale.config import SellerDetails
from wholesale.core.db import OrderRepository
from wholesale.documents import OrderDocument, build_document
from wholesale.errors import InvalidStatusTransition, OrderNotFoundError
from wholesale.orders.models import Order, OrderItem, OrderStatus, can_transition


class OrderAdminService:
    def __init__(
        self,
        repository: OrderRepository,
        logger: logging.Logger | logging.LoggerAdapter,
        seller: SellerDetails | None = None,
    ):
        self.repository = repository
        self.logger = logger
        self.seller = seller or SellerDetails()

    def list_orders(self, user_id: str | None = None) -> list[Order]:
        return self.repository.list_orders(user_id=user_id)

    def find_order(self, reference: str) -> Order:
        """Заказ по id или по номеру ("12", "#12")."""
        cleaned = reference.strip().lstrip("#")
        order = self.repository.get_order(cleaned)
        if order is None and cleaned.isdigit():
            order = self.repository.get_order_by_number(int(cleaned))
        if order is None:
            raise OrderNotFoundError(reference)
        return order

    def order_with_items(self, reference: str) -> tuple[Order, list[OrderItem]]:
        order = self.find_order(reference)
        return order, self.repository.get_order_items(order.id)

    def change_status(self, reference: str, status: OrderStatus | str) -> Order:
        target = OrderStatus(status)
        order = self.find_order(reference)
        if not can_transition(order.status, target):
            raise InvalidStatusTransition(order.status.value, target.value)

        self.repository.update_order_status(order.id, target)
        self.logger.info("Order #%s status %s -> %s", order.order_number, order.status.value, target.value)
        return self.find_order(order.id)

    def update_admin_notes(self, reference: str, admin_notes: str | None) -> Order:
        order = self.find_order(reference)
        cleaned = admin_notes.strip() if admin_notes else None
        self.repository.update_admin_notes(order.id, cleaned or None)
        self.logger.info("Order #%s admin notes updated", order.order_number)
        return self.find_order(order.id)

    def render_document(self, reference: str, kind: str) -> OrderDocument:
        order, items = self.order_with_items(reference)
        return build_document(kind, order, items, self.seller)
