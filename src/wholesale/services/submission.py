from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from wholesale.cart.models import Cart
from wholesale.core.db import OrderRepository
from wholesale.errors import OrderPersistenceError, PartialOrderWriteError
from wholesale.orders.models import BuyerProfile, Order, OrderItem

MINIMUM_ORDER_VALUE = 250.0


def minimum_order_message(total: float, minimum: float = MINIMUM_ORDER_VALUE) -> str:
    return f"Nog €{minimum - total:.2f} nodig (minimum €{minimum:.2f})"


@dataclass(slots=True)
class SubmissionResult:
    ok: bool
    message: str
    order: Order | None = None
    items_count: int = 0


class OrderSubmissionService:
    def __init__(
        self,
        repository: OrderRepository,
        logger: logging.Logger | logging.LoggerAdapter,
        minimum_order_value: float = MINIMUM_ORDER_VALUE,
    ):
        self.repository = repository
        self.logger = logger
        self.minimum_order_value = minimum_order_value

    def validate_cart(self, cart: Cart) -> str | None:
        if cart.is_empty:
            return "Je winkelwagen is leeg."
        if len({item.currency for item in cart}) > 1:
            return "Je winkelwagen bevat producten in verschillende valuta."
        for item in cart:
            if item.quantity < 1 or not math.isfinite(item.unit_price) or item.unit_price < 0:
                return f"Ongeldige prijs of aantal voor {item.product.title}."
        total = cart.total_price()
        if not math.isfinite(total):
            return "Ongeldig totaalbedrag."
        if total < self.minimum_order_value:
            return minimum_order_message(total, self.minimum_order_value)
        return None

    @staticmethod
    def validate_profile(profile: BuyerProfile | None) -> str | None:
        if profile is None or not profile.email:
            return "Vul eerst je bedrijfsgegevens in bij je profiel."
        return None

    @staticmethod
    def build_order_items(cart: Cart) -> list[OrderItem]:
        return [
            OrderItem(
                variant_id=item.variant.id,
                product_title=item.product.title,
                variant_title=item.variant.title,
                sku=item.variant.sku,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=round(item.unit_price * item.quantity, 2),
                image_url=item.variant.image_url or item.product.image_url,
            )
            for item in cart
        ]

    def submit(self, cart: Cart, user_id: str, notes: str | None = None) -> SubmissionResult:
        """
        Оформляет заказ: шапка, затем позиции.
        Ошибки валидации возвращаются в SubmissionResult, ошибки записи поднимаются исключением.
        """
        problem = self.validate_cart(cart)
        if problem is None:
            profile = self.repository.get_profile(user_id)
            problem = self.validate_profile(profile)
        if problem is not None:
            self.logger.info("Order submission rejected for %s: %s", user_id, problem)
            return SubmissionResult(ok=False, message=problem)

        total = round(cart.total_price(), 2)
        try:
            order = self.repository.insert_order(
                profile=profile,
                total_price=total,
                currency=cart.currency or "EUR",
                notes=notes.strip() if notes and notes.strip() else None,
            )
        except Exception as exc:  # noqa: BLE001
            self.logger.error("Order header insert failed for %s: %s", user_id, exc)
            raise OrderPersistenceError(f"Заказ не сохранен: {exc}") from exc

        order_items = self.build_order_items(cart)
        try:
            count = self.repository.insert_order_items(order.id, order_items)
        except Exception as exc:  # noqa: BLE001
            rolled_back = self._rollback_header(order)
            self.logger.critical(
                "Order items insert failed for order #%s (%s), header rolled back: %s; cause: %s",
                order.order_number,
                order.id,
                rolled_back,
                exc,
            )
            raise PartialOrderWriteError(order.id, order.order_number, rolled_back, exc) from exc

        self.logger.info(
            "Order #%s submitted by %s: %s items, total %.2f",
            order.order_number,
            user_id,
            count,
            total,
        )
        return SubmissionResult(
            ok=True,
            message=f"Order #{order.order_number} is succesvol aangemaakt.",
            order=order,
            items_count=count,
        )

    def _rollback_header(self, order: Order) -> bool:
        try:
            return self.repository.delete_order(order.id)
        except Exception as exc:  # noqa: BLE001
            self.logger.critical("Orphaned order header %s could not be deleted: %s", order.id, exc)
            return False
