from __future__ import annotations

import logging
from typing import Mapping

from wholesale.cart import Cart, InventoryReconciler
from wholesale.catalog.models import Catalog, Product, Variant
from wholesale.services.submission import OrderSubmissionService, SubmissionResult, minimum_order_message


class PortalSession:
    """
    Состояние сеанса покупателя: каталог, корзина, остатки, флаг отправки.
    Все изменения корзины проходят через ограничения по остаткам.
    """

    def __init__(
        self,
        user_id: str,
        catalog: Catalog,
        submission: OrderSubmissionService,
        logger: logging.Logger | logging.LoggerAdapter,
    ):
        self.user_id = user_id
        self.catalog = catalog
        self.submission = submission
        self.logger = logger
        self.inventory = InventoryReconciler(catalog.stock)
        self.cart = Cart()
        self.submitting = False

    def _resolve(self, variant_id: str) -> tuple[Product, Variant]:
        found = self.catalog.find_variant(variant_id)
        if found is None:
            raise LookupError(f"Вариант не найден в каталоге: {variant_id}")
        return found

    def refresh_stock(self, stock: Mapping[str, int]) -> None:
        self.inventory = InventoryReconciler(stock)

    def max_orderable(self, variant_id: str) -> int:
        _, variant = self._resolve(variant_id)
        return self.inventory.max_orderable(variant, self.cart)

    def add(self, variant_id: str, quantity: int) -> int:
        product, variant = self._resolve(variant_id)
        allowed = self.inventory.clamp_selection(variant, quantity, self.cart)
        if allowed < quantity:
            self.logger.info("Quantity for %s clamped from %s to %s", variant_id, quantity, allowed)
        if allowed > 0:
            self.cart = self.cart.add_item(product, variant, allowed)
        return allowed

    def set_quantity(self, variant_id: str, quantity: int) -> int:
        item = self.cart.get(variant_id)
        if item is None:
            return self.add(variant_id, quantity) if quantity > 0 else 0
        allowed = self.inventory.clamp_cart_quantity(item.variant, quantity, self.cart)
        self.cart = self.cart.update_quantity(variant_id, allowed)
        return allowed

    def increment(self, variant_id: str) -> int:
        return self.set_quantity(variant_id, self.cart.quantity_of(variant_id) + 1)

    def decrement(self, variant_id: str) -> int:
        return self.set_quantity(variant_id, self.cart.quantity_of(variant_id) - 1)

    def remove(self, variant_id: str) -> None:
        self.cart = self.cart.remove_item(variant_id)

    def clear(self) -> None:
        self.cart = self.cart.clear()

    @property
    def meets_minimum(self) -> bool:
        return self.cart.total_price() >= self.submission.minimum_order_value

    def minimum_order_warning(self) -> str | None:
        if self.cart.is_empty or self.meets_minimum:
            return None
        return minimum_order_message(self.cart.total_price(), self.submission.minimum_order_value)

    def submit(self, notes: str | None = None) -> SubmissionResult:
        if self.submitting:
            return SubmissionResult(ok=False, message="Je bestelling wordt al verwerkt.")

        self.submitting = True
        try:
            result = self.submission.submit(self.cart, self.user_id, notes=notes)
        finally:
            self.submitting = False

        if result.ok:
            self.cart = self.cart.clear()
        return result
