from __future__ import annotations

from typing import Mapping

from wholesale.catalog.models import Variant

from .models import Cart

# Остаток неизвестен: не блокируем ввод, но ограничиваем разумным потолком
UNKNOWN_STOCK_CAP = 999


class InventoryReconciler:
    def __init__(self, stock: Mapping[str, int] | None = None, unknown_cap: int = UNKNOWN_STOCK_CAP):
        self.stock = dict(stock or {})
        self.unknown_cap = unknown_cap

    def stock_for(self, variant_id: str) -> int | None:
        return self.stock.get(variant_id)

    def _cap(self, variant: Variant) -> int:
        if not variant.available:
            return 0
        stock = self.stock_for(variant.id)
        return self.unknown_cap if stock is None else max(0, stock)

    def max_orderable(self, variant: Variant, cart: Cart) -> int:
        """Сколько еще можно добавить с учетом того, что уже лежит в корзине."""
        if not variant.available:
            return 0
        stock = self.stock_for(variant.id)
        if stock is None:
            return self.unknown_cap
        return max(0, stock - cart.quantity_of(variant.id))

    def clamp_selection(self, variant: Variant, requested: int, cart: Cart) -> int:
        return min(max(0, requested), self.max_orderable(variant, cart))

    def clamp_cart_quantity(self, variant: Variant, requested: int, cart: Cart) -> int:
        """
        Абсолютное количество позиции в корзине.
        Уменьшение разрешено всегда, увеличение ограничено остатком.
        """
        current = cart.quantity_of(variant.id)
        if requested <= current:
            return max(0, requested)
        return max(current, min(requested, self._cap(variant)))

    def is_orderable(self, variant: Variant) -> bool:
        return self._cap(variant) > 0
