from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator

from wholesale.catalog.models import Product, Variant


@dataclass(slots=True, frozen=True)
class CartItem:
    product: Product
    variant: Variant
    quantity: int
    unit_price: float

    @property
    def id(self) -> str:
        return self.variant.id

    @property
    def currency(self) -> str:
        return self.variant.price.currency_code

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass(slots=True, frozen=True)
class Cart:
    """
    Неизменяемый снимок корзины: каждая операция возвращает новый Cart.
    Итоги не кэшируются и считаются при каждом обращении.
    """

    items: tuple[CartItem, ...] = ()

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def currency(self) -> str | None:
        return self.items[0].currency if self.items else None

    def get(self, variant_id: str) -> CartItem | None:
        for item in self.items:
            if item.id == variant_id:
                return item
        return None

    def quantity_of(self, variant_id: str) -> int:
        item = self.get(variant_id)
        return item.quantity if item else 0

    def add_item(self, product: Product, variant: Variant, quantity: int) -> Cart:
        if quantity < 1:
            raise ValueError(f"Количество должно быть >= 1, получено {quantity}")
        if self.get(variant.id) is None:
            item = CartItem(product=product, variant=variant, quantity=quantity, unit_price=variant.price.amount)
            return Cart(items=self.items + (item,))
        return Cart(
            items=tuple(
                replace(item, quantity=item.quantity + quantity) if item.id == variant.id else item
                for item in self.items
            )
        )

    def update_quantity(self, variant_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            return self.remove_item(variant_id)
        return Cart(
            items=tuple(
                replace(item, quantity=quantity) if item.id == variant_id else item
                for item in self.items
            )
        )

    def remove_item(self, variant_id: str) -> Cart:
        return Cart(items=tuple(item for item in self.items if item.id != variant_id))

    def clear(self) -> Cart:
        return Cart()

    def total_price(self) -> float:
        return sum((item.unit_price * item.quantity for item in self.items), 0.0)

    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)

    def minimum_order_gap(self, minimum: float) -> float:
        return max(0.0, minimum - self.total_price())
