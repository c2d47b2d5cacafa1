from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from wholesale.orders.models import OrderItem

from .sizes import extract_size, size_bar


@dataclass(slots=True)
class GroupedProduct:
    product_title: str
    image_url: str | None
    sku: str | None
    unit_price: float
    total_pcs: int = 0
    total_value: float = 0.0
    sizes: dict[str, int] = field(default_factory=dict)

    @property
    def size_columns(self) -> list[tuple[str, int | None]]:
        return size_bar(self.sizes)[0]

    @property
    def extra_sizes(self) -> dict[str, int]:
        return size_bar(self.sizes)[1]


def group_order_items(items: Iterable[OrderItem]) -> list[GroupedProduct]:
    """
    Группирует позиции заказа по точному совпадению product_title.
    Картинка, SKU и цена за единицу берутся у первой позиции группы;
    порядок групп соответствует первому появлению заголовка.
    """
    groups: dict[str, GroupedProduct] = {}

    for item in items:
        group = groups.get(item.product_title)
        if group is None:
            group = GroupedProduct(
                product_title=item.product_title,
                image_url=item.image_url,
                sku=item.sku,
                unit_price=item.unit_price,
            )
            groups[item.product_title] = group

        group.total_pcs += item.quantity
        group.total_value += item.total_price

        size = extract_size(item.variant_title)
        if size:
            group.sizes[size] = group.sizes.get(size, 0) + item.quantity

    return list(groups.values())
