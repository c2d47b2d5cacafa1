from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class Money:
    amount: float
    currency_code: str = "EUR"


@dataclass(slots=True, frozen=True)
class SelectedOption:
    name: str
    value: str


@dataclass(slots=True, frozen=True)
class Variant:
    id: str
    title: str
    price: Money
    available: bool = True
    selected_options: tuple[SelectedOption, ...] = ()
    compare_at_price: Money | None = None
    sku: str | None = None
    inventory_quantity: int | None = None
    image_url: str | None = None

    def option(self, name: str) -> str | None:
        lowered = name.lower()
        for option in self.selected_options:
            if option.name.lower() == lowered:
                return option.value
        return None

    @property
    def size_label(self) -> str:
        """Метка для извлечения размера: опция Size/Maat, иначе заголовок варианта."""
        return self.option("size") or self.option("maat") or self.title


@dataclass(slots=True, frozen=True)
class Product:
    id: str
    title: str
    handle: str
    variants: tuple[Variant, ...] = field(default_factory=tuple)
    description: str = ""
    product_type: str | None = None
    vendor: str | None = None
    image_url: str | None = None

    def variant(self, variant_id: str) -> Variant | None:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        return None

    @property
    def category(self) -> str:
        return self.product_type or "Overig"


@dataclass(slots=True)
class Catalog:
    products: list[Product]
    stock: dict[str, int] = field(default_factory=dict)
    stock_known: bool = True

    def find_variant(self, variant_id: str) -> tuple[Product, Variant] | None:
        for product in self.products:
            variant = product.variant(variant_id)
            if variant is not None:
                return product, variant
        return None

    def categories(self) -> list[str]:
        seen: list[str] = []
        for product in self.products:
            if product.category not in seen:
                seen.append(product.category)
        return seen

    def search(self, query: str = "", category: str | None = None) -> list[Product]:
        needle = query.strip().lower()
        result = []
        for product in self.products:
            if category and category != "all" and product.category != category:
                continue
            if needle:
                skus = " ".join(v.sku or "" for v in product.variants).lower()
                if needle not in product.title.lower() and needle not in skus:
                    continue
            result.append(product)
        return result
