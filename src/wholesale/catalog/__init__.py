from .models import Catalog, Money, Product, SelectedOption, Variant
from .shopify import ShopifyClient, variant_gid

__all__ = [
    "Catalog",
    "Money",
    "Product",
    "SelectedOption",
    "ShopifyClient",
    "Variant",
    "variant_gid",
]
