from .inventory import UNKNOWN_STOCK_CAP, InventoryReconciler
from .models import Cart, CartItem

__all__ = ["UNKNOWN_STOCK_CAP", "Cart", "CartItem", "InventoryReconciler"]
