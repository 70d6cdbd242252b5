"""Cart package: models, snapshot storage, and the stock-checked cart store."""
from .errors import CartErrorKind
from .models import Cart, CartItem, ProductInfo, StockInfo
from .store import CartResult, CartStore, create_cart_store, get_cart_store

__all__ = [
    "Cart",
    "CartItem",
    "CartErrorKind",
    "CartResult",
    "CartStore",
    "ProductInfo",
    "StockInfo",
    "create_cart_store",
    "get_cart_store",
]
