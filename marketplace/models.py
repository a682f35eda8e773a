from marketplace.cart.domain.models import CartItem, Promotion
from marketplace.catalog.domain.models import (
    Category,
    Product,
    ProductImage,
    ProductRating,
    Store,
    WishlistItem,
)
from marketplace.ordering.domain.models import Order, OrderItem, OrderStatusHistory


__all__ = [
    "Category",
    "Store",
    "Product",
    "ProductImage",
    "CartItem",
    "Promotion",
    "ProductRating",
    "WishlistItem",
    "Order",
    "OrderItem",
    "OrderStatusHistory",
]
