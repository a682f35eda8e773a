from .catalog import Product, ProductImage
from .category import Category
from .interaction import ProductRating, WishlistItem
from .store import Store


__all__ = [
    "Product",
    "ProductImage",
    "Category",
    "ProductRating",
    "WishlistItem",
    "Store",
]
