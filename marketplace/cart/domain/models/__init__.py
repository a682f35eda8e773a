from .cart import CartItem, Promotion


__all__ = [
    "CartItem",
    "Promotion",
]
