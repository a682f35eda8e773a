"""
Store Abstraction Layer
=======================

Client handle for the marketplace's relational store. Services receive a
StoreInterface explicitly; the factory picks the backend from settings.
"""

from .django_adapter import DjangoStoreAdapter
from .factory import StoreFactory
from .interface import (
    FOREIGN_KEY_VIOLATION,
    INVALID_TEXT_REPRESENTATION,
    NOT_NULL_VIOLATION,
    UNIQUE_VIOLATION,
    CartItemRecord,
    CategoryRecord,
    OrderFilters,
    OrderItemRecord,
    OrderRecord,
    OrderStatusRecord,
    ProductImageRecord,
    ProductQuery,
    ProductRecord,
    PromotionRecord,
    RatingRecord,
    StoreException,
    StoreInterface,
    StoreRecord,
    WishlistItemRecord,
)
from .memory_adapter import InMemoryStoreAdapter

__all__ = [
    "StoreInterface",
    "StoreException",
    "StoreFactory",
    "DjangoStoreAdapter",
    "InMemoryStoreAdapter",
    "ProductRecord",
    "ProductQuery",
    "CartItemRecord",
    "CategoryRecord",
    "RatingRecord",
    "PromotionRecord",
    "WishlistItemRecord",
    "ProductImageRecord",
    "StoreRecord",
    "OrderRecord",
    "OrderItemRecord",
    "OrderStatusRecord",
    "OrderFilters",
    "UNIQUE_VIOLATION",
    "FOREIGN_KEY_VIOLATION",
    "NOT_NULL_VIOLATION",
    "INVALID_TEXT_REPRESENTATION",
]
