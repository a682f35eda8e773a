"""
Store Interface
===============

Abstract base class defining the contract for the hosted relational store.
Services receive an implementation of this interface explicitly and never
reach for a module-level client.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple


# SQLSTATE codes surfaced by store implementations
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
NOT_NULL_VIOLATION = "23502"
INVALID_TEXT_REPRESENTATION = "22P02"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"


@dataclass(frozen=True)
class ProductRecord:
    id: str
    title: str
    slug: str
    price: Decimal
    stock: int
    description: str = ""
    category_id: Optional[str] = None
    category_slug: Optional[str] = None
    category_name: Optional[str] = None
    seller_id: Optional[str] = None
    store_id: Optional[str] = None
    rating: float = 0.0
    rating_count: int = 0
    featured: bool = False
    primary_image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class CartItemRecord:
    id: str
    user_id: str
    product_id: str
    quantity: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class RatingRecord:
    id: str
    user_id: str
    product_id: str
    rating: int
    comment: Optional[str] = None
    user_full_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class PromotionRecord:
    id: str
    code: str
    discount_percentage: Decimal
    active: bool = True


@dataclass(frozen=True)
class WishlistItemRecord:
    id: str
    user_id: str
    product_id: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProductImageRecord:
    id: str
    product_id: str
    url: str
    alt_text: str = ""
    display_order: int = 0
    is_primary: bool = False


@dataclass(frozen=True)
class CategoryRecord:
    id: str
    name: str
    slug: str
    description: str = ""
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class StoreRecord:
    id: str
    name: str
    slug: str
    owner_id: str
    description: str = ""
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderRecord:
    id: str
    user_id: str
    store_id: str
    status: str
    total_amount: Decimal
    subtotal: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    shipping_amount: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    currency: str = "USD"
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderItemRecord:
    id: str
    order_id: str
    product_id: Optional[str]
    quantity: int
    price_at_purchase: Decimal
    total_price: Decimal
    product_title: Optional[str] = None


@dataclass(frozen=True)
class OrderStatusRecord:
    id: str
    order_id: str
    status: str
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    changed_at: Optional[datetime] = None


@dataclass(frozen=True)
class ProductQuery:
    """
    Fully composed product query.

    Built by ``ProductQueryBuilder``; store implementations apply the
    predicates in declaration order.
    """

    text: Optional[str] = None
    category_id: Optional[str] = None
    category_slug: Optional[str] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_rating: Optional[float] = None
    featured: Optional[bool] = None
    exclude_id: Optional[str] = None
    sort_by: str = "created_at"
    ascending: bool = False
    offset: int = 0
    limit: Optional[int] = None


@dataclass(frozen=True)
class OrderFilters:
    statuses: List[str] = field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    customer_id: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    exclude_statuses: List[str] = field(default_factory=list)


class StoreInterface(ABC):
    """
    Abstract interface for the marketplace data store.

    Concrete implementations:
        - DjangoStoreAdapter: Django ORM over the marketplace tables
        - InMemoryStoreAdapter: dict-backed store for tests and local runs

    Every method raises ``StoreException`` on failure. Look-ups return
    ``None`` when the row does not exist.
    """

    # ----- products -----

    @abstractmethod
    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        """Fetch a single product, or None."""
        pass

    @abstractmethod
    def get_product_by_slug(self, slug: str) -> Optional[ProductRecord]:
        pass

    @abstractmethod
    def search_products(self, query: ProductQuery) -> Tuple[List[ProductRecord], int]:
        """
        Run a composed product query.

        Returns:
            (rows in the requested range, total matching rows before ranging)
        """
        pass

    @abstractmethod
    def set_product_rating(self, product_id: str, rating: float, rating_count: int) -> None:
        """Overwrite the aggregate rating fields of a product."""
        pass

    # ----- categories -----

    @abstractmethod
    def list_categories(self, parent_id: Optional[str] = None, top_level: bool = False) -> List[CategoryRecord]:
        """
        Categories ordered by name.

        ``parent_id`` keeps the direct children of that category;
        ``top_level`` keeps categories without a parent.
        """
        pass

    @abstractmethod
    def get_category_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        pass

    # ----- cart -----

    @abstractmethod
    def list_cart_items(self, user_id: str) -> List[Tuple[CartItemRecord, Optional[ProductRecord]]]:
        """Cart rows for a user joined with their product (None if the product is gone)."""
        pass

    @abstractmethod
    def find_cart_item(
        self, user_id: str, item_id: Optional[str] = None, product_id: Optional[str] = None
    ) -> Optional[CartItemRecord]:
        """Find a cart row owned by ``user_id`` by id or by product."""
        pass

    @abstractmethod
    def insert_cart_item(self, user_id: str, product_id: str, quantity: int) -> CartItemRecord:
        pass

    @abstractmethod
    def update_cart_item_quantity(
        self, item_id: str, quantity: int, expected_quantity: Optional[int] = None
    ) -> bool:
        """
        Write a new quantity.

        When ``expected_quantity`` is given the write only happens if the row
        still holds that quantity.

        Returns:
            True if a row was updated, False otherwise
        """
        pass

    @abstractmethod
    def delete_cart_item(self, item_id: str) -> None:
        pass

    @abstractmethod
    def delete_cart_items(self, user_id: str) -> int:
        """Delete every cart row of a user; returns the number removed."""
        pass

    # ----- ratings -----

    @abstractmethod
    def find_rating(
        self, user_id: str, rating_id: Optional[str] = None, product_id: Optional[str] = None
    ) -> Optional[RatingRecord]:
        pass

    @abstractmethod
    def insert_rating(self, user_id: str, product_id: str, rating: int, comment: Optional[str]) -> RatingRecord:
        pass

    @abstractmethod
    def update_rating(self, rating_id: str, rating: int, comment: Optional[str]) -> RatingRecord:
        pass

    @abstractmethod
    def delete_rating(self, rating_id: str) -> None:
        pass

    @abstractmethod
    def list_product_ratings(self, product_id: str, offset: int, limit: int) -> Tuple[List[RatingRecord], int]:
        """Ratings newest first with the rater's display name, plus the total count."""
        pass

    @abstractmethod
    def calculate_product_rating(self, product_id: str) -> Optional[Tuple[float, int]]:
        """
        Aggregate the stored ratings of a product.

        Returns:
            (average, count) or None when the product has no ratings
        """
        pass

    # ----- promotions -----

    @abstractmethod
    def find_active_promotion(self, code: str) -> Optional[PromotionRecord]:
        """Exact, case-sensitive match on an active promotion code."""
        pass

    # ----- wishlist -----

    @abstractmethod
    def list_wishlist_items(self, user_id: str) -> List[Tuple[WishlistItemRecord, Optional[ProductRecord]]]:
        pass

    @abstractmethod
    def find_wishlist_item(self, user_id: str, product_id: str) -> Optional[WishlistItemRecord]:
        pass

    @abstractmethod
    def insert_wishlist_item(self, user_id: str, product_id: str) -> WishlistItemRecord:
        """Raises StoreException(UNIQUE_VIOLATION) if the pair already exists."""
        pass

    @abstractmethod
    def delete_wishlist_item(self, user_id: str, product_id: str) -> int:
        pass

    # ----- product images -----

    @abstractmethod
    def list_product_images(self, product_id: str) -> List[ProductImageRecord]:
        """Images ordered by display_order."""
        pass

    @abstractmethod
    def update_product_image(
        self, image_id: str, display_order: Optional[int] = None, is_primary: Optional[bool] = None
    ) -> Optional[ProductImageRecord]:
        pass

    # ----- stores & orders -----

    @abstractmethod
    def get_store(self, store_id: str) -> Optional[StoreRecord]:
        pass

    @abstractmethod
    def get_store_by_slug(self, slug: str) -> Optional[StoreRecord]:
        pass

    @abstractmethod
    def list_stores_by_owner(self, owner_id: str) -> List[StoreRecord]:
        """Stores of an owner, newest first."""
        pass

    @abstractmethod
    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        pass

    @abstractmethod
    def list_order_items(self, order_id: str) -> List[OrderItemRecord]:
        pass

    @abstractmethod
    def list_store_orders(
        self, store_id: str, filters: OrderFilters, offset: int = 0, limit: Optional[int] = None
    ) -> Tuple[List[OrderRecord], int]:
        """Orders of a store newest first, plus the total count."""
        pass

    @abstractmethod
    def list_store_order_items(self, store_id: str, filters: OrderFilters) -> List[OrderItemRecord]:
        """Line items of the store orders matching ``filters``."""
        pass

    @abstractmethod
    def update_order_status(
        self, order_id: str, status: str, changed_by: Optional[str] = None, notes: Optional[str] = None
    ) -> Optional[OrderRecord]:
        """Write a status and append an order_status_history row."""
        pass

    @abstractmethod
    def list_order_status_history(self, order_id: str) -> List[OrderStatusRecord]:
        """History rows, most recent first."""
        pass


class StoreException(Exception):
    """
    Failure raised by a store implementation.

    Attributes:
        code: SQLSTATE-style error code (e.g. "23505"), or None
        message: Human-readable message
        hint: Optional hint from the backend
    """

    def __init__(self, message: str, code: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint
