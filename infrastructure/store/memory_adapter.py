"""
In-Memory Store Adapter
=======================

Dict-backed implementation of StoreInterface for testing and development.

Holds every table in process memory, enforces the same (user, product)
uniqueness as the database and raises ``StoreException`` with the matching
SQLSTATE codes, so services behave identically against it. Product, store
and order ids are UUIDs here too: a malformed one fails with 22P02.
"""

import itertools
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from .interface import (
    FOREIGN_KEY_VIOLATION,
    INVALID_TEXT_REPRESENTATION,
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

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _uuid_key(value) -> str:
    """Canonical form of a UUID key; malformed input fails like the database cast does."""
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        raise StoreException(
            f'invalid input syntax for type uuid: "{value}"', code=INVALID_TEXT_REPRESENTATION
        ) from None


class InMemoryStoreAdapter(StoreInterface):
    """
    In-memory store for unit tests and local runs.

    Besides the StoreInterface operations it offers seeding helpers
    (``add_product``, ``add_promotion``, ``add_user``...) used to build test
    fixtures without a database.
    """

    def __init__(self):
        self.products: Dict[str, ProductRecord] = {}
        self.categories: Dict[str, CategoryRecord] = {}
        self.cart_items: Dict[str, CartItemRecord] = {}
        self.ratings: Dict[str, RatingRecord] = {}
        self.promotions: Dict[str, PromotionRecord] = {}
        self.wishlist_items: Dict[str, WishlistItemRecord] = {}
        self.images: Dict[str, ProductImageRecord] = {}
        self.stores: Dict[str, StoreRecord] = {}
        self.orders: Dict[str, OrderRecord] = {}
        self.order_items: Dict[str, OrderItemRecord] = {}
        self.status_history: List[OrderStatusRecord] = []
        self.user_names: Dict[str, str] = {}

        # Insertion sequence, breaks ties between equal timestamps
        self._sequence = itertools.count()
        self._order_of: Dict[str, int] = {}

    def _track(self, record_id: str) -> None:
        self._order_of[record_id] = next(self._sequence)

    def _newest_first(self, rows):
        return sorted(
            rows,
            key=lambda row: (row.created_at, self._order_of.get(row.id, 0)),
            reverse=True,
        )

    # ----- seeding helpers -----

    def add_user(self, user_id: str, full_name: Optional[str] = None) -> str:
        self.user_names[str(user_id)] = full_name
        return str(user_id)

    def add_category(self, name: str, parent_id: Optional[str] = None, **fields) -> CategoryRecord:
        category = CategoryRecord(
            id=str(fields.pop("id", None) or _new_id()),
            name=name,
            slug=fields.pop("slug", name.lower().replace(" ", "-")),
            parent_id=parent_id,
            **fields,
        )
        self.categories[category.id] = category
        return category

    def add_product(self, **fields) -> ProductRecord:
        product_id = str(fields.pop("id", None) or _new_id())
        title = fields.pop("title", "Product")
        now = _now()
        product = ProductRecord(
            id=product_id,
            title=title,
            slug=fields.pop("slug", title.lower().replace(" ", "-")),
            price=Decimal(str(fields.pop("price", "10.00"))),
            stock=fields.pop("stock", 10),
            created_at=fields.pop("created_at", now),
            updated_at=fields.pop("updated_at", now),
            **fields,
        )
        self.products[product_id] = product
        self._track(product_id)
        return product

    def remove_product(self, product_id: str) -> None:
        """Drop a product row without touching the rows that reference it."""
        self.products.pop(product_id, None)

    def add_promotion(self, code: str, discount_percentage, active: bool = True) -> PromotionRecord:
        promotion = PromotionRecord(
            id=_new_id(),
            code=code.strip().upper(),
            discount_percentage=Decimal(str(discount_percentage)),
            active=active,
        )
        self.promotions[promotion.id] = promotion
        return promotion

    def add_image(self, product_id: str, url: str, display_order: int = 0, is_primary: bool = False) -> ProductImageRecord:
        image = ProductImageRecord(
            id=_new_id(), product_id=product_id, url=url, display_order=display_order, is_primary=is_primary
        )
        self.images[image.id] = image
        self._track(image.id)
        return image

    def add_store(self, owner_id: str, name: str = "Store", **fields) -> StoreRecord:
        store = StoreRecord(
            id=str(fields.pop("id", None) or _new_id()),
            name=name,
            slug=fields.pop("slug", name.lower().replace(" ", "-")),
            owner_id=str(owner_id),
            created_at=fields.pop("created_at", _now()),
            **fields,
        )
        self.stores[store.id] = store
        self._track(store.id)
        return store

    def add_order(self, store_id: str, user_id: str, total_amount, status: str = "created", **fields) -> OrderRecord:
        order = OrderRecord(
            id=str(fields.pop("id", None) or _new_id()),
            user_id=str(user_id),
            store_id=store_id,
            status=status,
            total_amount=Decimal(str(total_amount)),
            created_at=fields.pop("created_at", _now()),
            **fields,
        )
        self.orders[order.id] = order
        self._track(order.id)
        return order

    def add_order_item(self, order_id: str, product_id: Optional[str], quantity: int, price) -> OrderItemRecord:
        price = Decimal(str(price))
        item = OrderItemRecord(
            id=_new_id(),
            order_id=order_id,
            product_id=product_id,
            quantity=quantity,
            price_at_purchase=price,
            total_price=price * quantity,
            product_title=self.products[product_id].title if product_id in self.products else None,
        )
        self.order_items[item.id] = item
        return item

    # ----- products -----

    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        product = self.products.get(_uuid_key(product_id))
        if product is None:
            return None
        return replace(product, primary_image_url=self._primary_image_url(product.id))

    def get_product_by_slug(self, slug: str) -> Optional[ProductRecord]:
        for product in self.products.values():
            if product.slug == slug:
                return self.get_product(product.id)
        return None

    def _primary_image_url(self, product_id: str) -> Optional[str]:
        images = self.list_product_images(product_id)
        for image in images:
            if image.is_primary:
                return image.url
        return images[0].url if images else None

    def search_products(self, query: ProductQuery) -> Tuple[List[ProductRecord], int]:
        rows = [self.get_product(product_id) for product_id in self.products]

        if query.text:
            needle = query.text.lower()
            rows = [p for p in rows if needle in p.title.lower() or needle in (p.description or "").lower()]
        if query.category_id is not None:
            rows = [p for p in rows if p.category_id == query.category_id]
        if query.category_slug is not None:
            rows = [p for p in rows if p.category_slug == query.category_slug]
        if query.min_price is not None:
            rows = [p for p in rows if p.price >= query.min_price]
        if query.max_price is not None:
            rows = [p for p in rows if p.price <= query.max_price]
        if query.min_rating is not None:
            rows = [p for p in rows if p.rating >= query.min_rating]
        if query.featured is not None:
            rows = [p for p in rows if p.featured == query.featured]
        if query.exclude_id is not None:
            rows = [p for p in rows if p.id != query.exclude_id]

        # Stable secondary order: insertion sequence
        rows.sort(key=lambda p: self._order_of.get(p.id, 0))
        rows.sort(key=lambda p: getattr(p, query.sort_by), reverse=not query.ascending)

        total = len(rows)
        end = None if query.limit is None else query.offset + query.limit
        return rows[query.offset : end], total

    def set_product_rating(self, product_id: str, rating: float, rating_count: int) -> None:
        product_id = _uuid_key(product_id)
        product = self.products.get(product_id)
        if product is None:
            return
        self.products[product_id] = replace(product, rating=rating, rating_count=rating_count, updated_at=_now())

    # ----- categories -----

    def list_categories(self, parent_id: Optional[str] = None, top_level: bool = False) -> List[CategoryRecord]:
        rows = list(self.categories.values())
        if parent_id is not None:
            parent_id = _uuid_key(parent_id)
            rows = [c for c in rows if c.parent_id == parent_id]
        if top_level:
            rows = [c for c in rows if c.parent_id is None]
        return sorted(rows, key=lambda c: (c.name, c.id))

    def get_category_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        for category in self.categories.values():
            if category.slug == slug:
                return category
        return None

    # ----- cart -----

    def list_cart_items(self, user_id: str) -> List[Tuple[CartItemRecord, Optional[ProductRecord]]]:
        items = [item for item in self.cart_items.values() if item.user_id == str(user_id)]
        items.sort(key=lambda item: (item.created_at, self._order_of.get(item.id, 0)))
        return [(item, self.get_product(item.product_id)) for item in items]

    def find_cart_item(
        self, user_id: str, item_id: Optional[str] = None, product_id: Optional[str] = None
    ) -> Optional[CartItemRecord]:
        if product_id is not None:
            product_id = _uuid_key(product_id)
        for item in self.cart_items.values():
            if item.user_id != str(user_id):
                continue
            if item_id is not None and item.id != str(item_id):
                continue
            if product_id is not None and item.product_id != product_id:
                continue
            return item
        return None

    def insert_cart_item(self, user_id: str, product_id: str, quantity: int) -> CartItemRecord:
        product_id = _uuid_key(product_id)
        if product_id not in self.products:
            raise StoreException(
                'insert or update on table "cart_items" violates foreign key constraint',
                code=FOREIGN_KEY_VIOLATION,
            )
        if self.find_cart_item(user_id, product_id=product_id) is not None:
            raise StoreException(
                'duplicate key value violates unique constraint "unique_cart_item_per_user"',
                code=UNIQUE_VIOLATION,
            )
        now = _now()
        item = CartItemRecord(
            id=_new_id(), user_id=str(user_id), product_id=product_id, quantity=quantity, created_at=now, updated_at=now
        )
        self.cart_items[item.id] = item
        self._track(item.id)
        return item

    def update_cart_item_quantity(self, item_id: str, quantity: int, expected_quantity: Optional[int] = None) -> bool:
        item = self.cart_items.get(item_id)
        if item is None:
            return False
        if expected_quantity is not None and item.quantity != expected_quantity:
            return False
        self.cart_items[item_id] = replace(item, quantity=quantity, updated_at=_now())
        return True

    def delete_cart_item(self, item_id: str) -> None:
        self.cart_items.pop(item_id, None)

    def delete_cart_items(self, user_id: str) -> int:
        doomed = [item_id for item_id, item in self.cart_items.items() if item.user_id == str(user_id)]
        for item_id in doomed:
            del self.cart_items[item_id]
        return len(doomed)

    # ----- ratings -----

    def _with_name(self, rating: RatingRecord) -> RatingRecord:
        return replace(rating, user_full_name=self.user_names.get(rating.user_id))

    def find_rating(
        self, user_id: str, rating_id: Optional[str] = None, product_id: Optional[str] = None
    ) -> Optional[RatingRecord]:
        if product_id is not None:
            product_id = _uuid_key(product_id)
        for rating in self.ratings.values():
            if rating.user_id != str(user_id):
                continue
            if rating_id is not None and rating.id != str(rating_id):
                continue
            if product_id is not None and rating.product_id != product_id:
                continue
            return self._with_name(rating)
        return None

    def insert_rating(self, user_id: str, product_id: str, rating: int, comment: Optional[str]) -> RatingRecord:
        product_id = _uuid_key(product_id)
        if product_id not in self.products:
            raise StoreException(
                'insert or update on table "product_ratings" violates foreign key constraint',
                code=FOREIGN_KEY_VIOLATION,
            )
        if self.find_rating(user_id, product_id=product_id) is not None:
            raise StoreException(
                'duplicate key value violates unique constraint "unique_product_rating_per_user"',
                code=UNIQUE_VIOLATION,
            )
        now = _now()
        record = RatingRecord(
            id=_new_id(),
            user_id=str(user_id),
            product_id=product_id,
            rating=rating,
            comment=comment,
            created_at=now,
            updated_at=now,
        )
        self.ratings[record.id] = record
        self._track(record.id)
        return self._with_name(record)

    def update_rating(self, rating_id: str, rating: int, comment: Optional[str]) -> RatingRecord:
        record = self.ratings.get(rating_id)
        if record is None:
            raise StoreException(f"Rating {rating_id} does not exist")
        record = replace(record, rating=rating, comment=comment, updated_at=_now())
        self.ratings[rating_id] = record
        return self._with_name(record)

    def delete_rating(self, rating_id: str) -> None:
        self.ratings.pop(rating_id, None)

    def list_product_ratings(self, product_id: str, offset: int, limit: int) -> Tuple[List[RatingRecord], int]:
        product_id = _uuid_key(product_id)
        rows = self._newest_first(r for r in self.ratings.values() if r.product_id == product_id)
        return [self._with_name(r) for r in rows[offset : offset + limit]], len(rows)

    def calculate_product_rating(self, product_id: str) -> Optional[Tuple[float, int]]:
        product_id = _uuid_key(product_id)
        values = [r.rating for r in self.ratings.values() if r.product_id == product_id]
        if not values:
            return None
        return sum(values) / len(values), len(values)

    # ----- promotions -----

    def find_active_promotion(self, code: str) -> Optional[PromotionRecord]:
        for promotion in self.promotions.values():
            if promotion.active and promotion.code == code:
                return promotion
        return None

    # ----- wishlist -----

    def list_wishlist_items(self, user_id: str) -> List[Tuple[WishlistItemRecord, Optional[ProductRecord]]]:
        items = self._newest_first(w for w in self.wishlist_items.values() if w.user_id == str(user_id))
        return [(item, self.get_product(item.product_id)) for item in items]

    def find_wishlist_item(self, user_id: str, product_id: str) -> Optional[WishlistItemRecord]:
        product_id = _uuid_key(product_id)
        for item in self.wishlist_items.values():
            if item.user_id == str(user_id) and item.product_id == product_id:
                return item
        return None

    def insert_wishlist_item(self, user_id: str, product_id: str) -> WishlistItemRecord:
        product_id = _uuid_key(product_id)
        if self.find_wishlist_item(user_id, product_id) is not None:
            raise StoreException(
                'duplicate key value violates unique constraint "unique_wishlist_item_per_user"',
                code=UNIQUE_VIOLATION,
            )
        item = WishlistItemRecord(id=_new_id(), user_id=str(user_id), product_id=product_id, created_at=_now())
        self.wishlist_items[item.id] = item
        self._track(item.id)
        return item

    def delete_wishlist_item(self, user_id: str, product_id: str) -> int:
        item = self.find_wishlist_item(user_id, product_id)
        if item is None:
            return 0
        del self.wishlist_items[item.id]
        return 1

    # ----- product images -----

    def list_product_images(self, product_id: str) -> List[ProductImageRecord]:
        product_id = _uuid_key(product_id)
        images = [image for image in self.images.values() if image.product_id == product_id]
        return sorted(images, key=lambda image: (image.display_order, self._order_of.get(image.id, 0)))

    def update_product_image(
        self, image_id: str, display_order: Optional[int] = None, is_primary: Optional[bool] = None
    ) -> Optional[ProductImageRecord]:
        image = self.images.get(image_id)
        if image is None:
            return None
        if display_order is not None:
            image = replace(image, display_order=display_order)
        if is_primary is not None:
            image = replace(image, is_primary=is_primary)
        self.images[image_id] = image
        return image

    # ----- stores & orders -----

    def get_store(self, store_id: str) -> Optional[StoreRecord]:
        return self.stores.get(_uuid_key(store_id))

    def get_store_by_slug(self, slug: str) -> Optional[StoreRecord]:
        for store in self.stores.values():
            if store.slug == slug:
                return store
        return None

    def list_stores_by_owner(self, owner_id: str) -> List[StoreRecord]:
        return self._newest_first(store for store in self.stores.values() if store.owner_id == str(owner_id))

    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        return self.orders.get(_uuid_key(order_id))

    def list_order_items(self, order_id: str) -> List[OrderItemRecord]:
        order_id = _uuid_key(order_id)
        return [item for item in self.order_items.values() if item.order_id == order_id]

    def _store_orders(self, store_id: str, filters: OrderFilters) -> List[OrderRecord]:
        store_id = _uuid_key(store_id)
        rows = [order for order in self.orders.values() if order.store_id == store_id]

        if filters.statuses:
            rows = [o for o in rows if o.status in filters.statuses]
        if filters.exclude_statuses:
            rows = [o for o in rows if o.status not in filters.exclude_statuses]
        if filters.start_date is not None:
            rows = [o for o in rows if o.created_at >= filters.start_date]
        if filters.end_date is not None:
            rows = [o for o in rows if o.created_at <= filters.end_date]
        if filters.customer_id is not None:
            rows = [o for o in rows if o.user_id == str(filters.customer_id)]
        if filters.min_amount is not None:
            rows = [o for o in rows if o.total_amount >= filters.min_amount]
        if filters.max_amount is not None:
            rows = [o for o in rows if o.total_amount <= filters.max_amount]
        return rows

    def list_store_orders(
        self, store_id: str, filters: OrderFilters, offset: int = 0, limit: Optional[int] = None
    ) -> Tuple[List[OrderRecord], int]:
        rows = self._newest_first(self._store_orders(store_id, filters))
        end = None if limit is None else offset + limit
        return rows[offset:end], len(rows)

    def list_store_order_items(self, store_id: str, filters: OrderFilters) -> List[OrderItemRecord]:
        order_ids = {order.id for order in self._store_orders(store_id, filters)}
        return [item for item in self.order_items.values() if item.order_id in order_ids]

    def update_order_status(
        self, order_id: str, status: str, changed_by: Optional[str] = None, notes: Optional[str] = None
    ) -> Optional[OrderRecord]:
        order = self.orders.get(_uuid_key(order_id))
        if order is None:
            return None
        order = replace(order, status=status, updated_at=_now())
        self.orders[order.id] = order
        self.status_history.append(
            OrderStatusRecord(
                id=_new_id(),
                order_id=order.id,
                status=status,
                changed_by=str(changed_by) if changed_by is not None else None,
                notes=notes,
                changed_at=_now(),
            )
        )
        logger.debug(f"Order {order.id} moved to {status}")
        return order

    def list_order_status_history(self, order_id: str) -> List[OrderStatusRecord]:
        order_id = _uuid_key(order_id)
        rows = [entry for entry in self.status_history if entry.order_id == order_id]
        return list(reversed(rows))
