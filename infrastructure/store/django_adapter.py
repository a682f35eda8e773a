"""
Django Store Adapter
====================

Concrete implementation of StoreInterface over the marketplace tables using
the Django ORM. Database failures are translated into ``StoreException``
carrying a PostgreSQL SQLSTATE code.
"""

import logging
from functools import wraps
from typing import List, Optional, Tuple

from django.core.exceptions import ValidationError
from django.db import DatabaseError, IntegrityError, connection, transaction
from django.db.models import Avg, Count, Q
from django.utils import timezone

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

logger = logging.getLogger(__name__)


def _sqlstate(error: Exception) -> Optional[str]:
    """Read the SQLSTATE from the DB-API error wrapped by Django, if the driver exposes one."""
    cause = error.__cause__
    return getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)


def _integrity_code(error: IntegrityError) -> Optional[str]:
    code = _sqlstate(error)
    if code:
        return code

    # SQLite does not expose SQLSTATE codes
    message = str(error).lower()
    if "unique" in message:
        return UNIQUE_VIOLATION
    if "foreign key" in message:
        return FOREIGN_KEY_VIOLATION
    if "not null" in message:
        return NOT_NULL_VIOLATION
    return None


def translate_errors(func):
    """Re-raise ORM failures as StoreException."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreException:
            raise
        except IntegrityError as e:
            raise StoreException(str(e), code=_integrity_code(e)) from e
        except (ValidationError, ValueError) as e:
            # Malformed identifiers, e.g. a non-UUID product id
            message = "; ".join(e.messages) if isinstance(e, ValidationError) else str(e)
            raise StoreException(message, code=INVALID_TEXT_REPRESENTATION) from e
        except DatabaseError as e:
            logger.error(f"Database error in {func.__name__}: {str(e)}")
            raise StoreException(str(e), code=_sqlstate(e)) from e

    return wrapper


def _product_record(product) -> ProductRecord:
    images = list(product.images.all())
    primary = next((image for image in images if image.is_primary), images[0] if images else None)
    category = product.category
    return ProductRecord(
        id=str(product.id),
        title=product.title,
        slug=product.slug,
        price=product.price,
        stock=product.stock,
        description=product.description,
        category_id=str(category.id) if category else None,
        category_slug=category.slug if category else None,
        category_name=category.name if category else None,
        seller_id=str(product.seller_id),
        store_id=str(product.store_id) if product.store_id else None,
        rating=product.rating,
        rating_count=product.rating_count,
        featured=product.featured,
        primary_image_url=primary.url if primary else None,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _cart_item_record(item) -> CartItemRecord:
    return CartItemRecord(
        id=str(item.id),
        user_id=str(item.user_id),
        product_id=str(item.product_id),
        quantity=item.quantity,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _rating_record(rating) -> RatingRecord:
    return RatingRecord(
        id=str(rating.id),
        user_id=str(rating.user_id),
        product_id=str(rating.product_id),
        rating=rating.rating,
        comment=rating.comment,
        user_full_name=rating.user.get_full_name() or None,
        created_at=rating.created_at,
        updated_at=rating.updated_at,
    )


def _image_record(image) -> ProductImageRecord:
    return ProductImageRecord(
        id=str(image.id),
        product_id=str(image.product_id),
        url=image.url,
        alt_text=image.alt_text,
        display_order=image.display_order,
        is_primary=image.is_primary,
    )


def _category_record(category) -> CategoryRecord:
    return CategoryRecord(
        id=str(category.id),
        name=category.name,
        slug=category.slug,
        description=category.description,
        parent_id=str(category.parent_id) if category.parent_id else None,
    )


def _store_record(store) -> StoreRecord:
    return StoreRecord(
        id=str(store.id),
        name=store.name,
        slug=store.slug,
        owner_id=str(store.owner_id),
        description=store.description,
        created_at=store.created_at,
    )


def _order_item_record(item) -> OrderItemRecord:
    return OrderItemRecord(
        id=str(item.id),
        order_id=str(item.order_id),
        product_id=str(item.product_id) if item.product_id else None,
        quantity=item.quantity,
        price_at_purchase=item.price_at_purchase,
        total_price=item.total_price,
        product_title=item.product_title or None,
    )


def _order_record(order) -> OrderRecord:
    return OrderRecord(
        id=str(order.id),
        user_id=str(order.user_id),
        store_id=str(order.store_id),
        status=order.status,
        total_amount=order.total_amount,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        shipping_amount=order.shipping_amount,
        discount_amount=order.discount_amount,
        currency=order.currency,
        tracking_number=order.tracking_number or None,
        notes=order.notes or None,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


class DjangoStoreAdapter(StoreInterface):
    """
    Store implementation backed by the Django ORM.

    Configuration (in settings.py):
        INFRASTRUCTURE["STORE_BACKEND"] = "django"
    """

    def __init__(self):
        # Imported lazily so the adapter module loads before the app registry
        from marketplace import models

        self.models = models

    def _products(self):
        return self.models.Product.objects.select_related("category").prefetch_related("images")

    # ----- products -----

    @translate_errors
    def get_product(self, product_id: str) -> Optional[ProductRecord]:
        product = self._products().filter(id=product_id).first()
        return _product_record(product) if product else None

    @translate_errors
    def get_product_by_slug(self, slug: str) -> Optional[ProductRecord]:
        product = self._products().filter(slug=slug).first()
        return _product_record(product) if product else None

    @translate_errors
    def search_products(self, query: ProductQuery) -> Tuple[List[ProductRecord], int]:
        queryset = self._products()

        if query.text:
            if connection.vendor == "postgresql":
                from django.contrib.postgres.search import SearchQuery, SearchVector

                vector = SearchVector("title", weight="A") + SearchVector("description", weight="B")
                queryset = queryset.annotate(search=vector).filter(
                    search=SearchQuery(query.text, search_type="websearch", config="english")
                )
            else:
                queryset = queryset.filter(Q(title__icontains=query.text) | Q(description__icontains=query.text))
        if query.category_id is not None:
            queryset = queryset.filter(category_id=query.category_id)
        if query.category_slug is not None:
            queryset = queryset.filter(category__slug=query.category_slug)
        if query.min_price is not None:
            queryset = queryset.filter(price__gte=query.min_price)
        if query.max_price is not None:
            queryset = queryset.filter(price__lte=query.max_price)
        if query.min_rating is not None:
            queryset = queryset.filter(rating__gte=query.min_rating)
        if query.featured is not None:
            queryset = queryset.filter(featured=query.featured)
        if query.exclude_id is not None:
            queryset = queryset.exclude(id=query.exclude_id)

        direction = "" if query.ascending else "-"
        queryset = queryset.order_by(f"{direction}{query.sort_by}", "id")

        total = queryset.count()
        if query.limit is None:
            rows = queryset[query.offset :]
        else:
            rows = queryset[query.offset : query.offset + query.limit]
        return [_product_record(product) for product in rows], total

    @translate_errors
    def set_product_rating(self, product_id: str, rating: float, rating_count: int) -> None:
        self.models.Product.objects.filter(id=product_id).update(
            rating=rating, rating_count=rating_count, updated_at=timezone.now()
        )

    # ----- categories -----

    @translate_errors
    def list_categories(self, parent_id: Optional[str] = None, top_level: bool = False) -> List[CategoryRecord]:
        queryset = self.models.Category.objects.all()
        if parent_id is not None:
            queryset = queryset.filter(parent_id=parent_id)
        if top_level:
            queryset = queryset.filter(parent__isnull=True)
        return [_category_record(category) for category in queryset.order_by("name", "id")]

    @translate_errors
    def get_category_by_slug(self, slug: str) -> Optional[CategoryRecord]:
        category = self.models.Category.objects.filter(slug=slug).first()
        return _category_record(category) if category else None

    # ----- cart -----

    @translate_errors
    def list_cart_items(self, user_id: str) -> List[Tuple[CartItemRecord, Optional[ProductRecord]]]:
        items = list(self.models.CartItem.objects.filter(user_id=user_id).order_by("created_at", "id"))
        products = self._products().in_bulk([item.product_id for item in items])
        rows = []
        for item in items:
            product = products.get(item.product_id)
            rows.append((_cart_item_record(item), _product_record(product) if product else None))
        return rows

    @translate_errors
    def find_cart_item(
        self, user_id: str, item_id: Optional[str] = None, product_id: Optional[str] = None
    ) -> Optional[CartItemRecord]:
        queryset = self.models.CartItem.objects.filter(user_id=user_id)
        if item_id is not None:
            queryset = queryset.filter(id=item_id)
        if product_id is not None:
            queryset = queryset.filter(product_id=product_id)
        item = queryset.first()
        return _cart_item_record(item) if item else None

    @translate_errors
    def insert_cart_item(self, user_id: str, product_id: str, quantity: int) -> CartItemRecord:
        with transaction.atomic():
            item = self.models.CartItem.objects.create(user_id=user_id, product_id=product_id, quantity=quantity)
        return _cart_item_record(item)

    @translate_errors
    def update_cart_item_quantity(self, item_id: str, quantity: int, expected_quantity: Optional[int] = None) -> bool:
        queryset = self.models.CartItem.objects.filter(id=item_id)
        if expected_quantity is not None:
            queryset = queryset.filter(quantity=expected_quantity)
        return queryset.update(quantity=quantity, updated_at=timezone.now()) > 0

    @translate_errors
    def delete_cart_item(self, item_id: str) -> None:
        self.models.CartItem.objects.filter(id=item_id).delete()

    @translate_errors
    def delete_cart_items(self, user_id: str) -> int:
        deleted, _ = self.models.CartItem.objects.filter(user_id=user_id).delete()
        return deleted

    # ----- ratings -----

    @translate_errors
    def find_rating(
        self, user_id: str, rating_id: Optional[str] = None, product_id: Optional[str] = None
    ) -> Optional[RatingRecord]:
        queryset = self.models.ProductRating.objects.select_related("user").filter(user_id=user_id)
        if rating_id is not None:
            queryset = queryset.filter(id=rating_id)
        if product_id is not None:
            queryset = queryset.filter(product_id=product_id)
        rating = queryset.first()
        return _rating_record(rating) if rating else None

    @translate_errors
    def insert_rating(self, user_id: str, product_id: str, rating: int, comment: Optional[str]) -> RatingRecord:
        with transaction.atomic():
            row = self.models.ProductRating.objects.create(
                user_id=user_id, product_id=product_id, rating=rating, comment=comment
            )
        return _rating_record(self.models.ProductRating.objects.select_related("user").get(id=row.id))

    @translate_errors
    def update_rating(self, rating_id: str, rating: int, comment: Optional[str]) -> RatingRecord:
        row = self.models.ProductRating.objects.select_related("user").get(id=rating_id)
        row.rating = rating
        row.comment = comment
        row.save(update_fields=["rating", "comment", "updated_at"])
        return _rating_record(row)

    @translate_errors
    def delete_rating(self, rating_id: str) -> None:
        self.models.ProductRating.objects.filter(id=rating_id).delete()

    @translate_errors
    def list_product_ratings(self, product_id: str, offset: int, limit: int) -> Tuple[List[RatingRecord], int]:
        queryset = (
            self.models.ProductRating.objects.select_related("user")
            .filter(product_id=product_id)
            .order_by("-created_at", "-id")
        )
        total = queryset.count()
        return [_rating_record(row) for row in queryset[offset : offset + limit]], total

    @translate_errors
    def calculate_product_rating(self, product_id: str) -> Optional[Tuple[float, int]]:
        aggregate = self.models.ProductRating.objects.filter(product_id=product_id).aggregate(
            average=Avg("rating"), count=Count("id")
        )
        if not aggregate["count"]:
            return None
        return float(aggregate["average"]), aggregate["count"]

    # ----- promotions -----

    @translate_errors
    def find_active_promotion(self, code: str) -> Optional[PromotionRecord]:
        promotion = self.models.Promotion.objects.filter(code=code, active=True).first()
        if promotion is None:
            return None
        return PromotionRecord(
            id=str(promotion.id),
            code=promotion.code,
            discount_percentage=promotion.discount_percentage,
            active=promotion.active,
        )

    # ----- wishlist -----

    @translate_errors
    def list_wishlist_items(self, user_id: str) -> List[Tuple[WishlistItemRecord, Optional[ProductRecord]]]:
        items = list(self.models.WishlistItem.objects.filter(user_id=user_id).order_by("-created_at", "-id"))
        products = self._products().in_bulk([item.product_id for item in items])
        rows = []
        for item in items:
            product = products.get(item.product_id)
            record = WishlistItemRecord(
                id=str(item.id), user_id=str(item.user_id), product_id=str(item.product_id), created_at=item.created_at
            )
            rows.append((record, _product_record(product) if product else None))
        return rows

    @translate_errors
    def find_wishlist_item(self, user_id: str, product_id: str) -> Optional[WishlistItemRecord]:
        item = self.models.WishlistItem.objects.filter(user_id=user_id, product_id=product_id).first()
        if item is None:
            return None
        return WishlistItemRecord(
            id=str(item.id), user_id=str(item.user_id), product_id=str(item.product_id), created_at=item.created_at
        )

    @translate_errors
    def insert_wishlist_item(self, user_id: str, product_id: str) -> WishlistItemRecord:
        with transaction.atomic():
            item = self.models.WishlistItem.objects.create(user_id=user_id, product_id=product_id)
        return WishlistItemRecord(
            id=str(item.id), user_id=str(item.user_id), product_id=str(item.product_id), created_at=item.created_at
        )

    @translate_errors
    def delete_wishlist_item(self, user_id: str, product_id: str) -> int:
        deleted, _ = self.models.WishlistItem.objects.filter(user_id=user_id, product_id=product_id).delete()
        return deleted

    # ----- product images -----

    @translate_errors
    def list_product_images(self, product_id: str) -> List[ProductImageRecord]:
        images = self.models.ProductImage.objects.filter(product_id=product_id).order_by("display_order", "id")
        return [_image_record(image) for image in images]

    @translate_errors
    def update_product_image(
        self, image_id: str, display_order: Optional[int] = None, is_primary: Optional[bool] = None
    ) -> Optional[ProductImageRecord]:
        image = self.models.ProductImage.objects.filter(id=image_id).first()
        if image is None:
            return None
        if display_order is not None:
            image.display_order = display_order
        if is_primary is not None:
            image.is_primary = is_primary
        image.save(update_fields=["display_order", "is_primary"])
        return _image_record(image)

    # ----- stores & orders -----

    @translate_errors
    def get_store(self, store_id: str) -> Optional[StoreRecord]:
        store = self.models.Store.objects.filter(id=store_id).first()
        return _store_record(store) if store else None

    @translate_errors
    def get_store_by_slug(self, slug: str) -> Optional[StoreRecord]:
        store = self.models.Store.objects.filter(slug=slug).first()
        return _store_record(store) if store else None

    @translate_errors
    def list_stores_by_owner(self, owner_id: str) -> List[StoreRecord]:
        stores = self.models.Store.objects.filter(owner_id=owner_id).order_by("-created_at", "-id")
        return [_store_record(store) for store in stores]

    @translate_errors
    def get_order(self, order_id: str) -> Optional[OrderRecord]:
        order = self.models.Order.objects.filter(id=order_id).first()
        return _order_record(order) if order else None

    @translate_errors
    def list_order_items(self, order_id: str) -> List[OrderItemRecord]:
        items = self.models.OrderItem.objects.filter(order_id=order_id).order_by("id")
        return [_order_item_record(item) for item in items]

    def _store_orders(self, store_id: str, filters: OrderFilters):
        queryset = self.models.Order.objects.filter(store_id=store_id)

        if filters.statuses:
            queryset = queryset.filter(status__in=filters.statuses)
        if filters.exclude_statuses:
            queryset = queryset.exclude(status__in=filters.exclude_statuses)
        if filters.start_date is not None:
            queryset = queryset.filter(created_at__gte=filters.start_date)
        if filters.end_date is not None:
            queryset = queryset.filter(created_at__lte=filters.end_date)
        if filters.customer_id is not None:
            queryset = queryset.filter(user_id=filters.customer_id)
        if filters.min_amount is not None:
            queryset = queryset.filter(total_amount__gte=filters.min_amount)
        if filters.max_amount is not None:
            queryset = queryset.filter(total_amount__lte=filters.max_amount)
        return queryset

    @translate_errors
    def list_store_orders(
        self, store_id: str, filters: OrderFilters, offset: int = 0, limit: Optional[int] = None
    ) -> Tuple[List[OrderRecord], int]:
        queryset = self._store_orders(store_id, filters).order_by("-created_at", "-id")
        total = queryset.count()
        rows = queryset[offset:] if limit is None else queryset[offset : offset + limit]
        return [_order_record(order) for order in rows], total

    @translate_errors
    def list_store_order_items(self, store_id: str, filters: OrderFilters) -> List[OrderItemRecord]:
        items = self.models.OrderItem.objects.filter(order__in=self._store_orders(store_id, filters)).order_by("id")
        return [_order_item_record(item) for item in items]

    @translate_errors
    def update_order_status(
        self, order_id: str, status: str, changed_by: Optional[str] = None, notes: Optional[str] = None
    ) -> Optional[OrderRecord]:
        with transaction.atomic():
            order = self.models.Order.objects.select_for_update().filter(id=order_id).first()
            if order is None:
                return None
            order.status = status
            order.save(update_fields=["status", "updated_at"])
            self.models.OrderStatusHistory.objects.create(
                order=order, status=status, changed_by_id=changed_by, notes=notes or ""
            )
        logger.info(f"Order {order.id} status -> {status}")
        return _order_record(order)

    @translate_errors
    def list_order_status_history(self, order_id: str) -> List[OrderStatusRecord]:
        history = self.models.OrderStatusHistory.objects.filter(order_id=order_id).order_by("-changed_at", "-id")
        return [
            OrderStatusRecord(
                id=str(entry.id),
                order_id=str(entry.order_id),
                status=entry.status,
                changed_by=str(entry.changed_by_id) if entry.changed_by_id else None,
                notes=entry.notes or None,
                changed_at=entry.changed_at,
            )
            for entry in history
        ]
