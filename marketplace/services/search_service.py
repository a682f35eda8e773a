"""
SearchService - Product Search & Filtering

Handles product search with text matching, filtering, sorting and
pagination. Queries are composed by ``ProductQueryBuilder`` so the same set
of optional predicates is always applied in the same order, whatever order
the caller supplies them in.
"""

import logging
import math
import uuid
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from django.conf import settings

from infrastructure.store import ProductQuery, ProductRecord, StoreException, StoreInterface

from .base import BaseService, ErrorCodes, ServiceResult, parse_int, service_err, service_ok

logger = logging.getLogger(__name__)

SORT_FIELDS = ("title", "price", "created_at", "updated_at", "rating", "rating_count")
DEFAULT_SORT_FIELD = "created_at"


def serialize_product(product: ProductRecord) -> Dict[str, Any]:
    return {
        "id": product.id,
        "title": product.title,
        "slug": product.slug,
        "description": product.description,
        "price": product.price,
        "stock": product.stock,
        "rating": product.rating,
        "rating_count": product.rating_count,
        "featured": product.featured,
        "seller_id": product.seller_id,
        "store_id": product.store_id,
        "category": (
            {"id": product.category_id, "name": product.category_name, "slug": product.category_slug}
            if product.category_id
            else None
        ),
        "primary_image": product.primary_image_url,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class ProductQueryBuilder:
    """
    Compose a ProductQuery from optional filters.

    Every setter ignores ``None``, so callers can pass request values through
    unchanged. Unknown sort fields fall back to newest first.

    Example:
        >>> query = (
        ...     ProductQueryBuilder()
        ...     .category("home-decor")
        ...     .price_range(Decimal("10"), Decimal("50"))
        ...     .sort("price", "asc")
        ...     .page(2, 20)
        ...     .build()
        ... )
    """

    def __init__(self):
        self._fields: Dict[str, Any] = {}

    def text(self, value: Optional[str]) -> "ProductQueryBuilder":
        if value is not None and value.strip():
            self._fields["text"] = value.strip()
        return self

    def category(self, value: Optional[str]) -> "ProductQueryBuilder":
        """A UUID selects by category id, anything else by category slug."""
        if value:
            if _is_uuid(value):
                self._fields["category_id"] = str(uuid.UUID(str(value)))
            else:
                self._fields["category_slug"] = value
        return self

    def category_id(self, value: Optional[str]) -> "ProductQueryBuilder":
        if value is not None:
            self._fields["category_id"] = str(value)
        return self

    def price_range(self, minimum: Optional[Decimal] = None, maximum: Optional[Decimal] = None) -> "ProductQueryBuilder":
        if minimum is not None:
            self._fields["min_price"] = minimum
        if maximum is not None:
            self._fields["max_price"] = maximum
        return self

    def min_rating(self, value: Optional[float]) -> "ProductQueryBuilder":
        if value is not None:
            self._fields["min_rating"] = value
        return self

    def featured(self, value: Optional[bool]) -> "ProductQueryBuilder":
        if value is not None:
            self._fields["featured"] = value
        return self

    def exclude(self, product_id: Optional[str]) -> "ProductQueryBuilder":
        if product_id is not None:
            self._fields["exclude_id"] = str(product_id)
        return self

    def sort(self, field: Optional[str], direction: Optional[str] = None) -> "ProductQueryBuilder":
        if field in SORT_FIELDS:
            self._fields["sort_by"] = field
            self._fields["ascending"] = direction == "asc"
        else:
            self._fields["sort_by"] = DEFAULT_SORT_FIELD
            self._fields["ascending"] = False
        return self

    def page(self, page: int, limit: int) -> "ProductQueryBuilder":
        self._fields["offset"] = (page - 1) * limit
        self._fields["limit"] = limit
        return self

    def limit(self, limit: int) -> "ProductQueryBuilder":
        self._fields["offset"] = 0
        self._fields["limit"] = limit
        return self

    def build(self) -> ProductQuery:
        return ProductQuery(**self._fields)


def _parse_decimal(value: Any) -> Optional[Decimal]:
    if value is None or value == "":
        return None
    try:
        parsed = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(value)
    if not parsed.is_finite():
        raise ValueError(value)
    return parsed


def _parse_bool(value: Any) -> Optional[bool]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return value
    return str(value).lower() in ("true", "1", "yes")


class SearchService(BaseService):
    """
    Service for product search and filtering.

    Responsibilities:
    - Text search across product title and description
    - Filtering by category, price range, rating floor and featured flag
    - Sorting on a fixed set of fields
    - Page-based pagination
    - Featured and related product listings
    """

    def __init__(self, store: StoreInterface):
        """
        Initialize SearchService.

        Args:
            store: Store client handle
        """
        super().__init__()
        self.store = store
        self.default_page_size = getattr(settings, "SEARCH_PAGE_SIZE", 20)
        self.max_page_size = getattr(settings, "SEARCH_MAX_PAGE_SIZE", 100)

    def validate_search_params(self, params: Dict[str, Any]) -> ServiceResult[Dict[str, Any]]:
        """
        Validate and coerce raw search parameters.

        Args:
            params: Raw parameters (query, category, min_price, max_price,
                min_rating, featured, sort_by, sort_direction, page, limit)

        Returns:
            ServiceResult with the coerced parameters, or validation_error
        """
        try:
            min_price = _parse_decimal(params.get("min_price"))
        except ValueError:
            min_price = Decimal("-1")
        if min_price is not None and min_price < 0:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Minimum price must be a non-negative number")

        try:
            max_price = _parse_decimal(params.get("max_price"))
        except ValueError:
            max_price = Decimal("-1")
        if max_price is not None and max_price < 0:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Maximum price must be a non-negative number")

        if min_price is not None and max_price is not None and min_price > max_price:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Minimum price cannot be greater than maximum price")

        min_rating = params.get("min_rating")
        if min_rating is not None and min_rating != "":
            try:
                min_rating = float(min_rating)
            except (TypeError, ValueError):
                min_rating = math.nan
            if math.isnan(min_rating) or not 1 <= min_rating <= 5:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Minimum rating must be between 1 and 5")
        else:
            min_rating = None

        page = params.get("page")
        if page is not None:
            page = parse_int(page)
            if page is None or page < 1:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Page must be a positive number")

        limit = params.get("limit")
        if limit is not None:
            limit = parse_int(limit)
            if limit is None or limit < 1:
                return service_err(ErrorCodes.VALIDATION_ERROR, "Limit must be a positive number")

        return service_ok(
            {
                "query": params.get("query"),
                "category": params.get("category"),
                "min_price": min_price,
                "max_price": max_price,
                "min_rating": min_rating,
                "featured": _parse_bool(params.get("featured")),
                "sort_by": params.get("sort_by"),
                "sort_direction": params.get("sort_direction"),
                "page": page or 1,
                "limit": min(limit or self.default_page_size, self.max_page_size),
            }
        )

    @BaseService.log_performance
    def search_products(self, params: Optional[Dict[str, Any]] = None) -> ServiceResult[Dict[str, Any]]:
        """
        Search products with filters, sorting and pagination.

        Args:
            params: Search parameters; see ``validate_search_params``

        Returns:
            ServiceResult with {"products", "total", "page", "limit", "total_pages"}

        Example:
            >>> result = search_service.search_products(
            ...     {"query": "lamp", "category": "lighting", "min_price": "10", "sort_by": "price"}
            ... )
            >>> if result.ok:
            ...     products = result.value["products"]
        """
        validated = self.validate_search_params(params or {})
        if not validated.ok:
            return validated
        search = validated.value

        query = (
            ProductQueryBuilder()
            .text(search["query"])
            .category(search["category"])
            .price_range(search["min_price"], search["max_price"])
            .min_rating(search["min_rating"])
            .featured(search["featured"])
            .sort(search["sort_by"], search["sort_direction"])
            .page(search["page"], search["limit"])
            .build()
        )

        try:
            rows, total = self.store.search_products(query)
        except StoreException as e:
            return self.store_error(e, "searching products")
        except Exception as e:
            return self.unexpected_error(e, "searching products")

        self.logger.info(
            f"Search: query='{search['query']}', category={search['category']}, "
            f"results={total}, page={search['page']}"
        )

        return service_ok(
            {
                "products": [serialize_product(product) for product in rows],
                "total": total,
                "page": search["page"],
                "limit": search["limit"],
                "total_pages": math.ceil(total / search["limit"]),
            }
        )

    @BaseService.log_performance
    def get_featured_products(self, limit: int = 8) -> ServiceResult[List[Dict[str, Any]]]:
        """
        Get featured products, newest first.

        Args:
            limit: Maximum number of products (default: 8)
        """
        query = ProductQueryBuilder().featured(True).sort("created_at", "desc").limit(limit).build()
        try:
            rows, _ = self.store.search_products(query)
        except StoreException as e:
            return self.store_error(e, "loading featured products")
        except Exception as e:
            return self.unexpected_error(e, "loading featured products")

        return service_ok([serialize_product(product) for product in rows])

    @BaseService.log_performance
    def get_related_products(self, product_id: str, limit: int = 4) -> ServiceResult[List[Dict[str, Any]]]:
        """
        Get products from the same category, highest rated first.

        Args:
            product_id: UUID of the reference product
            limit: Maximum number of products (default: 4)

        Returns:
            ServiceResult with related products, or not_found for an unknown product
        """
        try:
            product = self.store.get_product(product_id)
            if product is None:
                return service_err(ErrorCodes.NOT_FOUND, "Product not found")
            if product.category_id is None:
                return service_ok([])

            query = (
                ProductQueryBuilder()
                .category_id(product.category_id)
                .exclude(product.id)
                .sort("rating", "desc")
                .limit(limit)
                .build()
            )
            rows, _ = self.store.search_products(query)
        except StoreException as e:
            return self.store_error(e, f"loading products related to {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading products related to {product_id}")

        return service_ok([serialize_product(row) for row in rows])
