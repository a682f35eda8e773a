"""
CatalogService - Product, Category & Store Lookups

Read-only lookups behind the browsing pages: a product by id or slug with
its images, the category tree, and storefronts by id, slug or owner.
"""

import logging
import uuid
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from infrastructure.store import CategoryRecord, ProductRecord, StoreException, StoreInterface, StoreRecord

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from .search_service import serialize_product

logger = logging.getLogger(__name__)


def serialize_category(category: CategoryRecord) -> Dict[str, Any]:
    return asdict(category)


def serialize_store(store: StoreRecord) -> Dict[str, Any]:
    return asdict(store)


class CatalogService(BaseService):
    """
    Service for catalog browsing.

    Responsibilities:
    - Product detail by id or by slug, with images
    - Category listing, optionally narrowed to one parent
    - Category detail with its direct subcategories
    - Store lookup by id, slug or owner
    """

    def __init__(self, store: StoreInterface):
        """
        Initialize CatalogService.

        Args:
            store: Store client handle
        """
        super().__init__()
        self.store = store

    def _product_detail(self, product: ProductRecord) -> Dict[str, Any]:
        data = serialize_product(product)
        data["images"] = [asdict(image) for image in self.store.list_product_images(product.id)]
        return data

    @BaseService.log_performance
    def get_product(self, product_id: str) -> ServiceResult[Dict[str, Any]]:
        """
        Get product details by id.

        Args:
            product_id: Product UUID

        Returns:
            ServiceResult with the product and its images ordered by
            display position, not_found for an unknown product, or
            validation_error for a malformed id

        Example:
            >>> result = catalog_service.get_product(product_id)
            >>> if result.ok:
            ...     print(result.value["title"], len(result.value["images"]))
        """
        try:
            product = self.store.get_product(product_id)
            if product is None:
                return service_err(ErrorCodes.NOT_FOUND, "Product not found")
            data = self._product_detail(product)
        except StoreException as e:
            return self.store_error(e, f"loading product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading product {product_id}")

        self.logger.info(f"Retrieved product {product.title} (id={product.id})")
        return service_ok(data)

    @BaseService.log_performance
    def get_product_by_slug(self, slug: str) -> ServiceResult[Dict[str, Any]]:
        """
        Get product details by slug.

        Returns:
            ServiceResult with the same payload as ``get_product``
        """
        try:
            product = self.store.get_product_by_slug(slug)
            if product is None:
                return service_err(ErrorCodes.NOT_FOUND, "Product not found")
            data = self._product_detail(product)
        except StoreException as e:
            return self.store_error(e, f"loading product with slug {slug}")
        except Exception as e:
            return self.unexpected_error(e, f"loading product with slug {slug}")

        return service_ok(data)

    @BaseService.log_performance
    def list_categories(self, parent: Optional[str] = None, top_level: bool = False) -> ServiceResult[List[Dict]]:
        """
        List categories ordered by name.

        Args:
            parent: UUID or slug of a category; only its direct children are
                listed
            top_level: Only categories without a parent

        Returns:
            ServiceResult with the categories, or not_found when ``parent``
            names no category

        Example:
            >>> result = catalog_service.list_categories(parent="furniture")
        """
        try:
            parent_id = None
            if parent:
                try:
                    parent_id = str(uuid.UUID(str(parent)))
                except ValueError:
                    parent_category = self.store.get_category_by_slug(parent)
                    if parent_category is None:
                        return service_err(ErrorCodes.NOT_FOUND, "Category not found")
                    parent_id = parent_category.id

            rows = self.store.list_categories(parent_id=parent_id, top_level=top_level)
        except StoreException as e:
            return self.store_error(e, "listing categories")
        except Exception as e:
            return self.unexpected_error(e, "listing categories")

        return service_ok([serialize_category(row) for row in rows])

    @BaseService.log_performance
    def get_category(self, slug: str) -> ServiceResult[Dict[str, Any]]:
        """
        Get a category by slug with its direct subcategories.

        Returns:
            ServiceResult with the category plus "subcategories", or not_found
        """
        try:
            category = self.store.get_category_by_slug(slug)
            if category is None:
                return service_err(ErrorCodes.NOT_FOUND, "Category not found")
            children = self.store.list_categories(parent_id=category.id)
        except StoreException as e:
            return self.store_error(e, f"loading category {slug}")
        except Exception as e:
            return self.unexpected_error(e, f"loading category {slug}")

        data = serialize_category(category)
        data["subcategories"] = [serialize_category(child) for child in children]
        return service_ok(data)

    @BaseService.log_performance
    def get_store(self, store_id: str) -> ServiceResult[Dict[str, Any]]:
        """Get a store by id."""
        try:
            store = self.store.get_store(store_id)
        except StoreException as e:
            return self.store_error(e, f"loading store {store_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading store {store_id}")

        if store is None:
            return service_err(ErrorCodes.NOT_FOUND, "Store not found")
        return service_ok(serialize_store(store))

    @BaseService.log_performance
    def get_store_by_slug(self, slug: str) -> ServiceResult[Dict[str, Any]]:
        """Get a store by slug."""
        try:
            store = self.store.get_store_by_slug(slug)
        except StoreException as e:
            return self.store_error(e, f"loading store with slug {slug}")
        except Exception as e:
            return self.unexpected_error(e, f"loading store with slug {slug}")

        if store is None:
            return service_err(ErrorCodes.NOT_FOUND, "Store not found")
        return service_ok(serialize_store(store))

    @BaseService.log_performance
    def get_stores_by_owner(self, owner_id: str) -> ServiceResult[List[Dict]]:
        """
        List the stores of an owner, newest first.

        An owner without stores gets an empty list.
        """
        try:
            stores = self.store.list_stores_by_owner(str(owner_id))
        except StoreException as e:
            return self.store_error(e, f"listing stores of owner {owner_id}")
        except Exception as e:
            return self.unexpected_error(e, f"listing stores of owner {owner_id}")

        return service_ok([serialize_store(store) for store in stores])
