"""
Marketplace Service Layer

This package contains all business logic for the marketplace app, organized
into domain services. Every service receives a store client explicitly.

Services:
- InventoryService: Stock guard for cart quantities
- CartService: Shopping cart reconciliation and projection
- PricingService: Cart totals and promotion codes
- RatingService: Product ratings and aggregate recalculation
- SearchService: Product search and filtering
- CatalogService: Product, category and store lookups
- WishlistService: Saved products
- OrderService: Seller order reporting and status writes
- ProductImageService: Image ordering for sellers

Usage:
    from infrastructure.container import container

    cart_service = container.cart_service()
    result = cart_service.add_to_cart(user, product_id, quantity=2)

    if result.ok:
        cart = result.value
    else:
        error = result.error
"""

from .base import BaseService, ErrorCodes, ServiceResult, error_code_for_store_exception, service_err, service_ok
from .cart_service import CartService
from .catalog_service import CatalogService
from .image_service import ProductImageService
from .inventory_service import InventoryService
from .order_service import OrderService
from .pricing_service import PricingService
from .rating_service import RatingService
from .search_service import ProductQueryBuilder, SearchService
from .wishlist_service import WishlistService

__all__ = [
    # Base classes
    "BaseService",
    "ServiceResult",
    # Helper functions
    "service_ok",
    "service_err",
    "error_code_for_store_exception",
    # Error codes
    "ErrorCodes",
    # Services
    "CartService",
    "CatalogService",
    "InventoryService",
    "OrderService",
    "PricingService",
    "ProductImageService",
    "ProductQueryBuilder",
    "RatingService",
    "SearchService",
    "WishlistService",
]
