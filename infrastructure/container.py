"""
Dependency Injection Container
================================

Simple service locator pattern for managing infrastructure dependencies.
Implements the Dependency Inversion Principle by providing centralized access
to the store client and the domain services built on it.

Usage:
    from infrastructure.container import container

    # In your view
    cart_service = container.cart_service()
    store = container.store()
"""

import logging
from typing import Optional

from .store import StoreFactory, StoreInterface

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Service container for infrastructure dependencies.

    Implements lazy initialization and caching of service instances.
    Singleton pattern.
    """

    _instance: Optional["ServiceContainer"] = None
    _initialized: bool = False

    def __new__(cls):
        """Ensure only one instance exists (singleton pattern)."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize container (only once)."""
        if not self._initialized:
            self._store: Optional[StoreInterface] = None

            # Domain Services
            self._inventory_service = None
            self._pricing_service = None
            self._cart_service = None
            self._rating_service = None
            self._search_service = None
            self._catalog_service = None
            self._wishlist_service = None
            self._order_service = None
            self._image_service = None

            self._initialized = True
            logger.info("Service container initialized")

    def store(self, backend: Optional[str] = None) -> StoreInterface:
        """
        Get store client instance.

        Args:
            backend: Store backend type ('django' or 'memory')
                    If None, uses configuration from settings

        Returns:
            StoreInterface implementation (cached)
        """
        if self._store is None or backend is not None:
            self._store = StoreFactory.create(backend)
            logger.debug(f"Created store: {type(self._store).__name__}")

        return self._store

    def inventory_service(self):
        """Get InventoryService instance."""
        if self._inventory_service is None:
            from marketplace.services import InventoryService

            self._inventory_service = InventoryService(store=self.store())
            logger.debug("Created InventoryService")
        return self._inventory_service

    def pricing_service(self):
        """Get PricingService instance."""
        if self._pricing_service is None:
            from marketplace.services import PricingService

            self._pricing_service = PricingService(store=self.store())
            logger.debug("Created PricingService")
        return self._pricing_service

    def cart_service(self):
        """Get CartService instance."""
        if self._cart_service is None:
            from marketplace.services import CartService

            # CartService depends on InventoryService and PricingService
            self._cart_service = CartService(
                store=self.store(),
                inventory_service=self.inventory_service(),
                pricing_service=self.pricing_service(),
            )
            logger.debug("Created CartService")
        return self._cart_service

    def rating_service(self):
        """Get RatingService instance."""
        if self._rating_service is None:
            from marketplace.services import RatingService

            self._rating_service = RatingService(store=self.store())
            logger.debug("Created RatingService")
        return self._rating_service

    def search_service(self):
        """Get SearchService instance."""
        if self._search_service is None:
            from marketplace.services import SearchService

            self._search_service = SearchService(store=self.store())
            logger.debug("Created SearchService")
        return self._search_service

    def catalog_service(self):
        """Get CatalogService instance."""
        if self._catalog_service is None:
            from marketplace.services import CatalogService

            self._catalog_service = CatalogService(store=self.store())
            logger.debug("Created CatalogService")
        return self._catalog_service

    def wishlist_service(self):
        """Get WishlistService instance."""
        if self._wishlist_service is None:
            from marketplace.services import WishlistService

            self._wishlist_service = WishlistService(store=self.store())
            logger.debug("Created WishlistService")
        return self._wishlist_service

    def order_service(self):
        """Get OrderService instance."""
        if self._order_service is None:
            from marketplace.services import OrderService

            self._order_service = OrderService(store=self.store())
            logger.debug("Created OrderService")
        return self._order_service

    def image_service(self):
        """Get ProductImageService instance."""
        if self._image_service is None:
            from marketplace.services import ProductImageService

            self._image_service = ProductImageService(store=self.store())
            logger.debug("Created ProductImageService")
        return self._image_service

    def reset(self):
        """
        Reset all cached service instances.

        Useful for testing or when switching between environments.
        """
        self._store = None
        self._inventory_service = None
        self._pricing_service = None
        self._cart_service = None
        self._rating_service = None
        self._search_service = None
        self._catalog_service = None
        self._wishlist_service = None
        self._order_service = None
        self._image_service = None
        logger.info("Service container reset")

    def configure_for_testing(self) -> StoreInterface:
        """
        Configure container with an in-memory store for testing.

        Returns:
            The InMemoryStoreAdapter every service will share
        """
        self.reset()
        store = self.store("memory")
        logger.info("Service container configured for testing")
        return store


# Global singleton instance
container = ServiceContainer()


# Convenience functions for quick access
def get_store() -> StoreInterface:
    """Get store client from global container."""
    return container.store()
