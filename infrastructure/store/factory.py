"""
Store Factory
=============

Factory pattern for creating store client instances based on configuration.
"""

import logging
from typing import Literal

from django.conf import settings

from .django_adapter import DjangoStoreAdapter
from .interface import StoreInterface
from .memory_adapter import InMemoryStoreAdapter

logger = logging.getLogger(__name__)

StoreBackend = Literal["django", "memory"]


class StoreFactory:
    """
    Factory for creating store instances.

    Usage:
        # In settings.py
        INFRASTRUCTURE = {"STORE_BACKEND": "django"}  # or 'memory'

        # In your code
        store = StoreFactory.create()
    """

    @staticmethod
    def create(backend: StoreBackend | None = None) -> StoreInterface:
        """
        Create a store instance.

        Args:
            backend: Store backend type ('django' or 'memory')
                    If None, reads INFRASTRUCTURE["STORE_BACKEND"] from settings

        Returns:
            StoreInterface implementation

        Raises:
            ValueError: If backend type is invalid
        """
        infrastructure = getattr(settings, "INFRASTRUCTURE", {})
        backend_type = backend or infrastructure.get("STORE_BACKEND", "django")

        logger.info(f"Creating store backend: {backend_type}")

        if backend_type == "django":
            return DjangoStoreAdapter()
        elif backend_type == "memory":
            return InMemoryStoreAdapter()
        else:
            raise ValueError(f"Invalid store backend: {backend_type}. Must be 'django' or 'memory'")

    @staticmethod
    def create_memory() -> InMemoryStoreAdapter:
        """Create an in-memory store explicitly."""
        return InMemoryStoreAdapter()
