"""
WishlistService - Saved Products

One wishlist row per (user, product). Duplicate adds surface as conflict
from the store's unique constraint.
"""

import logging
from typing import Dict, List

from infrastructure.store import StoreException, StoreInterface

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok
from .search_service import serialize_product

logger = logging.getLogger(__name__)


class WishlistService(BaseService):
    """
    Service for managing a user's wishlist.
    """

    def __init__(self, store: StoreInterface):
        super().__init__()
        self.store = store

    @BaseService.log_performance
    def get_wishlist(self, user) -> ServiceResult[List[Dict]]:
        """
        Get the user's wishlist with product details, newest first.

        Entries whose product was deleted are returned with ``product=None``.
        """
        try:
            rows = self.store.list_wishlist_items(str(user.id))
        except StoreException as e:
            return self.store_error(e, f"loading wishlist of user {user.id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading wishlist of user {user.id}")

        return service_ok(
            [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "created_at": item.created_at,
                    "product": serialize_product(product) if product else None,
                }
                for item, product in rows
            ]
        )

    @BaseService.log_performance
    def add_to_wishlist(self, user, product_id: str) -> ServiceResult[Dict]:
        """
        Save a product to the user's wishlist.

        Returns:
            ServiceResult with the new entry, or:
            - not_found if the product does not exist
            - conflict if the product is already in the wishlist
        """
        try:
            if self.store.get_product(product_id) is None:
                return service_err(ErrorCodes.NOT_FOUND, "Product not found")
            item = self.store.insert_wishlist_item(str(user.id), product_id)
        except StoreException as e:
            return self.store_error(e, f"adding product {product_id} to wishlist of user {user.id}")
        except Exception as e:
            return self.unexpected_error(e, f"adding product {product_id} to wishlist of user {user.id}")

        self.logger.info(f"User {user.id} saved product {product_id} to wishlist")
        return service_ok({"id": item.id, "product_id": item.product_id, "created_at": item.created_at})

    @BaseService.log_performance
    def remove_from_wishlist(self, user, product_id: str) -> ServiceResult[bool]:
        """
        Remove a product from the user's wishlist.

        Removing a product that is not in the wishlist is not an error.

        Returns:
            ServiceResult with True if an entry was removed
        """
        try:
            removed = self.store.delete_wishlist_item(str(user.id), product_id)
        except StoreException as e:
            return self.store_error(e, f"removing product {product_id} from wishlist of user {user.id}")
        except Exception as e:
            return self.unexpected_error(e, f"removing product {product_id} from wishlist of user {user.id}")

        return service_ok(removed > 0)

    @BaseService.log_performance
    def is_in_wishlist(self, user, product_id: str) -> ServiceResult[bool]:
        try:
            item = self.store.find_wishlist_item(str(user.id), product_id)
        except StoreException as e:
            return self.store_error(e, f"checking wishlist of user {user.id}")
        except Exception as e:
            return self.unexpected_error(e, f"checking wishlist of user {user.id}")

        return service_ok(item is not None)
