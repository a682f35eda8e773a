"""
CartService - Shopping Cart Operations

Reconciles cart mutations against live stock and projects the cart view
(line items joined with product data, totals and item count).

Cart rows are scoped by user id; ownership is the only authorization check.
"""

import logging
from decimal import Decimal
from typing import Dict, Optional

from django.conf import settings

from infrastructure.store import UNIQUE_VIOLATION, CartItemRecord, ProductRecord, StoreException, StoreInterface
from marketplace.infra.observability.metrics import (
    cart_merge_conflicts_total,
    cart_mutations_total,
    cart_projection_duration,
)

from .base import BaseService, ErrorCodes, ServiceResult, is_positive_int, service_err, service_ok
from .inventory_service import InventoryService
from .pricing_service import PricingService

logger = logging.getLogger(__name__)


def empty_cart() -> Dict:
    return {"items": [], "total": Decimal("0"), "item_count": 0}


def project_product(product: Optional[ProductRecord]) -> Optional[Dict]:
    """The product fields exposed on a cart line."""
    if product is None:
        return None
    return {
        "id": product.id,
        "title": product.title,
        "slug": product.slug,
        "price": product.price,
        "stock": product.stock,
        "rating": product.rating,
        "featured": product.featured,
        "primary_image": product.primary_image_url,
    }


class CartService(BaseService):
    """
    Service for managing shopping cart operations.

    Responsibilities:
    - Add items to cart, merging with an existing line for the same product
    - Update, remove and clear cart items
    - Project the cart with live product data and totals
    - Apply promotion codes to the projected cart

    Dependencies:
    - InventoryService: Stock guard on every quantity-increasing write
    - PricingService: Totals and promotion discounts
    """

    def __init__(
        self,
        store: StoreInterface,
        inventory_service: InventoryService = None,
        pricing_service: PricingService = None,
        max_merge_attempts: Optional[int] = None,
    ):
        """
        Initialize CartService.

        Args:
            store: Store client handle
            inventory_service: Service for stock checks (injected)
            pricing_service: Service for price calculations (injected)
            max_merge_attempts: Retries for a merge that loses a concurrent
                update (default: settings.CART_MERGE_MAX_ATTEMPTS)
        """
        super().__init__()
        self.store = store
        self.inventory_service = inventory_service or InventoryService(store)
        self.pricing_service = pricing_service or PricingService(store)
        self.max_merge_attempts = max_merge_attempts or getattr(settings, "CART_MERGE_MAX_ATTEMPTS", 3)

    @BaseService.log_performance
    def get_cart(self, user) -> ServiceResult[Dict]:
        """
        Get user's shopping cart with items and totals.

        Items whose product no longer exists are still listed, with
        ``product=None`` and a zero line total; they add nothing to the
        total or the item count.

        Args:
            user: User whose cart to retrieve

        Returns:
            ServiceResult with {"items": [...], "total": Decimal, "item_count": int}

        Example:
            >>> result = cart_service.get_cart(user)
            >>> if result.ok:
            ...     total = result.value["total"]
        """
        try:
            with cart_projection_duration.time():
                rows = self.store.list_cart_items(str(user.id))
                items = [self._project_item(item, product) for item, product in rows]
                totals = self.pricing_service.calculate_cart_total(
                    (product, item.quantity) for item, product in rows
                ).value
        except StoreException as e:
            return self.store_error(e, f"loading cart for user {user.id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading cart for user {user.id}")

        self.logger.info(f"Retrieved cart for user {user.id}: {len(items)} items")

        return service_ok({"items": items, "total": totals["total"], "item_count": totals["item_count"]})

    def _project_item(self, item: CartItemRecord, product: Optional[ProductRecord]) -> Dict:
        if product is None:
            self.logger.warning(f"Cart item {item.id} references missing product {item.product_id}")
        return {
            "id": item.id,
            "product_id": item.product_id,
            "quantity": item.quantity,
            "product": project_product(product),
            "line_total": self.pricing_service.line_total(product, item.quantity),
            "created_at": item.created_at,
            "updated_at": item.updated_at,
        }

    @BaseService.log_performance
    def add_to_cart(self, user, product_id: str, quantity: int = 1) -> ServiceResult[Dict]:
        """
        Add item to cart (with stock validation).

        If the user already has a line for the product, the quantities are
        merged and the stock guard runs against the merged total. The merge
        is a conditional write on the quantity that was read; if another
        request changed the line in between, the merge is recomputed, up to
        ``max_merge_attempts`` times.

        Args:
            user: User adding the item
            product_id: Product UUID
            quantity: Quantity to add (default: 1)

        Returns:
            ServiceResult with updated cart data, or:
            - validation_error for a non-positive quantity
            - not_found if the product does not exist
            - bad_request if the (merged) quantity exceeds stock
            - conflict if the merge kept losing concurrent updates

        Example:
            >>> result = cart_service.add_to_cart(user, product_id, quantity=2)
            >>> if result.ok:
            ...     cart_data = result.value
        """
        guard = self.inventory_service.ensure_available(product_id, quantity)
        if not guard.ok:
            cart_mutations_total.labels(operation="add", status="rejected").inc()
            return guard

        user_id = str(user.id)
        try:
            for attempt in range(1, self.max_merge_attempts + 1):
                existing = self.store.find_cart_item(user_id, product_id=product_id)

                if existing is None:
                    try:
                        self.store.insert_cart_item(user_id, product_id, quantity)
                    except StoreException as e:
                        if e.code != UNIQUE_VIOLATION:
                            raise
                        # Another request inserted the line first; merge into it
                        cart_merge_conflicts_total.inc()
                        self.logger.info(f"Concurrent insert for user {user_id}, product {product_id}; retrying as merge")
                        continue
                    self.logger.info(f"Added to cart for user {user_id}: {quantity}x product {product_id}")
                    break

                new_quantity = existing.quantity + quantity
                merged_guard = self.inventory_service.ensure_available(product_id, new_quantity, merged=True)
                if not merged_guard.ok:
                    cart_mutations_total.labels(operation="add", status="rejected").inc()
                    return merged_guard

                if self.store.update_cart_item_quantity(existing.id, new_quantity, expected_quantity=existing.quantity):
                    self.logger.info(
                        f"Updated cart item for user {user_id}: product {product_id} quantity "
                        f"{existing.quantity} -> {new_quantity}"
                    )
                    break

                cart_merge_conflicts_total.inc()
                self.logger.warning(
                    f"Cart item {existing.id} changed during merge (attempt {attempt}/{self.max_merge_attempts})"
                )
            else:
                cart_mutations_total.labels(operation="add", status="conflict").inc()
                return service_err(
                    ErrorCodes.CONFLICT, "Cart was modified by another request. Please try again."
                )
        except StoreException as e:
            cart_mutations_total.labels(operation="add", status="error").inc()
            return self.store_error(e, f"adding product {product_id} to cart of user {user_id}")
        except Exception as e:
            cart_mutations_total.labels(operation="add", status="error").inc()
            return self.unexpected_error(e, f"adding product {product_id} to cart of user {user_id}")

        cart_mutations_total.labels(operation="add", status="success").inc()
        return self.get_cart(user)

    @BaseService.log_performance
    def update_cart_item(self, user, cart_item_id: str, quantity: int) -> ServiceResult[Dict]:
        """
        Set the quantity of a cart item.

        ``quantity`` is absolute, not a delta.

        Args:
            user: User owning the cart item
            cart_item_id: Cart item id
            quantity: New quantity (must be > 0)

        Returns:
            ServiceResult with updated cart data

        Example:
            >>> result = cart_service.update_cart_item(user, item_id, quantity=5)
        """
        if not is_positive_int(quantity):
            return service_err(ErrorCodes.VALIDATION_ERROR, "Quantity must be a positive integer")

        user_id = str(user.id)
        try:
            item = self.store.find_cart_item(user_id, item_id=cart_item_id)
            if item is None:
                return service_err(ErrorCodes.NOT_FOUND, "Cart item not found")

            guard = self.inventory_service.ensure_available(item.product_id, quantity)
            if not guard.ok:
                cart_mutations_total.labels(operation="update", status="rejected").inc()
                return guard

            if not self.store.update_cart_item_quantity(item.id, quantity):
                cart_mutations_total.labels(operation="update", status="not_found").inc()
                return service_err(ErrorCodes.NOT_FOUND, "Cart item not found")
            self.logger.info(f"Updated cart quantity for user {user_id}: item {item.id} {item.quantity} -> {quantity}")
        except StoreException as e:
            cart_mutations_total.labels(operation="update", status="error").inc()
            return self.store_error(e, f"updating cart item {cart_item_id}")
        except Exception as e:
            cart_mutations_total.labels(operation="update", status="error").inc()
            return self.unexpected_error(e, f"updating cart item {cart_item_id}")

        cart_mutations_total.labels(operation="update", status="success").inc()
        return self.get_cart(user)

    @BaseService.log_performance
    def remove_from_cart(self, user, cart_item_id: str) -> ServiceResult[Dict]:
        """
        Remove item from cart.

        Args:
            user: User removing the item
            cart_item_id: Cart item id to remove

        Returns:
            ServiceResult with updated cart data, or not_found if the item is
            not in this user's cart
        """
        user_id = str(user.id)
        try:
            item = self.store.find_cart_item(user_id, item_id=cart_item_id)
            if item is None:
                return service_err(ErrorCodes.NOT_FOUND, "Cart item not found")

            self.store.delete_cart_item(item.id)
            self.logger.info(f"Removed cart item {item.id} for user {user_id}")
        except StoreException as e:
            cart_mutations_total.labels(operation="remove", status="error").inc()
            return self.store_error(e, f"removing cart item {cart_item_id}")
        except Exception as e:
            cart_mutations_total.labels(operation="remove", status="error").inc()
            return self.unexpected_error(e, f"removing cart item {cart_item_id}")

        cart_mutations_total.labels(operation="remove", status="success").inc()
        return self.get_cart(user)

    @BaseService.log_performance
    def clear_cart(self, user) -> ServiceResult[Dict]:
        """
        Clear all items from cart.

        Args:
            user: User whose cart to clear

        Returns:
            ServiceResult with an empty cart: {"items": [], "total": 0, "item_count": 0}
        """
        try:
            removed = self.store.delete_cart_items(str(user.id))
        except StoreException as e:
            cart_mutations_total.labels(operation="clear", status="error").inc()
            return self.store_error(e, f"clearing cart of user {user.id}")
        except Exception as e:
            cart_mutations_total.labels(operation="clear", status="error").inc()
            return self.unexpected_error(e, f"clearing cart of user {user.id}")

        cart_mutations_total.labels(operation="clear", status="success").inc()
        self.logger.info(f"Cleared cart for user {user.id}: {removed} items removed")
        return service_ok(empty_cart())

    @BaseService.log_performance
    def apply_promo_code(self, user, code: str) -> ServiceResult[Dict]:
        """
        Apply a promotion code to the user's cart.

        The discounted cart is only returned, never stored; a later
        ``get_cart`` shows the undiscounted total.

        Args:
            user: User whose cart to price
            code: Promotion code (case-insensitive)

        Returns:
            ServiceResult with the cart plus "discount", "subtotal" and
            "promo_code", or not_found for an unknown or inactive code

        Example:
            >>> result = cart_service.apply_promo_code(user, "save10")
            >>> if result.ok:
            ...     print(result.value["discount"])
        """
        promotion = self.pricing_service.validate_coupon(code)
        if not promotion.ok:
            return promotion

        return self.get_cart(user).flat_map(lambda cart: self.pricing_service.apply_discount(cart, promotion.value))
