"""
InventoryService - Stock Guard

Validates a requested quantity against a product's current stock before any
cart mutation. Every check is a pure read against the store.
"""

import logging

from infrastructure.store import ProductRecord, StoreException, StoreInterface
from marketplace.infra.observability.metrics import stock_guard_rejections_total

from .base import BaseService, ErrorCodes, ServiceResult, is_positive_int, service_err, service_ok

logger = logging.getLogger(__name__)


class InventoryService(BaseService):
    """
    Service guarding quantity-increasing mutations against product stock.
    """

    def __init__(self, store: StoreInterface):
        """
        Initialize InventoryService.

        Args:
            store: Store client handle
        """
        super().__init__()
        self.store = store

    @BaseService.log_performance
    def ensure_available(self, product_id: str, quantity: int, merged: bool = False) -> ServiceResult[ProductRecord]:
        """
        Verify that ``quantity`` units of a product can be held in a cart.

        Callers merging into an existing cart line must pass the post-merge
        total as ``quantity`` and set ``merged=True``.

        Args:
            product_id: UUID of the product
            quantity: Total quantity being requested
            merged: True when ``quantity`` already includes an existing line

        Returns:
            ServiceResult with the product record, or:
            - validation_error if quantity is not a positive integer
            - not_found if the product does not exist
            - bad_request if quantity exceeds stock

        Example:
            >>> result = inventory_service.ensure_available(product_id, 3)
            >>> if not result.ok:
            ...     print(result.error_detail)  # "Not enough stock. Only 2 items available."
        """
        if not is_positive_int(quantity):
            return service_err(ErrorCodes.VALIDATION_ERROR, "Quantity must be a positive integer")

        try:
            product = self.store.get_product(product_id)
        except StoreException as e:
            return self.store_error(e, f"loading product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading product {product_id}")

        if product is None:
            return service_err(ErrorCodes.NOT_FOUND, "Product not found")

        if quantity > product.stock:
            stock_guard_rejections_total.labels(merged=str(merged).lower()).inc()
            self.logger.info(
                f"Stock guard rejected product {product_id}: requested={quantity}, stock={product.stock}, merged={merged}"
            )
            if merged:
                message = f"Cannot add more items. Only {product.stock} items available in total."
            else:
                message = f"Not enough stock. Only {product.stock} items available."
            return service_err(ErrorCodes.OUT_OF_STOCK, message)

        return service_ok(product)

    @BaseService.log_performance
    def check_availability(self, product_id: str, quantity: int = 1) -> ServiceResult[bool]:
        """
        Check if a product has sufficient stock available.

        Args:
            product_id: UUID of the product
            quantity: Quantity to check (default: 1)

        Returns:
            ServiceResult with True if available, False otherwise
        """
        result = self.ensure_available(product_id, quantity)
        if result.ok:
            return service_ok(True)
        if result.error == ErrorCodes.OUT_OF_STOCK:
            return service_ok(False)
        return result

    @BaseService.log_performance
    def get_stock_level(self, product_id: str) -> ServiceResult[int]:
        """
        Get current stock level for a product.

        Args:
            product_id: UUID of the product

        Returns:
            ServiceResult with the stock quantity
        """
        try:
            product = self.store.get_product(product_id)
        except StoreException as e:
            return self.store_error(e, f"loading stock for product {product_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading stock for product {product_id}")

        if product is None:
            return service_err(ErrorCodes.NOT_FOUND, "Product not found")
        return service_ok(product.stock)
