"""
PricingService - Cart Totals and Promotions

Computes cart totals and applies percentage promotion codes. Discounts are
request-scoped: nothing computed here is written back to the store.
"""

import logging
from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from infrastructure.store import ProductRecord, PromotionRecord, StoreException, StoreInterface
from marketplace.infra.observability.metrics import promo_lookups_total

from .base import BaseService, ErrorCodes, ServiceResult, service_err, service_ok

logger = logging.getLogger(__name__)


class PricingService(BaseService):
    """
    Service for cart price calculations.

    Responsibilities:
    - Calculate line and cart totals
    - Look up active promotion codes
    - Apply percentage discounts to a projected cart
    """

    def __init__(self, store: StoreInterface):
        """
        Initialize PricingService.

        Args:
            store: Store client handle
        """
        super().__init__()
        self.store = store

    @staticmethod
    def line_total(product: Optional[ProductRecord], quantity: int) -> Decimal:
        """Price times quantity; a missing product contributes nothing."""
        if product is None:
            return Decimal("0")
        return product.price * quantity

    def calculate_cart_total(self, lines: Iterable[Tuple[Optional[ProductRecord], int]]) -> ServiceResult[Dict]:
        """
        Calculate the total and item count of a set of cart lines.

        Lines whose product is missing are skipped.

        Args:
            lines: (product or None, quantity) pairs

        Returns:
            ServiceResult with {"total": Decimal, "item_count": int}

        Example:
            >>> result = pricing_service.calculate_cart_total([(product, 2)])
            >>> result.value["total"]
            Decimal('59.98')
        """
        total = Decimal("0")
        item_count = 0
        for product, quantity in lines:
            if product is None:
                continue
            total += self.line_total(product, quantity)
            item_count += quantity
        return service_ok({"total": total, "item_count": item_count})

    @BaseService.log_performance
    def validate_coupon(self, code: str) -> ServiceResult[PromotionRecord]:
        """
        Look up an active promotion by code.

        The code is trimmed and upper-cased before an exact match.

        Args:
            code: Promotion code as typed by the customer

        Returns:
            ServiceResult with the promotion, or:
            - validation_error if the code is empty
            - not_found if no active promotion matches

        Example:
            >>> result = pricing_service.validate_coupon("save10")
            >>> if result.ok:
            ...     print(result.value.discount_percentage)
        """
        normalized = (code or "").strip().upper()
        if not normalized:
            return service_err(ErrorCodes.VALIDATION_ERROR, "Promotion code is required")

        try:
            promotion = self.store.find_active_promotion(normalized)
        except StoreException as e:
            promo_lookups_total.labels(result="error").inc()
            return self.store_error(e, f"looking up promotion {normalized}")
        except Exception as e:
            promo_lookups_total.labels(result="error").inc()
            return self.unexpected_error(e, f"looking up promotion {normalized}")

        if promotion is None:
            promo_lookups_total.labels(result="invalid").inc()
            return service_err(ErrorCodes.NOT_FOUND, "Invalid or expired promotion code")

        promo_lookups_total.labels(result="valid").inc()
        return service_ok(promotion)

    def apply_discount(self, cart: Dict, promotion: PromotionRecord) -> ServiceResult[Dict]:
        """
        Apply a percentage promotion to a projected cart.

        Args:
            cart: Cart projection with a Decimal "total"
            promotion: Active promotion

        Returns:
            ServiceResult with a copy of the cart whose "total" is reduced by
            "discount" (total * percentage / 100, unrounded)
        """
        discount = cart["total"] * promotion.discount_percentage / Decimal("100")
        discounted = dict(cart)
        discounted["subtotal"] = cart["total"]
        discounted["discount"] = discount
        discounted["total"] = cart["total"] - discount
        discounted["promo_code"] = promotion.code
        discounted["discount_percentage"] = promotion.discount_percentage

        self.logger.info(f"Applied promotion {promotion.code}: {promotion.discount_percentage}% off {cart['total']}")
        return service_ok(discounted)
