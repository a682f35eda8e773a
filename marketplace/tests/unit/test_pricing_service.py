from decimal import Decimal
from unittest.mock import patch

import pytest

from infrastructure.store import InMemoryStoreAdapter, ProductRecord, StoreException
from marketplace.services import ErrorCodes, PricingService


def _product(price):
    return ProductRecord(id="p", title="Item", slug="item", price=Decimal(price), stock=10)


@pytest.mark.unit
class TestPricingServiceUnit:
    def setup_method(self):
        self.store = InMemoryStoreAdapter()
        self.service = PricingService(self.store)

    def test_calculate_cart_total(self):
        result = self.service.calculate_cart_total([(_product("19.99"), 2), (_product("5.00"), 1)])

        assert result.ok
        assert result.value == {"total": Decimal("44.98"), "item_count": 3}

    def test_calculate_cart_total_skips_missing_products(self):
        result = self.service.calculate_cart_total([(None, 4), (_product("5.00"), 1)])

        assert result.value == {"total": Decimal("5.00"), "item_count": 1}

    def test_calculate_cart_total_empty(self):
        assert self.service.calculate_cart_total([]).value == {"total": Decimal("0"), "item_count": 0}

    def test_validate_coupon_normalizes_code(self):
        self.store.add_promotion("welcome", "15")

        result = self.service.validate_coupon("  Welcome ")

        assert result.ok
        assert result.value.code == "WELCOME"

    @pytest.mark.parametrize("code", ["", "   ", None])
    def test_validate_coupon_requires_code(self, code):
        result = self.service.validate_coupon(code)

        assert not result.ok
        assert result.error == ErrorCodes.VALIDATION_ERROR

    def test_validate_coupon_unknown(self):
        result = self.service.validate_coupon("NOPE")

        assert not result.ok
        assert result.error == ErrorCodes.NOT_FOUND
        assert result.error_detail == "Invalid or expired promotion code"

    def test_validate_coupon_inactive(self):
        self.store.add_promotion("EXPIRED", "20", active=False)

        result = self.service.validate_coupon("EXPIRED")

        assert not result.ok
        assert result.error == ErrorCodes.NOT_FOUND

    def test_apply_discount_does_not_round(self):
        promotion = self.store.add_promotion("THIRD", "33.33")
        cart = {"items": [], "total": Decimal("10.00"), "item_count": 1}

        result = self.service.apply_discount(cart, promotion)

        assert result.value["discount"] == Decimal("3.333")
        assert result.value["total"] == Decimal("6.667")
        assert result.value["subtotal"] == Decimal("10.00")
        assert cart["total"] == Decimal("10.00")

    def test_apply_full_discount(self):
        promotion = self.store.add_promotion("FREE", "100")

        result = self.service.apply_discount({"items": [], "total": Decimal("42.00"), "item_count": 2}, promotion)

        assert result.value["total"] == Decimal("0")

    def test_validate_coupon_store_error(self):
        with patch.object(self.store, "find_active_promotion", side_effect=StoreException("boom", code="08006")):
            result = self.service.validate_coupon("SAVE")

        assert not result.ok
        assert result.error == ErrorCodes.INTERNAL_ERROR
