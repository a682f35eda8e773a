from unittest.mock import patch

import pytest

from infrastructure.store import InMemoryStoreAdapter, StoreException
from marketplace.services import ErrorCodes, InventoryService


@pytest.mark.unit
class TestInventoryServiceUnit:
    def setup_method(self):
        self.store = InMemoryStoreAdapter()
        self.service = InventoryService(self.store)
        self.product = self.store.add_product(title="Teapot", stock=5)

    def test_ensure_available_returns_product(self):
        result = self.service.ensure_available(self.product.id, 5)

        assert result.ok
        assert result.value.id == self.product.id

    def test_ensure_available_over_stock(self):
        result = self.service.ensure_available(self.product.id, 6)

        assert not result.ok
        assert result.error == ErrorCodes.OUT_OF_STOCK
        assert result.error_detail == "Not enough stock. Only 5 items available."

    def test_ensure_available_merged_message(self):
        result = self.service.ensure_available(self.product.id, 6, merged=True)

        assert not result.ok
        assert result.error_detail == "Cannot add more items. Only 5 items available in total."

    def test_out_of_stock_is_bad_request(self):
        assert ErrorCodes.OUT_OF_STOCK == ErrorCodes.BAD_REQUEST

    @pytest.mark.parametrize("quantity", [0, -3, 2.0, "1", False])
    def test_ensure_available_rejects_non_positive_int(self, quantity):
        result = self.service.ensure_available(self.product.id, quantity)

        assert not result.ok
        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert result.error_detail == "Quantity must be a positive integer"

    def test_ensure_available_unknown_product(self):
        result = self.service.ensure_available("00000000-0000-0000-0000-000000000000", 1)

        assert not result.ok
        assert result.error == ErrorCodes.NOT_FOUND

    def test_ensure_available_with_zero_stock(self):
        product = self.store.add_product(title="Sold out", stock=0)

        result = self.service.ensure_available(product.id, 1)

        assert not result.ok
        assert result.error_detail == "Not enough stock. Only 0 items available."

    def test_check_availability(self):
        assert self.service.check_availability(self.product.id, 5).value is True
        assert self.service.check_availability(self.product.id, 6).value is False

    def test_check_availability_passes_through_other_errors(self):
        result = self.service.check_availability("00000000-0000-0000-0000-000000000000", 1)

        assert not result.ok
        assert result.error == ErrorCodes.NOT_FOUND

    def test_get_stock_level(self):
        result = self.service.get_stock_level(self.product.id)

        assert result.ok
        assert result.value == 5

    def test_store_error_is_mapped(self):
        with patch.object(
            self.store, "get_product", side_effect=StoreException("invalid input syntax for type uuid", code="22P02")
        ):
            result = self.service.ensure_available("not-a-uuid", 1)

        assert not result.ok
        assert result.error == ErrorCodes.VALIDATION_ERROR
