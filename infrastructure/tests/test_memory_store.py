"""
In-Memory Store Tests
=====================

The in-memory store must raise the same SQLSTATE codes as the database so
services behave identically against both.
"""

import pytest

from infrastructure.store import (
    FOREIGN_KEY_VIOLATION,
    INVALID_TEXT_REPRESENTATION,
    UNIQUE_VIOLATION,
    InMemoryStoreAdapter,
    OrderFilters,
    StoreException,
)


@pytest.mark.unit
class TestInMemoryStoreAdapter:
    def setup_method(self):
        self.store = InMemoryStoreAdapter()
        self.product = self.store.add_product(title="Walnut Tray", price="18.50", stock=4)

    def test_duplicate_cart_item_raises_unique_violation(self):
        self.store.insert_cart_item("1", self.product.id, 1)

        with pytest.raises(StoreException) as exc_info:
            self.store.insert_cart_item("1", self.product.id, 2)

        assert exc_info.value.code == UNIQUE_VIOLATION

    def test_cart_item_for_unknown_product_raises_foreign_key_violation(self):
        with pytest.raises(StoreException) as exc_info:
            self.store.insert_cart_item("1", "00000000-0000-0000-0000-000000000000", 1)

        assert exc_info.value.code == FOREIGN_KEY_VIOLATION

    @pytest.mark.parametrize(
        "lookup",
        [
            lambda store: store.get_product("not-a-uuid"),
            lambda store: store.list_product_ratings("not-a-uuid", 0, 10),
            lambda store: store.calculate_product_rating("not-a-uuid"),
            lambda store: store.find_cart_item("1", product_id="not-a-uuid"),
            lambda store: store.find_wishlist_item("1", "not-a-uuid"),
            lambda store: store.list_product_images("not-a-uuid"),
            lambda store: store.get_store("not-a-uuid"),
            lambda store: store.get_order("not-a-uuid"),
        ],
    )
    def test_malformed_id_raises_invalid_text_representation(self, lookup):
        with pytest.raises(StoreException) as exc_info:
            lookup(self.store)

        assert exc_info.value.code == INVALID_TEXT_REPRESENTATION

    def test_malformed_product_id_on_insert_is_rejected_before_foreign_key_check(self):
        with pytest.raises(StoreException) as exc_info:
            self.store.insert_cart_item("1", "not-a-uuid", 1)

        assert exc_info.value.code == INVALID_TEXT_REPRESENTATION
        assert self.store.cart_items == {}

    def test_uuid_lookup_accepts_uppercase_form(self):
        assert self.store.get_product(self.product.id.upper()).id == self.product.id

    def test_conditional_quantity_update(self):
        item = self.store.insert_cart_item("1", self.product.id, 1)

        assert self.store.update_cart_item_quantity(item.id, 3, expected_quantity=2) is False
        assert self.store.update_cart_item_quantity(item.id, 3, expected_quantity=1) is True
        assert self.store.find_cart_item("1", item_id=item.id).quantity == 3
        assert self.store.update_cart_item_quantity("missing", 3) is False

    def test_cart_items_are_scoped_to_user(self):
        item = self.store.insert_cart_item("1", self.product.id, 1)

        assert self.store.find_cart_item("2", item_id=item.id) is None
        assert self.store.delete_cart_items("2") == 0
        assert self.store.delete_cart_items("1") == 1

    def test_cart_items_oldest_first_with_missing_product(self):
        other = self.store.add_product(title="Cedar Box")
        self.store.insert_cart_item("1", self.product.id, 1)
        self.store.insert_cart_item("1", other.id, 1)
        self.store.remove_product(other.id)

        rows = self.store.list_cart_items("1")

        assert [item.product_id for item, _ in rows] == [self.product.id, other.id]
        assert rows[1][1] is None

    def test_duplicate_rating_raises_unique_violation(self):
        self.store.insert_rating("1", self.product.id, 4, None)

        with pytest.raises(StoreException) as exc_info:
            self.store.insert_rating("1", self.product.id, 5, None)

        assert exc_info.value.code == UNIQUE_VIOLATION

    def test_ratings_newest_first_with_names(self):
        self.store.add_user("1", "Ada Lovelace")
        first = self.store.insert_rating("1", self.product.id, 4, "Nice")
        second = self.store.insert_rating("2", self.product.id, 2, None)

        rows, total = self.store.list_product_ratings(self.product.id, 0, 10)

        assert total == 2
        assert [r.id for r in rows] == [second.id, first.id]
        assert rows[1].user_full_name == "Ada Lovelace"
        assert rows[0].user_full_name is None

    def test_calculate_product_rating(self):
        assert self.store.calculate_product_rating(self.product.id) is None

        self.store.insert_rating("1", self.product.id, 4, None)
        self.store.insert_rating("2", self.product.id, 5, None)

        assert self.store.calculate_product_rating(self.product.id) == (4.5, 2)

    def test_promotion_lookup_ignores_inactive(self):
        self.store.add_promotion("spring10", "10")
        self.store.add_promotion("OLD", "50", active=False)

        assert self.store.find_active_promotion("SPRING10").discount_percentage == 10
        assert self.store.find_active_promotion("OLD") is None

    def test_primary_image_falls_back_to_first_image(self):
        self.store.add_image(self.product.id, "https://cdn.example.com/b.jpg", display_order=1)
        self.store.add_image(self.product.id, "https://cdn.example.com/a.jpg", display_order=0)

        assert self.store.get_product(self.product.id).primary_image_url == "https://cdn.example.com/a.jpg"

    def test_duplicate_wishlist_item(self):
        self.store.insert_wishlist_item("1", self.product.id)

        with pytest.raises(StoreException) as exc_info:
            self.store.insert_wishlist_item("1", self.product.id)

        assert exc_info.value.code == UNIQUE_VIOLATION
        assert self.store.delete_wishlist_item("1", self.product.id) == 1
        assert self.store.delete_wishlist_item("1", self.product.id) == 0

    def test_order_status_history(self):
        shop = self.store.add_store(owner_id="9", name="Cedar Works")
        order = self.store.add_order(shop.id, "1", "20.00", status="paid")

        self.store.update_order_status(order.id, "shipped", changed_by="9")
        self.store.update_order_status(order.id, "delivered", changed_by="9", notes="Left at door")

        history = self.store.list_order_status_history(order.id)
        assert [entry.status for entry in history] == ["delivered", "shipped"]
        assert self.store.get_order(order.id).status == "delivered"
        assert self.store.update_order_status("00000000-0000-0000-0000-000000000000", "paid") is None

    def test_store_order_filters(self):
        shop = self.store.add_store(owner_id="9")
        self.store.add_order(shop.id, "1", "20.00", status="paid")
        self.store.add_order(shop.id, "2", "80.00", status="cancelled")

        rows, total = self.store.list_store_orders(shop.id, OrderFilters(exclude_statuses=["cancelled"]))
        assert total == 1
        assert rows[0].user_id == "1"

        rows, total = self.store.list_store_orders(shop.id, OrderFilters(customer_id="2"))
        assert [row.status for row in rows] == ["cancelled"]
