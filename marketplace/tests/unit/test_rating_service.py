from unittest.mock import Mock, patch

import pytest
from django.test import override_settings

from infrastructure.store import InMemoryStoreAdapter, StoreException
from marketplace.services import ErrorCodes, RatingService


@pytest.mark.unit
class TestRatingServiceUnit:
    def setup_method(self):
        self.store = InMemoryStoreAdapter()
        self.service = RatingService(self.store)
        self.alice = Mock(id=1)
        self.bob = Mock(id=2)
        self.store.add_user("1", "Alice Doe")
        self.product = self.store.add_product(title="Chair")

    def _aggregate(self):
        product = self.store.get_product(self.product.id)
        return product.rating, product.rating_count

    def test_add_rating_updates_aggregate(self):
        result = self.service.add_rating(self.alice, self.product.id, 4, "Comfortable")

        assert result.ok
        assert result.value["rating"] == 4
        assert result.value["comment"] == "Comfortable"
        assert result.value["user"] == {"full_name": "Alice Doe"}
        assert self._aggregate() == (4.0, 1)

    def test_second_rating_by_same_user_replaces_first(self):
        first = self.service.add_rating(self.alice, self.product.id, 2).value
        second = self.service.add_rating(self.alice, self.product.id, 5, "Changed my mind").value

        assert first["id"] == second["id"]
        assert len(self.store.ratings) == 1
        assert self._aggregate() == (5.0, 1)

    def test_mean_after_deleting_a_rating(self):
        self.service.add_rating(self.alice, self.product.id, 3)
        bobs = self.service.add_rating(self.bob, self.product.id, 5).value
        assert self._aggregate() == (4.0, 2)

        result = self.service.delete_rating(self.bob, bobs["id"])

        assert result.ok
        assert self._aggregate() == (3.0, 1)

    def test_deleting_last_rating_resets_aggregate(self):
        rating = self.service.add_rating(self.alice, self.product.id, 5).value

        self.service.delete_rating(self.alice, rating["id"])

        assert self._aggregate() == (0.0, 0)

    def test_delete_rating_of_another_user(self):
        rating = self.service.add_rating(self.alice, self.product.id, 5).value

        result = self.service.delete_rating(self.bob, rating["id"])

        assert not result.ok
        assert result.error == ErrorCodes.NOT_FOUND
        assert result.error_detail == "Rating not found"
        assert self._aggregate() == (5.0, 1)

    @pytest.mark.parametrize("value", [0, 6, 3.5, "4", True, None])
    def test_add_rating_rejects_out_of_range(self, value):
        result = self.service.add_rating(self.alice, self.product.id, value)

        assert not result.ok
        assert result.error == ErrorCodes.VALIDATION_ERROR
        assert self.store.ratings == {}

    def test_add_rating_unknown_product(self):
        result = self.service.add_rating(self.alice, "00000000-0000-0000-0000-000000000000", 3)

        assert not result.ok
        assert result.error == ErrorCodes.NOT_FOUND
        assert result.error_detail == "Product not found"

    def test_concurrent_insert_falls_back_to_update(self):
        original_insert = self.store.insert_rating

        def racing_insert(user_id, product_id, rating, comment):
            original_insert(user_id, product_id, 1, None)
            return original_insert(user_id, product_id, rating, comment)

        with patch.object(self.store, "insert_rating", side_effect=racing_insert):
            result = self.service.add_rating(self.alice, self.product.id, 4)

        assert result.ok
        assert len(self.store.ratings) == 1
        assert self._aggregate() == (4.0, 1)

    def test_recalculation_runs_after_the_write(self):
        order = []
        original_insert = self.store.insert_rating
        original_calculate = self.store.calculate_product_rating

        def tracking_insert(*args):
            order.append("insert")
            return original_insert(*args)

        def tracking_calculate(product_id):
            order.append("calculate")
            return original_calculate(product_id)

        with patch.object(self.store, "insert_rating", side_effect=tracking_insert), patch.object(
            self.store, "calculate_product_rating", side_effect=tracking_calculate
        ):
            self.service.add_rating(self.alice, self.product.id, 4)

        assert order == ["insert", "calculate"]

    def test_recalculation_failure_is_reported(self):
        with patch.object(
            self.store, "calculate_product_rating", side_effect=StoreException("function missing", code="42883")
        ):
            result = self.service.add_rating(self.alice, self.product.id, 4)

        assert not result.ok
        assert result.error == ErrorCodes.BAD_REQUEST

    def test_get_product_ratings_newest_first(self):
        for index, user_id in enumerate(range(10, 15)):
            self.service.add_rating(Mock(id=user_id), self.product.id, (index % 5) + 1)

        result = self.service.get_product_ratings(self.product.id, page=1, limit=2)

        assert result.ok
        assert result.value["total"] == 5
        assert result.value["page"] == 1
        assert result.value["limit"] == 2
        assert [r["user_id"] for r in result.value["ratings"]] == ["14", "13"]

    def test_get_product_ratings_without_display_name(self):
        self.service.add_rating(self.bob, self.product.id, 3)

        rating = self.service.get_product_ratings(self.product.id).value["ratings"][0]

        assert rating["user"] is None

    def test_get_product_ratings_malformed_product_id(self):
        result = self.service.get_product_ratings("not-a-uuid")

        assert not result.ok
        assert result.error == ErrorCodes.VALIDATION_ERROR

    @pytest.mark.parametrize(
        "page, limit, expected_page, expected_limit",
        [
            (None, None, 1, 10),
            (0, 0, 1, 10),
            (-2, -5, 1, 10),
            ("abc", "xyz", 1, 10),
            ("3", "7", 3, 7),
            (1, 500, 1, 50),
        ],
    )
    def test_get_product_ratings_pagination_bounds(self, page, limit, expected_page, expected_limit):
        result = self.service.get_product_ratings(self.product.id, page=page, limit=limit)

        assert result.value["page"] == expected_page
        assert result.value["limit"] == expected_limit

    @override_settings(RATINGS_PAGE_SIZE=5, RATINGS_MAX_PAGE_SIZE=20)
    def test_page_size_comes_from_settings(self):
        service = RatingService(self.store)

        assert service.get_product_ratings(self.product.id).value["limit"] == 5
        assert service.get_product_ratings(self.product.id, limit=100).value["limit"] == 20

    def test_get_user_rating(self):
        assert self.service.get_user_rating(self.alice, self.product.id).value is None

        self.service.add_rating(self.alice, self.product.id, 2)

        assert self.service.get_user_rating(self.alice, self.product.id).value["rating"] == 2
        assert self.service.get_user_rating(self.bob, self.product.id).value is None
