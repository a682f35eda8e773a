from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.models import ProductRating
from marketplace.tests.factories import ProductFactory, ProductRatingFactory, UserFactory


class RatingViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.user = UserFactory(first_name="Mira", last_name="Stone")
        self.other_user = UserFactory()
        self.product = ProductFactory()

        self.list_url = reverse("marketplace:rating-list")
        self.mine_url = reverse("marketplace:rating-mine")

    def _rate(self, rating, comment=None):
        data = {"product_id": str(self.product.id), "rating": rating}
        if comment is not None:
            data["comment"] = comment
        return self.client.post(self.list_url, data)

    def test_create_rating_updates_product_aggregate(self):
        ProductRatingFactory(product=self.product, user=self.other_user, rating=3)
        self.client.force_authenticate(user=self.user)

        response = self._rate(5, "Lovely finish")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["rating"], 5)
        self.assertEqual(response.data["user"], {"full_name": "Mira Stone"})
        self.product.refresh_from_db()
        self.assertEqual(self.product.rating, 4.0)
        self.assertEqual(self.product.rating_count, 2)

    def test_rating_twice_replaces_previous_rating(self):
        self.client.force_authenticate(user=self.user)
        self._rate(2)
        response = self._rate(4)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(ProductRating.objects.filter(product=self.product, user=self.user).count(), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.rating, 4.0)
        self.assertEqual(self.product.rating_count, 1)

    def test_create_rating_out_of_range(self):
        self.client.force_authenticate(user=self.user)
        response = self._rate(6)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "validation_error")

    def test_create_rating_requires_authentication(self):
        response = self._rate(5)
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_delete_last_rating_resets_aggregate(self):
        self.client.force_authenticate(user=self.user)
        rating_id = self._rate(5).data["id"]

        response = self.client.delete(reverse("marketplace:rating-detail", kwargs={"pk": rating_id}))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.product.refresh_from_db()
        self.assertEqual(self.product.rating, 0)
        self.assertEqual(self.product.rating_count, 0)

    def test_cannot_delete_another_users_rating(self):
        rating = ProductRatingFactory(product=self.product, user=self.other_user)
        self.client.force_authenticate(user=self.user)

        response = self.client.delete(reverse("marketplace:rating-detail", kwargs={"pk": rating.id}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertTrue(ProductRating.objects.filter(id=rating.id).exists())

    def test_list_ratings_is_public_and_paginated(self):
        for _ in range(3):
            ProductRatingFactory(product=self.product)

        response = self.client.get(self.list_url, {"product_id": str(self.product.id), "limit": 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total"], 3)
        self.assertEqual(response.data["limit"], 2)
        self.assertEqual(len(response.data["ratings"]), 2)

    def test_list_ratings_requires_product_id(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["message"], "product_id is required")

    def test_list_ratings_malformed_product_id(self):
        response = self.client.get(self.list_url, {"product_id": "not-a-uuid"})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "validation_error")

    def test_my_rating(self):
        self.client.force_authenticate(user=self.user)

        response = self.client.get(self.mine_url, {"product_id": str(self.product.id)})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data)

        self._rate(3)
        response = self.client.get(self.mine_url, {"product_id": str(self.product.id)})
        self.assertEqual(response.data["rating"], 3)
