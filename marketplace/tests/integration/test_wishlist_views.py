from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.models import WishlistItem
from marketplace.tests.factories import ProductFactory, UserFactory, WishlistItemFactory


class WishlistViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.user = UserFactory()
        self.product = ProductFactory(title="Jute Basket")
        self.client.force_authenticate(user=self.user)

        self.list_url = reverse("marketplace:wishlist-list")
        self.detail_url = reverse("marketplace:wishlist-detail", kwargs={"pk": self.product.id})

    def test_add_and_list(self):
        response = self.client.post(self.list_url, {"product_id": str(self.product.id)})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]["product"]["title"], "Jute Basket")

    def test_duplicate_add_is_conflict(self):
        WishlistItemFactory(user=self.user, product=self.product)

        response = self.client.post(self.list_url, {"product_id": str(self.product.id)})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data["error"]["code"], "conflict")
        self.assertEqual(WishlistItem.objects.filter(user=self.user).count(), 1)

    def test_check_membership(self):
        response = self.client.get(self.detail_url)
        self.assertFalse(response.data["in_wishlist"])

        WishlistItemFactory(user=self.user, product=self.product)
        response = self.client.get(self.detail_url)
        self.assertTrue(response.data["in_wishlist"])

    def test_remove_is_idempotent(self):
        WishlistItemFactory(user=self.user, product=self.product)

        self.assertEqual(self.client.delete(self.detail_url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(self.client.delete(self.detail_url).status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(WishlistItem.objects.exists())
