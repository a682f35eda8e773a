from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.models import ProductImage
from marketplace.tests.factories import ProductFactory, ProductImageFactory, UserFactory


class ProductImageViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.product = ProductFactory()
        self.seller = self.product.seller
        self.first = ProductImageFactory(product=self.product, display_order=0, is_primary=True)
        self.second = ProductImageFactory(product=self.product, display_order=1)

        self.reorder_url = reverse("marketplace:product-images-reorder", kwargs={"product_id": self.product.id})
        self.primary_url = reverse("marketplace:product-images-primary", kwargs={"product_id": self.product.id})

    def test_reorder_images(self):
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(
            self.reorder_url,
            {"images": [{"id": str(self.second.id), "display_order": 0}, {"id": str(self.first.id), "display_order": 1}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([image["id"] for image in response.data], [str(self.second.id), str(self.first.id)])

    def test_reorder_reports_failed_entries(self):
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(
            self.reorder_url,
            {"images": [{"id": str(self.second.id), "display_order": 0}, {"id": "999999", "display_order": 1}]},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        errors = response.data["error"]["details"]["errors"]
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0]["id"], "999999")
        self.assertEqual(ProductImage.objects.get(id=self.second.id).display_order, 0)

    def test_reorder_forbidden_for_other_users(self):
        self.client.force_authenticate(user=UserFactory())
        response = self.client.post(
            self.reorder_url, {"images": [{"id": str(self.first.id), "display_order": 3}]}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_set_primary_image(self):
        self.client.force_authenticate(user=self.seller)
        response = self.client.post(self.primary_url, {"image_id": str(self.second.id)}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(ProductImage.objects.get(id=self.second.id).is_primary)
        self.assertFalse(ProductImage.objects.get(id=self.first.id).is_primary)
