from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.tests.factories import CategoryFactory, ProductFactory, ProductImageFactory


class ProductViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.lighting = CategoryFactory(name="Lighting", slug="lighting")
        self.seating = CategoryFactory(name="Seating", slug="seating")

        self.lamp = ProductFactory(
            title="Brass Desk Lamp", category=self.lighting, price=Decimal("45.00"), rating=4.5, featured=True
        )
        self.pendant = ProductFactory(title="Glass Pendant", category=self.lighting, price=Decimal("120.00"), rating=3.5)
        self.sconce = ProductFactory(title="Wall Sconce", category=self.lighting, price=Decimal("60.00"), rating=4.8)
        self.stool = ProductFactory(title="Bar Stool", category=self.seating, price=Decimal("80.00"), featured=True)
        ProductImageFactory(product=self.lamp, url="https://cdn.example.com/lamp.jpg", is_primary=True)

        self.search_url = reverse("marketplace:product-search")
        self.featured_url = reverse("marketplace:product-featured")

    def _titles(self, response):
        return [product["title"] for product in response.data["products"]]

    def test_search_by_category_slug_sorted_by_price(self):
        response = self.client.get(self.search_url, {"category": "lighting", "sort_by": "price", "sort_direction": "asc"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(self._titles(response), ["Brass Desk Lamp", "Wall Sconce", "Glass Pendant"])
        self.assertEqual(response.data["total"], 3)
        self.assertEqual(response.data["total_pages"], 1)

    def test_search_by_category_id(self):
        response = self.client.get(self.search_url, {"category": str(self.seating.id)})
        self.assertEqual(self._titles(response), ["Bar Stool"])

    def test_search_text_and_price_range(self):
        response = self.client.get(self.search_url, {"query": "lamp", "min_price": "10", "max_price": "50"})

        self.assertEqual(self._titles(response), ["Brass Desk Lamp"])
        product = response.data["products"][0]
        self.assertEqual(product["primary_image"], "https://cdn.example.com/lamp.jpg")
        self.assertEqual(product["category"]["slug"], "lighting")

    def test_search_min_rating(self):
        response = self.client.get(self.search_url, {"min_rating": "4.6"})
        self.assertEqual(self._titles(response), ["Wall Sconce"])

    def test_search_pagination(self):
        response = self.client.get(self.search_url, {"page": 2, "limit": 3})

        self.assertEqual(len(response.data["products"]), 1)
        self.assertEqual(response.data["total_pages"], 2)

    def test_search_invalid_price_range(self):
        response = self.client.get(self.search_url, {"min_price": "100", "max_price": "10"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "validation_error")
        self.assertEqual(response.data["error"]["message"], "Minimum price cannot be greater than maximum price")

    def test_featured_products(self):
        response = self.client.get(self.featured_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(p["title"] for p in response.data), ["Bar Stool", "Brass Desk Lamp"])

    def test_related_products(self):
        response = self.client.get(reverse("marketplace:product-related", kwargs={"pk": self.lamp.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["title"] for p in response.data], ["Wall Sconce", "Glass Pendant"])

    def test_related_products_unknown_product(self):
        response = self.client.get(
            reverse("marketplace:product-related", kwargs={"pk": "00000000-0000-0000-0000-000000000000"})
        )
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_retrieve_product_with_images(self):
        self.lamp.images.update(display_order=0)
        ProductImageFactory(product=self.lamp, url="https://cdn.example.com/lamp-side.jpg", display_order=1)

        response = self.client.get(reverse("marketplace:product-detail", kwargs={"pk": self.lamp.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["title"], "Brass Desk Lamp")
        self.assertEqual(response.data["category"]["slug"], "lighting")
        self.assertEqual(response.data["primary_image"], "https://cdn.example.com/lamp.jpg")
        self.assertEqual(
            [image["url"] for image in response.data["images"]],
            ["https://cdn.example.com/lamp.jpg", "https://cdn.example.com/lamp-side.jpg"],
        )

    def test_retrieve_unknown_product(self):
        response = self.client.get(
            reverse("marketplace:product-detail", kwargs={"pk": "00000000-0000-0000-0000-000000000000"})
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["code"], "not_found")

    def test_retrieve_with_malformed_id(self):
        response = self.client.get(reverse("marketplace:product-detail", kwargs={"pk": "brass-desk-lamp"}))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "validation_error")

    def test_product_by_slug(self):
        response = self.client.get(reverse("marketplace:product-by-slug", kwargs={"slug": self.stool.slug}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], str(self.stool.id))
        self.assertEqual(response.data["images"], [])

    def test_product_by_unknown_slug(self):
        response = self.client.get(reverse("marketplace:product-by-slug", kwargs={"slug": "no-such-product"}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["message"], "Product not found")
