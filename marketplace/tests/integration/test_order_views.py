from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from infrastructure.container import container
from marketplace.models import Order, OrderStatusHistory
from marketplace.tests.factories import OrderFactory, OrderItemFactory, ProductFactory, StoreFactory, UserFactory


class StoreOrderViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.shop = StoreFactory()
        self.owner = self.shop.owner
        self.buyer = UserFactory()
        self.stranger = UserFactory()

        now = timezone.now()
        self.paid = OrderFactory(
            store=self.shop, user=self.buyer, status="paid", total_amount=Decimal("40.00"), created_at=now - timedelta(days=2)
        )
        self.shipped = OrderFactory(
            store=self.shop, user=self.buyer, status="shipped", total_amount=Decimal("60.00"), created_at=now - timedelta(days=1)
        )
        self.cancelled = OrderFactory(store=self.shop, status="cancelled", total_amount=Decimal("500.00"), created_at=now)
        OrderItemFactory(order=self.paid, quantity=2, price_at_purchase=Decimal("20.00"))

    def test_list_store_orders(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(reverse("marketplace:store-orders", kwargs={"pk": self.shop.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 3)
        self.assertEqual(
            [order["id"] for order in response.data["orders"]],
            [str(self.cancelled.id), str(self.shipped.id), str(self.paid.id)],
        )

    def test_list_store_orders_with_status_filter(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(
            reverse("marketplace:store-orders", kwargs={"pk": self.shop.id}), {"status": "paid,shipped", "page_size": 1}
        )

        self.assertEqual(response.data["total_count"], 2)
        self.assertEqual(len(response.data["orders"]), 1)

    def test_store_orders_forbidden_for_non_owner(self):
        self.client.force_authenticate(user=self.stranger)
        response = self.client.get(reverse("marketplace:store-orders", kwargs={"pk": self.shop.id}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data["error"]["code"], "forbidden")

    def test_analytics(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(reverse("marketplace:store-analytics", kwargs={"pk": self.shop.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_orders"], 3)
        self.assertEqual(Decimal(str(response.data["total_revenue"])), Decimal("600.00"))
        self.assertEqual(response.data["orders_by_status"], {"paid": 1, "shipped": 1, "cancelled": 1})

    def test_customer_insights_ignore_cancelled_orders(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(reverse("marketplace:store-customer-insights", kwargs={"pk": self.shop.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_customers"], 1)
        self.assertEqual(response.data["returning_customers"], 1)
        self.assertEqual(Decimal(str(response.data["average_customer_value"])), Decimal("100.00"))


class OrderViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.shop = StoreFactory()
        self.owner = self.shop.owner
        self.buyer = UserFactory()
        self.order = OrderFactory(store=self.shop, user=self.buyer, status="paid")
        OrderItemFactory(order=self.order, quantity=1, price_at_purchase=Decimal("100.00"))

        self.detail_url = reverse("marketplace:order-detail", kwargs={"pk": self.order.id})

    def test_owner_and_buyer_can_read_order(self):
        for user in (self.owner, self.buyer):
            self.client.force_authenticate(user=user)
            response = self.client.get(self.detail_url)
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(len(response.data["items"]), 1)

    def test_stranger_cannot_read_order(self):
        self.client.force_authenticate(user=UserFactory())
        self.assertEqual(self.client.get(self.detail_url).status_code, status.HTTP_403_FORBIDDEN)

    def test_update_status_writes_history(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(
            reverse("marketplace:order-update-status", kwargs={"pk": self.order.id}),
            {"status": "shipped", "notes": "Courier picked up"},
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "shipped")
        entry = OrderStatusHistory.objects.get(order=self.order)
        self.assertEqual(entry.status, "shipped")
        self.assertEqual(entry.changed_by, self.owner)
        self.assertEqual(entry.notes, "Courier picked up")

    def test_update_status_rejects_unknown_status(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(
            reverse("marketplace:order-update-status", kwargs={"pk": self.order.id}), {"status": "teleported"}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, "paid")

    def test_cancel_and_refund(self):
        self.client.force_authenticate(user=self.owner)

        response = self.client.post(reverse("marketplace:order-cancel", kwargs={"pk": self.order.id}), {"reason": "Damaged"})
        self.assertEqual(response.data["status"], "cancelled")

        response = self.client.post(reverse("marketplace:order-refund", kwargs={"pk": self.order.id}))
        self.assertEqual(response.data["status"], "refunded")
        self.assertEqual(Order.objects.get(id=self.order.id).status, "refunded")
        self.assertEqual(OrderStatusHistory.objects.filter(order=self.order).count(), 2)

    def test_buyer_cannot_cancel(self):
        self.client.force_authenticate(user=self.buyer)
        response = self.client.post(reverse("marketplace:order-cancel", kwargs={"pk": self.order.id}))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(OrderStatusHistory.objects.exists())


class StoreViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.first = StoreFactory(name="Oak Works", slug="oak-works")
        self.owner = self.first.owner
        self.second = StoreFactory(name="Pine Works", slug="pine-works", owner=self.owner)
        StoreFactory(name="Elm Works", slug="elm-works")

    def test_retrieve_store_anonymously(self):
        response = self.client.get(reverse("marketplace:store-detail", kwargs={"pk": self.first.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["name"], "Oak Works")
        self.assertEqual(response.data["owner_id"], str(self.owner.id))

    def test_retrieve_unknown_store(self):
        response = self.client.get(
            reverse("marketplace:store-detail", kwargs={"pk": "00000000-0000-0000-0000-000000000000"})
        )

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["error"]["message"], "Store not found")

    def test_store_by_slug(self):
        response = self.client.get(reverse("marketplace:store-by-slug", kwargs={"slug": "pine-works"}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["id"], str(self.second.id))

    def test_store_by_unknown_slug(self):
        response = self.client.get(reverse("marketplace:store-by-slug", kwargs={"slug": "birch-works"}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_stores_by_owner_newest_first(self):
        response = self.client.get(reverse("marketplace:store-by-owner", kwargs={"owner_id": self.owner.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([store["slug"] for store in response.data], ["pine-works", "oak-works"])

    def test_owner_without_stores(self):
        buyer = UserFactory()
        response = self.client.get(reverse("marketplace:store-by-owner", kwargs={"owner_id": buyer.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, [])

    def test_dashboard_still_requires_authentication(self):
        response = self.client.get(reverse("marketplace:store-orders", kwargs={"pk": self.first.id}))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class StoreDashboardViewIntegrationTest(TestCase):
    def setUp(self):
        container.reset()
        self.client = APIClient()
        self.shop = StoreFactory()
        self.owner = self.shop.owner
        self.now = timezone.now()

        chair = ProductFactory(title="Oak Chair")
        lamp = ProductFactory(title="Brass Lamp")
        older = OrderFactory(
            store=self.shop, status="paid", total_amount=Decimal("40.00"), created_at=self.now - timedelta(days=2)
        )
        newer = OrderFactory(
            store=self.shop, status="shipped", total_amount=Decimal("90.00"), created_at=self.now - timedelta(days=1)
        )
        refunded = OrderFactory(store=self.shop, status="refunded", total_amount=Decimal("500.00"), created_at=self.now)
        OrderItemFactory(order=older, product=chair, quantity=2, price_at_purchase=Decimal("20.00"))
        OrderItemFactory(order=newer, product=lamp, quantity=1, price_at_purchase=Decimal("60.00"))
        OrderItemFactory(order=refunded, product=chair, quantity=1, price_at_purchase=Decimal("30.00"))

        self.chair, self.lamp = chair, lamp
        self.top_url = reverse("marketplace:store-top-products", kwargs={"pk": self.shop.id})
        self.trends_url = reverse("marketplace:store-revenue-trends", kwargs={"pk": self.shop.id})

    def test_top_products_by_revenue(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.top_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p["product_title"] for p in response.data], ["Oak Chair", "Brass Lamp"])
        self.assertEqual(response.data[0]["product_id"], str(self.chair.id))
        self.assertEqual(response.data[0]["total_quantity"], 3)
        self.assertEqual(Decimal(str(response.data[0]["total_revenue"])), Decimal("70.00"))

    def test_top_products_limit(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.top_url, {"limit": 1})

        self.assertEqual(len(response.data), 1)

    def test_top_products_rejects_limit_out_of_range(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.top_url, {"limit": 500})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_top_products_forbidden_for_non_owner(self):
        self.client.force_authenticate(user=UserFactory())
        response = self.client.get(self.top_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_daily_revenue_trends_skip_refunded_orders(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.trends_url, {"period": "day", "days": 7})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [bucket["date"] for bucket in response.data],
            [(self.now - timedelta(days=2)).date(), (self.now - timedelta(days=1)).date()],
        )
        self.assertEqual([bucket["order_count"] for bucket in response.data], [1, 1])
        self.assertEqual(Decimal(str(response.data[1]["revenue"])), Decimal("90.00"))

    def test_revenue_trends_reject_unknown_period(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.get(self.trends_url, {"period": "year"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"]["code"], "validation_error")

    def test_revenue_trends_forbidden_for_non_owner(self):
        self.client.force_authenticate(user=UserFactory())
        response = self.client.get(self.trends_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
