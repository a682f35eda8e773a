"""
OrderService - Seller Order Reporting

Pass-through reporting over a store's orders for its owner: filtered order
listings, status writes (cancel/refund included) with history, and simple
analytics rollups: totals, customer insights, top products and revenue
trends. Orders are created elsewhere; this service never touches stock or
carts.
"""

import logging
from collections import Counter
from dataclasses import asdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Union

from django.utils import timezone

from infrastructure.store import OrderFilters, OrderRecord, StoreException, StoreInterface, StoreRecord

from .base import BaseService, ErrorCodes, ServiceResult, parse_int, service_err, service_ok

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("created", "processing", "paid", "shipped", "delivered", "cancelled", "refunded")
INACTIVE_STATUSES = ("cancelled", "refunded")
NEW_CUSTOMER_WINDOW = timedelta(days=30)
TREND_PERIODS = ("day", "week", "month")


def period_start(moment: datetime, period: str) -> date:
    """First day of the day, week (Monday) or month containing ``moment``."""
    if timezone.is_aware(moment):
        moment = timezone.localtime(moment)
    day = moment.date()
    if period == "week":
        return day - timedelta(days=day.weekday())
    if period == "month":
        return day.replace(day=1)
    return day


class OrderService(BaseService):
    """
    Service for seller-side order management.

    Responsibilities:
    - List a store's orders with filters and pagination
    - Fetch an order with its items and status history
    - Write order status changes (including cancel and refund)
    - Order analytics and customer insights per store
    - Top-selling products and revenue trends per store

    Only the store's owner may read or change its orders; buyers may read
    their own orders.
    """

    def __init__(self, store: StoreInterface):
        """
        Initialize OrderService.

        Args:
            store: Store client handle
        """
        super().__init__()
        self.store = store

    def _owned_store(self, user, store_id: str) -> ServiceResult[StoreRecord]:
        store = self.store.get_store(store_id)
        if store is None:
            return service_err(ErrorCodes.NOT_FOUND, "Store not found")
        if store.owner_id != str(user.id):
            return service_err(ErrorCodes.FORBIDDEN, "You do not have access to this store")
        return service_ok(store)

    @staticmethod
    def _serialize(order: OrderRecord) -> Dict:
        return asdict(order)

    @BaseService.log_performance
    def get_store_orders(
        self,
        user,
        store_id: str,
        filters: Optional[Union[OrderFilters, Dict]] = None,
        page=1,
        page_size=10,
    ) -> ServiceResult[Dict]:
        """
        List a store's orders, newest first.

        Args:
            user: Store owner
            store_id: UUID of the store
            filters: OrderFilters or a dict with statuses, start_date,
                end_date, customer_id, min_amount, max_amount
            page: 1-based page number
            page_size: Orders per page (default: 10, max: 100)

        Returns:
            ServiceResult with {"orders", "total_count", "page", "page_size"}

        Example:
            >>> result = order_service.get_store_orders(
            ...     user, store_id, {"statuses": ["paid", "shipped"]}, page=2
            ... )
        """
        if isinstance(filters, dict):
            filters = OrderFilters(**filters)
        filters = filters or OrderFilters()

        page = parse_int(page)
        page = page if page and page > 0 else 1
        page_size = parse_int(page_size)
        page_size = min(page_size if page_size and page_size > 0 else 10, 100)

        try:
            owned = self._owned_store(user, store_id)
            if not owned.ok:
                return owned

            orders, total = self.store.list_store_orders(store_id, filters, (page - 1) * page_size, page_size)
        except StoreException as e:
            return self.store_error(e, f"listing orders of store {store_id}")
        except Exception as e:
            return self.unexpected_error(e, f"listing orders of store {store_id}")

        return service_ok(
            {
                "orders": [self._serialize(order) for order in orders],
                "total_count": total,
                "page": page,
                "page_size": page_size,
            }
        )

    @BaseService.log_performance
    def get_order(self, user, order_id: str) -> ServiceResult[Dict]:
        """
        Get an order with its items and status history.

        Returns:
            ServiceResult with the order, not_found for an unknown order, or
            forbidden if the user is neither the buyer nor the store owner
        """
        try:
            order = self.store.get_order(order_id)
            if order is None:
                return service_err(ErrorCodes.NOT_FOUND, "Order not found")

            if order.user_id != str(user.id):
                owned = self._owned_store(user, order.store_id)
                if not owned.ok:
                    return service_err(ErrorCodes.FORBIDDEN, "You do not have access to this order")

            items = self.store.list_order_items(order.id)
            history = self.store.list_order_status_history(order.id)
        except StoreException as e:
            return self.store_error(e, f"loading order {order_id}")
        except Exception as e:
            return self.unexpected_error(e, f"loading order {order_id}")

        data = self._serialize(order)
        data["items"] = [asdict(item) for item in items]
        data["status_history"] = [asdict(entry) for entry in history]
        return service_ok(data)

    @BaseService.log_performance
    def update_order_status(self, user, order_id: str, status: str, notes: Optional[str] = None) -> ServiceResult[Dict]:
        """
        Write a new order status and record it in the status history.

        Args:
            user: Owner of the order's store
            order_id: UUID of the order
            status: One of ORDER_STATUSES
            notes: Optional note stored with the history row

        Returns:
            ServiceResult with the updated order
        """
        if status not in ORDER_STATUSES:
            return service_err(
                ErrorCodes.VALIDATION_ERROR, f"Invalid status '{status}'. Must be one of: {', '.join(ORDER_STATUSES)}"
            )

        try:
            order = self.store.get_order(order_id)
            if order is None:
                return service_err(ErrorCodes.NOT_FOUND, "Order not found")

            owned = self._owned_store(user, order.store_id)
            if not owned.ok:
                return owned

            updated = self.store.update_order_status(order.id, status, changed_by=str(user.id), notes=notes)
            if updated is None:
                return service_err(ErrorCodes.NOT_FOUND, "Order not found")
        except StoreException as e:
            return self.store_error(e, f"updating status of order {order_id}")
        except Exception as e:
            return self.unexpected_error(e, f"updating status of order {order_id}")

        self.logger.info(f"Order {order.id} status {order.status} -> {status} by user {user.id}")
        return service_ok(self._serialize(updated))

    def cancel_order(self, user, order_id: str, reason: Optional[str] = None) -> ServiceResult[Dict]:
        """Mark an order as cancelled."""
        return self.update_order_status(user, order_id, "cancelled", notes=reason)

    def refund_order(self, user, order_id: str, reason: Optional[str] = None) -> ServiceResult[Dict]:
        """Mark an order as refunded."""
        return self.update_order_status(user, order_id, "refunded", notes=reason)

    @BaseService.log_performance
    def get_order_analytics(
        self, user, store_id: str, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> ServiceResult[Dict]:
        """
        Summarize a store's orders created within a date range.

        Returns:
            ServiceResult with total_orders, total_revenue, orders_by_status
            and average_order_value
        """
        try:
            owned = self._owned_store(user, store_id)
            if not owned.ok:
                return owned

            orders, _ = self.store.list_store_orders(
                store_id, OrderFilters(start_date=start_date, end_date=end_date)
            )
        except StoreException as e:
            return self.store_error(e, f"computing analytics for store {store_id}")
        except Exception as e:
            return self.unexpected_error(e, f"computing analytics for store {store_id}")

        revenue = sum((order.total_amount for order in orders), Decimal("0"))
        return service_ok(
            {
                "total_orders": len(orders),
                "total_revenue": revenue,
                "orders_by_status": dict(Counter(order.status for order in orders)),
                "average_order_value": revenue / len(orders) if orders else Decimal("0"),
            }
        )

    @BaseService.log_performance
    def get_customer_insights(self, user, store_id: str, now: Optional[datetime] = None) -> ServiceResult[Dict]:
        """
        Customer statistics for a store, ignoring cancelled and refunded orders.

        A customer is "new" when their first order is within the last 30 days
        and "returning" when they have more than one order.

        Returns:
            ServiceResult with total_customers, new_customers,
            returning_customers, average_order_value and average_customer_value
        """
        now = now or timezone.now()
        try:
            owned = self._owned_store(user, store_id)
            if not owned.ok:
                return owned

            orders, _ = self.store.list_store_orders(store_id, OrderFilters(exclude_statuses=list(INACTIVE_STATUSES)))
        except StoreException as e:
            return self.store_error(e, f"computing customer insights for store {store_id}")
        except Exception as e:
            return self.unexpected_error(e, f"computing customer insights for store {store_id}")

        customers: Dict[str, Dict] = {}
        for order in orders:
            customer = customers.setdefault(
                order.user_id, {"total_spent": Decimal("0"), "order_count": 0, "first_order": order.created_at}
            )
            customer["total_spent"] += order.total_amount
            customer["order_count"] += 1
            customer["first_order"] = min(customer["first_order"], order.created_at)

        total_spent = sum((c["total_spent"] for c in customers.values()), Decimal("0"))
        total_orders = sum(c["order_count"] for c in customers.values())

        return service_ok(
            {
                "total_customers": len(customers),
                "new_customers": sum(1 for c in customers.values() if c["first_order"] > now - NEW_CUSTOMER_WINDOW),
                "returning_customers": sum(1 for c in customers.values() if c["order_count"] > 1),
                "average_order_value": total_spent / total_orders if total_orders else Decimal("0"),
                "average_customer_value": total_spent / len(customers) if customers else Decimal("0"),
            }
        )

    @BaseService.log_performance
    def get_top_products(
        self,
        user,
        store_id: str,
        limit=10,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> ServiceResult[List[Dict]]:
        """
        Best-selling products of a store, by revenue.

        Order lines are summed per product over the orders created within
        the date range. Lines whose product was deleted are left out.

        Args:
            user: Store owner
            store_id: UUID of the store
            limit: Number of products (default: 10, max: 100)
            start_date: Only orders created at or after this moment
            end_date: Only orders created at or before this moment

        Returns:
            ServiceResult with [{"product_id", "product_title",
            "total_quantity", "total_revenue"}], highest revenue first

        Example:
            >>> result = order_service.get_top_products(user, store_id, limit=5)
        """
        limit = parse_int(limit)
        limit = min(limit if limit and limit > 0 else 10, 100)

        try:
            owned = self._owned_store(user, store_id)
            if not owned.ok:
                return owned

            items = self.store.list_store_order_items(
                store_id, OrderFilters(start_date=start_date, end_date=end_date)
            )
        except StoreException as e:
            return self.store_error(e, f"ranking products of store {store_id}")
        except Exception as e:
            return self.unexpected_error(e, f"ranking products of store {store_id}")

        products: Dict[str, Dict] = {}
        for item in items:
            if item.product_id is None:
                continue
            product = products.setdefault(
                item.product_id,
                {
                    "product_id": item.product_id,
                    "product_title": item.product_title,
                    "total_quantity": 0,
                    "total_revenue": Decimal("0"),
                },
            )
            product["total_quantity"] += item.quantity
            product["total_revenue"] += item.total_price

        ranked = sorted(
            products.values(), key=lambda p: (p["total_revenue"], p["total_quantity"]), reverse=True
        )
        return service_ok(ranked[:limit])

    @BaseService.log_performance
    def get_revenue_trends(
        self, user, store_id: str, period: str = "day", days=30, now: Optional[datetime] = None
    ) -> ServiceResult[List[Dict]]:
        """
        Revenue per day, week or month over the last ``days`` days.

        Cancelled and refunded orders are excluded. Weeks start on Monday;
        periods without orders are omitted.

        Args:
            user: Store owner
            store_id: UUID of the store
            period: "day", "week" or "month"
            days: Size of the window (default: 30, max: 365)

        Returns:
            ServiceResult with [{"date", "revenue", "order_count",
            "average_order_value"}], oldest period first
        """
        if period not in TREND_PERIODS:
            return service_err(
                ErrorCodes.VALIDATION_ERROR, f"Invalid period '{period}'. Must be one of: {', '.join(TREND_PERIODS)}"
            )
        days = parse_int(days)
        days = min(days if days and days > 0 else 30, 365)
        now = now or timezone.now()

        try:
            owned = self._owned_store(user, store_id)
            if not owned.ok:
                return owned

            orders, _ = self.store.list_store_orders(
                store_id,
                OrderFilters(
                    start_date=now - timedelta(days=days),
                    end_date=now,
                    exclude_statuses=list(INACTIVE_STATUSES),
                ),
            )
        except StoreException as e:
            return self.store_error(e, f"computing revenue trends for store {store_id}")
        except Exception as e:
            return self.unexpected_error(e, f"computing revenue trends for store {store_id}")

        buckets: Dict[date, Dict] = {}
        for order in orders:
            start = period_start(order.created_at, period)
            bucket = buckets.setdefault(start, {"date": start, "revenue": Decimal("0"), "order_count": 0})
            bucket["revenue"] += order.total_amount
            bucket["order_count"] += 1

        trends = []
        for start in sorted(buckets):
            bucket = buckets[start]
            bucket["average_order_value"] = bucket["revenue"] / bucket["order_count"]
            trends.append(bucket)
        return service_ok(trends)
