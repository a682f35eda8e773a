from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    CustomerInsightsResponseSerializer,
    ErrorResponseSerializer,
    OrderAnalyticsResponseSerializer,
    OrderListResponseSerializer,
    OrderReasonRequestSerializer,
    OrderResponseSerializer,
    OrderStatusRequestSerializer,
    RevenueTrendResponseSerializer,
    StoreResponseSerializer,
    TopProductResponseSerializer,
)
from marketplace.api.views.errors import error_response, validation_error_response
from marketplace.ordering.api.serializers.order_serializers import (
    DateRangeQuerySerializer,
    RevenueTrendsQuerySerializer,
    StoreOrderQuerySerializer,
    TopProductsQuerySerializer,
)
from marketplace.services import CatalogService, OrderService


class StoreViewSet(viewsets.ViewSet):
    """Public storefront lookups and seller-side order reporting, keyed by store id."""

    permission_classes = [IsAuthenticated]

    def get_permissions(self):
        if self.action in ["retrieve", "by_slug", "by_owner"]:
            return [AllowAny()]
        return super().get_permissions()

    def get_service(self) -> OrderService:
        return container.order_service()

    def get_catalog_service(self) -> CatalogService:
        return container.catalog_service()

    @extend_schema(
        operation_id="stores_retrieve",
        summary="Get a store",
        responses={
            200: OpenApiResponse(response=StoreResponseSerializer, description="Store found"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Malformed store id"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Stores"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_catalog_service().get_store(pk)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="stores_by_slug",
        summary="Get a store by slug",
        responses={
            200: OpenApiResponse(response=StoreResponseSerializer, description="Store found"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Stores"],
    )
    @action(detail=False, methods=["get"], url_path=r"by-slug/(?P<slug>[-\w]+)", url_name="by-slug")
    def by_slug(self, request, slug=None):
        result = self.get_catalog_service().get_store_by_slug(slug)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="stores_by_owner",
        summary="List the stores of an owner",
        description="Newest first; an owner without stores gets an empty list.",
        responses={
            200: OpenApiResponse(response=StoreResponseSerializer(many=True), description="Stores"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Malformed owner id"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Stores"],
    )
    @action(detail=False, methods=["get"], url_path=r"by-owner/(?P<owner_id>[^/.]+)", url_name="by-owner")
    def by_owner(self, request, owner_id=None):
        result = self.get_catalog_service().get_stores_by_owner(owner_id)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="store_orders_list",
        summary="List a store's orders",
        description="""
        **What it receives:**
        - `pk` (path): Store UUID
        - Optional filters: `status` (comma-separated), `start_date`, `end_date`,
          `customer_id`, `min_amount`, `max_amount`
        - Pagination: `page`, `page_size` (default 10, max 100)

        **What it returns:**
        - Orders newest first with total_count, page and page_size
        """,
        parameters=[StoreOrderQuerySerializer],
        responses={
            200: OpenApiResponse(response=OrderListResponseSerializer, description="Orders retrieved"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid filters"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Seller Orders"],
    )
    @action(detail=True, methods=["get"])
    def orders(self, request, pk=None):
        query = StoreOrderQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response(query.errors)

        result = self.get_service().get_store_orders(
            request.user,
            pk,
            query.to_filters(),
            page=query.validated_data["page"],
            page_size=query.validated_data["page_size"],
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="store_orders_analytics",
        summary="Order analytics for a store",
        parameters=[DateRangeQuerySerializer],
        responses={
            200: OpenApiResponse(response=OrderAnalyticsResponseSerializer, description="Analytics computed"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Seller Orders"],
    )
    @action(detail=True, methods=["get"])
    def analytics(self, request, pk=None):
        query = DateRangeQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response(query.errors)

        result = self.get_service().get_order_analytics(
            request.user, pk, query.validated_data.get("start_date"), query.validated_data.get("end_date")
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="store_customer_insights",
        summary="Customer insights for a store",
        description="Cancelled and refunded orders are excluded.",
        responses={
            200: OpenApiResponse(response=CustomerInsightsResponseSerializer, description="Insights computed"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Seller Orders"],
    )
    @action(detail=True, methods=["get"], url_path="customer-insights")
    def customer_insights(self, request, pk=None):
        result = self.get_service().get_customer_insights(request.user, pk)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="store_top_products",
        summary="Top-selling products of a store",
        description="""
        **What it receives:**
        - `pk` (path): Store UUID
        - `limit`: Number of products (default 10, max 100)
        - `start_date` / `end_date`: Only orders created in this range

        **What it returns:**
        - Products with total quantity and revenue sold, highest revenue first
        """,
        parameters=[TopProductsQuerySerializer],
        responses={
            200: OpenApiResponse(response=TopProductResponseSerializer(many=True), description="Ranking computed"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid parameters"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Seller Orders"],
    )
    @action(detail=True, methods=["get"], url_path="top-products")
    def top_products(self, request, pk=None):
        query = TopProductsQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response(query.errors)

        result = self.get_service().get_top_products(
            request.user,
            pk,
            limit=query.validated_data["limit"],
            start_date=query.validated_data.get("start_date"),
            end_date=query.validated_data.get("end_date"),
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="store_revenue_trends",
        summary="Revenue trends of a store",
        description="""
        **What it receives:**
        - `pk` (path): Store UUID
        - `period`: day, week or month (default day)
        - `days`: Size of the window ending now (default 30, max 365)

        **What it returns:**
        - Revenue, order count and average order value per period, oldest first.
          Cancelled and refunded orders are excluded.
        """,
        parameters=[RevenueTrendsQuerySerializer],
        responses={
            200: OpenApiResponse(response=RevenueTrendResponseSerializer(many=True), description="Trends computed"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid parameters"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Store not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Seller Orders"],
    )
    @action(detail=True, methods=["get"], url_path="revenue-trends")
    def revenue_trends(self, request, pk=None):
        query = RevenueTrendsQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return validation_error_response(query.errors)

        result = self.get_service().get_revenue_trends(
            request.user, pk, period=query.validated_data["period"], days=query.validated_data["days"]
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> OrderService:
        return container.order_service()

    @extend_schema(
        operation_id="orders_retrieve",
        summary="Get order details",
        description="Readable by the buyer and by the owner of the order's store.",
        responses={
            200: OpenApiResponse(response=OrderResponseSerializer, description="Order with items and status history"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Access denied"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Orders"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().get_order(request.user, pk)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_update_status",
        summary="Change an order's status (store owner)",
        request=OrderStatusRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderResponseSerializer, description="Status updated"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid status"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = OrderStatusRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().update_order_status(
            request.user, pk, serializer.validated_data["status"], serializer.validated_data.get("notes")
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_cancel",
        summary="Cancel an order (store owner)",
        request=OrderReasonRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderResponseSerializer, description="Order cancelled"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def cancel(self, request, pk=None):
        serializer = OrderReasonRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().cancel_order(request.user, pk, serializer.validated_data.get("reason"))
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="orders_refund",
        summary="Refund an order (store owner)",
        request=OrderReasonRequestSerializer,
        responses={
            200: OpenApiResponse(response=OrderResponseSerializer, description="Order refunded"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the store owner"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Order not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Orders"],
    )
    @action(detail=True, methods=["post"])
    def refund(self, request, pk=None):
        serializer = OrderReasonRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().refund_order(request.user, pk, serializer.validated_data.get("reason"))
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)
