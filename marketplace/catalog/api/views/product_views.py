from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    ErrorResponseSerializer,
    ProductDetailResponseSerializer,
    ProductResponseSerializer,
    ProductSearchQuerySerializer,
    ProductSearchResponseSerializer,
)
from marketplace.api.views.errors import error_response
from marketplace.services import CatalogService, SearchService
from marketplace.services.base import parse_int

SEARCH_PARAMS = (
    "query",
    "category",
    "min_price",
    "max_price",
    "min_rating",
    "featured",
    "sort_by",
    "sort_direction",
    "page",
    "limit",
)


class ProductViewSet(viewsets.ViewSet):
    """Read-only product browsing: detail, search, featured and related products."""

    permission_classes = [AllowAny]

    def get_service(self) -> SearchService:
        return container.search_service()

    def get_catalog_service(self) -> CatalogService:
        return container.catalog_service()

    @extend_schema(
        operation_id="products_search",
        summary="Search products",
        description="""
        **What it receives:**
        - `query`: Text matched against title and description
        - `category`: Category UUID or slug
        - `min_price` / `max_price`: Price range (inclusive)
        - `min_rating`: Minimum rating (1-5)
        - `featured`: Only featured products when true
        - `sort_by` / `sort_direction`: Ordering (default: newest first)
        - `page` / `limit`: Pagination (default limit 20, max 100)

        **What it returns:**
        - Matching products with total, page, limit and total_pages
        """,
        parameters=[ProductSearchQuerySerializer],
        responses={
            200: OpenApiResponse(response=ProductSearchResponseSerializer, description="Search results"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid search parameters"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=False, methods=["get"])
    def search(self, request):
        params = {key: request.query_params.get(key) for key in SEARCH_PARAMS if key in request.query_params}
        result = self.get_service().search_products(params)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_featured",
        summary="List featured products",
        parameters=[OpenApiParameter(name="limit", type=int, description="Number of products (default: 8)")],
        responses={
            200: OpenApiResponse(response=ProductResponseSerializer(many=True), description="Featured products"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=False, methods=["get"])
    def featured(self, request):
        limit = parse_int(request.query_params.get("limit"))
        result = self.get_service().get_featured_products(limit if limit and limit > 0 else 8)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_related",
        summary="List products related to a product",
        description="Products in the same category, highest rated first.",
        parameters=[OpenApiParameter(name="limit", type=int, description="Number of products (default: 4)")],
        responses={
            200: OpenApiResponse(response=ProductResponseSerializer(many=True), description="Related products"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=True, methods=["get"])
    def related(self, request, pk=None):
        limit = parse_int(request.query_params.get("limit"))
        result = self.get_service().get_related_products(pk, limit if limit and limit > 0 else 4)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_retrieve",
        summary="Get product details",
        description="Product with its category and every image in display order.",
        responses={
            200: OpenApiResponse(response=ProductDetailResponseSerializer, description="Product found"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Malformed product id"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Products"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_catalog_service().get_product(pk)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="products_by_slug",
        summary="Get product details by slug",
        responses={
            200: OpenApiResponse(response=ProductDetailResponseSerializer, description="Product found"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Products"],
    )
    @action(detail=False, methods=["get"], url_path=r"by-slug/(?P<slug>[-\w]+)", url_name="by-slug")
    def by_slug(self, request, slug=None):
        result = self.get_catalog_service().get_product_by_slug(slug)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)
