from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    CategoryDetailResponseSerializer,
    CategoryResponseSerializer,
    ErrorResponseSerializer,
)
from marketplace.api.views.errors import error_response
from marketplace.services import CatalogService


class CategoryViewSet(viewsets.ViewSet):
    """
    ViewSet for categories - read-only, looked up by slug
    """

    permission_classes = [AllowAny]
    lookup_field = "slug"

    def get_service(self) -> CatalogService:
        return container.catalog_service()

    @extend_schema(
        operation_id="categories_list",
        summary="List categories",
        description="""
        **What it receives:**
        - `parent`: Category UUID or slug; only its direct subcategories are listed
        - `top_level`: Only categories without a parent when true

        **What it returns:**
        - Categories ordered by name
        """,
        parameters=[
            OpenApiParameter(name="parent", type=str, description="Parent category UUID or slug"),
            OpenApiParameter(name="top_level", type=bool, description="Only root categories"),
        ],
        responses={
            200: OpenApiResponse(response=CategoryResponseSerializer(many=True), description="Categories"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Parent category not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Categories"],
    )
    def list(self, request):
        top_level = request.query_params.get("top_level", "").lower() in ("true", "1")
        result = self.get_service().list_categories(parent=request.query_params.get("parent"), top_level=top_level)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="categories_retrieve",
        summary="Get a category with its subcategories",
        responses={
            200: OpenApiResponse(response=CategoryDetailResponseSerializer, description="Category found"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Category not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Categories"],
    )
    def retrieve(self, request, slug=None):
        result = self.get_service().get_category(slug)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)
