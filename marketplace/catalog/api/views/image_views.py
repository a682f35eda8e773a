from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    ErrorResponseSerializer,
    ProductImageResponseSerializer,
    ReorderImagesRequestSerializer,
    SetPrimaryImageRequestSerializer,
)
from marketplace.api.views.errors import error_response, validation_error_response
from marketplace.services import ProductImageService


class ProductImageViewSet(viewsets.ViewSet):
    """Image ordering for a product's seller. Routed under products/<product_id>/images/."""

    permission_classes = [IsAuthenticated]

    def get_service(self) -> ProductImageService:
        return container.image_service()

    @extend_schema(
        operation_id="product_images_reorder",
        summary="Reorder a product's images",
        description="""
        **What it receives:**
        - `images`: list of `{"id": image id, "display_order": int}`

        Every entry is applied independently. If any entry fails, the
        response lists all failures in `error.details.errors`, each with the
        entry's `index`, `id` and `message`.
        """,
        request=ReorderImagesRequestSerializer,
        responses={
            200: OpenApiResponse(response=ProductImageResponseSerializer(many=True), description="Images reordered"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="One or more entries failed"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the product's seller"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Product Images"],
    )
    def reorder(self, request, product_id=None):
        serializer = ReorderImagesRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().reorder_images(request.user, str(product_id), serializer.validated_data["images"])
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="product_images_set_primary",
        summary="Choose a product's primary image",
        request=SetPrimaryImageRequestSerializer,
        responses={
            200: OpenApiResponse(response=ProductImageResponseSerializer(many=True), description="Primary image set"),
            403: OpenApiResponse(response=ErrorResponseSerializer, description="Not the product's seller"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product or image not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Product Images"],
    )
    def set_primary(self, request, product_id=None):
        serializer = SetPrimaryImageRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().set_primary_image(
            request.user, str(product_id), serializer.validated_data["image_id"]
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)
