from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    ErrorResponseSerializer,
    WishlistItemResponseSerializer,
    WishlistRequestSerializer,
)
from marketplace.api.views.errors import error_response, validation_error_response
from marketplace.services import WishlistService


class WishlistViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> WishlistService:
        return container.wishlist_service()

    @extend_schema(
        operation_id="wishlist_list",
        summary="Get user's wishlist",
        responses={
            200: OpenApiResponse(response=WishlistItemResponseSerializer(many=True), description="Wishlist entries"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Wishlist"],
    )
    def list(self, request):
        result = self.get_service().get_wishlist(request.user)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="wishlist_add",
        summary="Save a product to the wishlist",
        request=WishlistRequestSerializer,
        responses={
            201: OpenApiResponse(response=WishlistItemResponseSerializer, description="Product saved"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Already in wishlist"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Wishlist"],
    )
    def create(self, request):
        serializer = WishlistRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().add_to_wishlist(request.user, str(serializer.validated_data["product_id"]))
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="wishlist_contains",
        summary="Check whether a product is in the wishlist",
        responses={
            200: OpenApiResponse(description='{"product_id": ..., "in_wishlist": bool}'),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Wishlist"],
    )
    def retrieve(self, request, pk=None):
        result = self.get_service().is_in_wishlist(request.user, pk)
        if not result.ok:
            return error_response(result)
        return Response({"product_id": pk, "in_wishlist": result.value}, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="wishlist_remove",
        summary="Remove a product from the wishlist",
        responses={
            204: OpenApiResponse(description="Product removed (or was not saved)"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Wishlist"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().remove_from_wishlist(request.user, pk)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)
