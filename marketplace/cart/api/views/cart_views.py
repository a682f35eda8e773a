from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    AddToCartRequestSerializer,
    ApplyPromoRequestSerializer,
    CartResponseSerializer,
    DiscountedCartResponseSerializer,
    ErrorResponseSerializer,
    UpdateCartItemRequestSerializer,
)
from marketplace.api.views.errors import error_response, validation_error_response
from marketplace.services import CartService

CART_ITEM_PATH = r"items/(?P<item_id>[^/.]+)"


class CartViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticated]

    def get_service(self) -> CartService:
        return container.cart_service()

    @extend_schema(
        operation_id="cart_get",
        summary="Get user's shopping cart",
        description="""
        **What it receives:**
        - Authentication token (header)

        **What it returns:**
        - Cart items with product details and line totals
        - Cart total and item count
        """,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Cart retrieved successfully"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    def list(self, request):
        result = self.get_service().get_cart(request.user)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_add_item",
        summary="Add item to cart",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to add
        - `quantity` (integer, optional): Quantity to add (default: 1)

        Adding a product already in the cart increases that line's quantity.

        **What it returns:**
        - Updated cart with all items
        """,
        request=AddToCartRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Item added successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid data or insufficient stock"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            409: OpenApiResponse(response=ErrorResponseSerializer, description="Cart changed concurrently"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"], url_path="items")
    def add_item(self, request):
        serializer = AddToCartRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().add_to_cart(
            request.user,
            str(serializer.validated_data["product_id"]),
            serializer.validated_data["quantity"],
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_update_item",
        summary="Set the quantity of a cart item",
        description="""
        **What it receives:**
        - `item_id` (path): Cart item id
        - `quantity` (integer): New absolute quantity

        **What it returns:**
        - Updated cart
        """,
        request=UpdateCartItemRequestSerializer,
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Item updated successfully"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid quantity or insufficient stock"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["patch"], url_path=CART_ITEM_PATH)
    def update_item(self, request, item_id=None):
        serializer = UpdateCartItemRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().update_cart_item(request.user, item_id, serializer.validated_data["quantity"])
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_remove_item",
        summary="Remove item from cart",
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Item removed successfully"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Item not in cart"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    @update_item.mapping.delete
    def remove_item(self, request, item_id=None):
        result = self.get_service().remove_from_cart(request.user, item_id)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_clear",
        summary="Clear all items from cart",
        responses={
            200: OpenApiResponse(response=CartResponseSerializer, description="Cart cleared"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["delete"])
    def clear(self, request):
        result = self.get_service().clear_cart(request.user)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="cart_apply_promo",
        summary="Preview a promotion code against the cart",
        description="""
        **What it receives:**
        - `code` (string): Promotion code (case-insensitive)

        **What it returns:**
        - Cart with `subtotal`, `discount`, `promo_code` and the discounted `total`

        The discount is not saved; fetching the cart again shows the full total.
        """,
        request=ApplyPromoRequestSerializer,
        responses={
            200: OpenApiResponse(response=DiscountedCartResponseSerializer, description="Promotion applied"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing code"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid or expired promotion code"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Cart"],
    )
    @action(detail=False, methods=["post"], url_path="apply-promo")
    def apply_promo(self, request):
        serializer = ApplyPromoRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        result = self.get_service().apply_promo_code(request.user, serializer.validated_data["code"])
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)
