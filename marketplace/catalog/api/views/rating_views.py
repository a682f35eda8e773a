from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly
from rest_framework.response import Response

from infrastructure.container import container
from marketplace.api.serializers import (
    AddRatingRequestSerializer,
    ErrorResponseSerializer,
    RatingListResponseSerializer,
    RatingResponseSerializer,
)
from marketplace.api.views.errors import error_body, error_response, validation_error_response
from marketplace.services import ErrorCodes, RatingService

PRODUCT_ID_PARAM = OpenApiParameter(name="product_id", type=str, required=True, description="Product UUID")


def _missing_product_id() -> Response:
    return Response(
        error_body(ErrorCodes.VALIDATION_ERROR, "product_id is required"), status=status.HTTP_400_BAD_REQUEST
    )


class RatingViewSet(viewsets.ViewSet):
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get_service(self) -> RatingService:
        return container.rating_service()

    def get_permissions(self):
        if self.action in ["create", "destroy", "mine"]:
            return [IsAuthenticated()]
        return super().get_permissions()

    @extend_schema(
        operation_id="ratings_list",
        summary="List a product's ratings",
        description="""
        **What it receives:**
        - `product_id`: Product UUID
        - `page` / `limit`: Pagination (default limit 10, max 50)

        **What it returns:**
        - Ratings newest first, each with the rater's display name
        """,
        parameters=[
            PRODUCT_ID_PARAM,
            OpenApiParameter(name="page", type=int, description="Page number (default: 1)"),
            OpenApiParameter(name="limit", type=int, description="Items per page (default: 10, max: 50)"),
        ],
        responses={
            200: OpenApiResponse(response=RatingListResponseSerializer, description="Ratings retrieved"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing product_id"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Ratings"],
    )
    def list(self, request):
        product_id = request.query_params.get("product_id")
        if not product_id:
            return _missing_product_id()

        result = self.get_service().get_product_ratings(
            product_id, request.query_params.get("page", 1), request.query_params.get("limit")
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="ratings_create",
        summary="Rate a product",
        description="""
        **What it receives:**
        - `product_id` (UUID): Product to rate
        - `rating` (integer): 1 to 5
        - `comment` (string, optional)

        Rating a product twice replaces the earlier rating. The product's
        average rating and rating count are refreshed afterwards.
        """,
        request=AddRatingRequestSerializer,
        responses={
            201: OpenApiResponse(response=RatingResponseSerializer, description="Rating saved"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Invalid rating"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Product not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Ratings"],
    )
    def create(self, request):
        serializer = AddRatingRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return validation_error_response(serializer.errors)

        data = serializer.validated_data
        result = self.get_service().add_rating(
            request.user, str(data["product_id"]), data["rating"], data.get("comment") or None
        )
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_201_CREATED)

    @extend_schema(
        operation_id="ratings_delete",
        summary="Delete one of your ratings",
        responses={
            204: OpenApiResponse(description="Rating deleted"),
            404: OpenApiResponse(response=ErrorResponseSerializer, description="Rating not found"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Ratings"],
    )
    def destroy(self, request, pk=None):
        result = self.get_service().delete_rating(request.user, pk)
        if not result.ok:
            return error_response(result)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        operation_id="ratings_mine",
        summary="Get your rating of a product",
        parameters=[PRODUCT_ID_PARAM],
        responses={
            200: OpenApiResponse(response=RatingResponseSerializer, description="Your rating, or null"),
            400: OpenApiResponse(response=ErrorResponseSerializer, description="Missing product_id"),
            500: OpenApiResponse(response=ErrorResponseSerializer, description="Internal server error"),
        },
        tags=["Marketplace - Ratings"],
    )
    @action(detail=False, methods=["get"])
    def mine(self, request):
        product_id = request.query_params.get("product_id")
        if not product_id:
            return _missing_product_id()

        result = self.get_service().get_user_rating(request.user, product_id)
        if not result.ok:
            return error_response(result)
        return Response(result.value, status=status.HTTP_200_OK)
