# Marketplace API Serializers

# Import request/response serializers for validation and API documentation
from .response_serializers import (
    AddRatingRequestSerializer,
    AddToCartRequestSerializer,
    ApplyPromoRequestSerializer,
    CartResponseSerializer,
    CategoryDetailResponseSerializer,
    CategoryResponseSerializer,
    CustomerInsightsResponseSerializer,
    DiscountedCartResponseSerializer,
    ErrorResponseSerializer,
    OrderAnalyticsResponseSerializer,
    OrderListResponseSerializer,
    OrderReasonRequestSerializer,
    OrderResponseSerializer,
    OrderStatusRequestSerializer,
    ProductDetailResponseSerializer,
    ProductImageResponseSerializer,
    ProductResponseSerializer,
    ProductSearchQuerySerializer,
    ProductSearchResponseSerializer,
    RatingListResponseSerializer,
    RatingResponseSerializer,
    ReorderImagesRequestSerializer,
    RevenueTrendResponseSerializer,
    SetPrimaryImageRequestSerializer,
    StoreResponseSerializer,
    TopProductResponseSerializer,
    UpdateCartItemRequestSerializer,
    WishlistItemResponseSerializer,
    WishlistRequestSerializer,
)

__all__ = [
    "AddRatingRequestSerializer",
    "AddToCartRequestSerializer",
    "ApplyPromoRequestSerializer",
    "CartResponseSerializer",
    "CategoryDetailResponseSerializer",
    "CategoryResponseSerializer",
    "CustomerInsightsResponseSerializer",
    "DiscountedCartResponseSerializer",
    "ErrorResponseSerializer",
    "OrderAnalyticsResponseSerializer",
    "OrderListResponseSerializer",
    "OrderReasonRequestSerializer",
    "OrderResponseSerializer",
    "OrderStatusRequestSerializer",
    "ProductDetailResponseSerializer",
    "ProductImageResponseSerializer",
    "ProductResponseSerializer",
    "ProductSearchQuerySerializer",
    "ProductSearchResponseSerializer",
    "RatingListResponseSerializer",
    "RatingResponseSerializer",
    "ReorderImagesRequestSerializer",
    "RevenueTrendResponseSerializer",
    "SetPrimaryImageRequestSerializer",
    "StoreResponseSerializer",
    "TopProductResponseSerializer",
    "UpdateCartItemRequestSerializer",
    "WishlistItemResponseSerializer",
    "WishlistRequestSerializer",
]
