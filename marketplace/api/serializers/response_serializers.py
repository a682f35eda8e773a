"""
Request and Response Serializers for Marketplace API Documentation

Request serializers validate incoming bodies before they reach a service.
Response serializers define the structure of API responses for OpenAPI schema
generation only; views return service output directly.
"""

from rest_framework import serializers

# ===== Common Response Serializers =====


class ErrorBodySerializer(serializers.Serializer):
    code = serializers.ChoiceField(
        choices=[
            "unauthorized",
            "forbidden",
            "not_found",
            "bad_request",
            "conflict",
            "internal_error",
            "validation_error",
        ],
        help_text="Error code identifier",
    )
    message = serializers.CharField(help_text="Human-readable error message")
    details = serializers.DictField(help_text="Structured error context", required=False, allow_null=True)


class ErrorResponseSerializer(serializers.Serializer):
    """Standard error response"""

    error = ErrorBodySerializer()


# ===== Product Serializers =====


class CategorySummarySerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    slug = serializers.CharField()


class ProductResponseSerializer(serializers.Serializer):
    """Product as returned by search, featured and related listings"""

    id = serializers.UUIDField()
    title = serializers.CharField()
    slug = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    stock = serializers.IntegerField()
    rating = serializers.FloatField()
    rating_count = serializers.IntegerField()
    featured = serializers.BooleanField()
    seller_id = serializers.CharField()
    store_id = serializers.UUIDField(allow_null=True)
    category = CategorySummarySerializer(allow_null=True)
    primary_image = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class ProductSearchQuerySerializer(serializers.Serializer):
    """Query parameters accepted by product search"""

    query = serializers.CharField(required=False, help_text="Text matched against title and description")
    category = serializers.CharField(required=False, help_text="Category UUID or slug")
    min_price = serializers.CharField(required=False, help_text="Minimum price (inclusive)")
    max_price = serializers.CharField(required=False, help_text="Maximum price (inclusive)")
    min_rating = serializers.CharField(required=False, help_text="Minimum rating, 1 to 5")
    featured = serializers.CharField(required=False, help_text="Only featured products when true")
    sort_by = serializers.CharField(required=False, help_text="title, price, created_at, updated_at, rating, rating_count")
    sort_direction = serializers.ChoiceField(choices=["asc", "desc"], required=False, help_text="Default: desc")
    page = serializers.CharField(required=False, help_text="Page number (default: 1)")
    limit = serializers.CharField(required=False, help_text="Items per page (default: 20, max: 100)")


class ProductSearchResponseSerializer(serializers.Serializer):
    """Paginated product search response"""

    products = ProductResponseSerializer(many=True)
    total = serializers.IntegerField(help_text="Total number of matching products")
    page = serializers.IntegerField(help_text="Current page number")
    limit = serializers.IntegerField(help_text="Items per page")
    total_pages = serializers.IntegerField(help_text="Total number of pages")


# ===== Cart Serializers =====


class AddToCartRequestSerializer(serializers.Serializer):
    """Request body for adding item to cart"""

    product_id = serializers.UUIDField(help_text="Product UUID to add")
    quantity = serializers.IntegerField(min_value=1, default=1, help_text="Quantity to add (default: 1)")


class UpdateCartItemRequestSerializer(serializers.Serializer):
    """Request body for setting a cart line's quantity"""

    quantity = serializers.IntegerField(min_value=1, help_text="New absolute quantity")


class ApplyPromoRequestSerializer(serializers.Serializer):
    """Request body for previewing a promotion code"""

    code = serializers.CharField(max_length=50, help_text="Promotion code (case-insensitive)")


class CartProductSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    title = serializers.CharField()
    slug = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    stock = serializers.IntegerField()
    rating = serializers.FloatField()
    featured = serializers.BooleanField()
    primary_image = serializers.CharField(allow_null=True)


class CartItemResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField()
    product = CartProductSerializer(allow_null=True, help_text="Null when the product no longer exists")
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class CartResponseSerializer(serializers.Serializer):
    """Shopping cart response"""

    items = CartItemResponseSerializer(many=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2)
    item_count = serializers.IntegerField(help_text="Sum of quantities")


class DiscountedCartResponseSerializer(CartResponseSerializer):
    """Cart with a promotion applied (not persisted)"""

    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    promo_code = serializers.CharField()


# ===== Rating Serializers =====


class AddRatingRequestSerializer(serializers.Serializer):
    """Request body for rating a product"""

    product_id = serializers.UUIDField(help_text="Product UUID to rate")
    rating = serializers.IntegerField(min_value=1, max_value=5, help_text="Rating from 1 to 5")
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True, help_text="Optional comment")


class RatingUserSerializer(serializers.Serializer):
    full_name = serializers.CharField()


class RatingResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    product_id = serializers.UUIDField()
    user_id = serializers.CharField()
    rating = serializers.IntegerField()
    comment = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
    user = RatingUserSerializer(allow_null=True)


class RatingListResponseSerializer(serializers.Serializer):
    ratings = RatingResponseSerializer(many=True)
    total = serializers.IntegerField()
    page = serializers.IntegerField()
    limit = serializers.IntegerField()


# ===== Wishlist Serializers =====


class WishlistRequestSerializer(serializers.Serializer):
    product_id = serializers.UUIDField(help_text="Product UUID")


class WishlistItemResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    product_id = serializers.UUIDField()
    created_at = serializers.DateTimeField()
    product = ProductResponseSerializer(allow_null=True, required=False)


# ===== Product Image Serializers =====


class ReorderImagesRequestSerializer(serializers.Serializer):
    """Request body for reordering a product's images"""

    images = serializers.ListField(child=serializers.DictField(), allow_empty=False)


class SetPrimaryImageRequestSerializer(serializers.Serializer):
    image_id = serializers.CharField(help_text="Image id to make primary")


class ProductImageResponseSerializer(serializers.Serializer):
    id = serializers.CharField()
    url = serializers.CharField()
    alt_text = serializers.CharField(allow_blank=True)
    display_order = serializers.IntegerField()
    is_primary = serializers.BooleanField()


# ===== Catalog Serializers =====


class ProductDetailResponseSerializer(ProductResponseSerializer):
    """Product detail, with every image in display order"""

    images = ProductImageResponseSerializer(many=True)


class CategoryResponseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    slug = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    parent_id = serializers.UUIDField(allow_null=True)


class CategoryDetailResponseSerializer(CategoryResponseSerializer):
    subcategories = CategoryResponseSerializer(many=True)


class StoreResponseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    slug = serializers.CharField()
    owner_id = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    created_at = serializers.DateTimeField()


# ===== Order Serializers =====


class OrderStatusRequestSerializer(serializers.Serializer):
    """Request body for changing an order's status"""

    status = serializers.CharField(help_text="New order status")
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OrderReasonRequestSerializer(serializers.Serializer):
    """Request body for cancelling or refunding an order"""

    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OrderResponseSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    user_id = serializers.CharField()
    store_id = serializers.UUIDField()
    status = serializers.CharField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    shipping_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    currency = serializers.CharField()
    tracking_number = serializers.CharField(allow_null=True, allow_blank=True)
    notes = serializers.CharField(allow_null=True, allow_blank=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class OrderListResponseSerializer(serializers.Serializer):
    orders = OrderResponseSerializer(many=True)
    total_count = serializers.IntegerField()
    page = serializers.IntegerField()
    page_size = serializers.IntegerField()


class OrderAnalyticsResponseSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    orders_by_status = serializers.DictField(child=serializers.IntegerField())
    average_order_value = serializers.DecimalField(max_digits=14, decimal_places=2)


class CustomerInsightsResponseSerializer(serializers.Serializer):
    total_customers = serializers.IntegerField()
    new_customers = serializers.IntegerField()
    returning_customers = serializers.IntegerField()
    average_order_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_customer_value = serializers.DecimalField(max_digits=14, decimal_places=2)


class TopProductResponseSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    product_title = serializers.CharField(allow_null=True)
    total_quantity = serializers.IntegerField()
    total_revenue = serializers.DecimalField(max_digits=14, decimal_places=2)


class RevenueTrendResponseSerializer(serializers.Serializer):
    date = serializers.DateField(help_text="First day of the period")
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    order_count = serializers.IntegerField()
    average_order_value = serializers.DecimalField(max_digits=14, decimal_places=2)
