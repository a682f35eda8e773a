from django.contrib import admin

from .models import (
    CartItem,
    Category,
    Order,
    OrderItem,
    OrderStatusHistory,
    Product,
    ProductImage,
    ProductRating,
    Promotion,
    Store,
    WishlistItem,
)


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 1
    fields = ("url", "alt_text", "display_order", "is_primary")


class ProductRatingInline(admin.TabularInline):
    model = ProductRating
    extra = 0
    fields = ("user", "rating", "comment")
    readonly_fields = ("user", "rating", "comment", "created_at")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "parent")
    search_fields = ("name", "description")
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Store)
class StoreAdmin(admin.ModelAdmin):
    list_display = ("name", "owner", "created_at")
    search_fields = ("name", "owner__username")
    readonly_fields = ("created_at", "updated_at")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("title", "seller", "category", "price", "stock", "rating", "rating_count", "featured")
    list_filter = ("featured", "category", "created_at")
    search_fields = ("title", "description", "seller__username")
    # The aggregate is maintained by rating recalculation only
    readonly_fields = ("rating", "rating_count", "created_at", "updated_at")
    inlines = [ProductImageInline, ProductRatingInline]


@admin.register(ProductRating)
class ProductRatingAdmin(admin.ModelAdmin):
    list_display = ("product", "user", "rating", "created_at")
    list_filter = ("rating", "created_at")
    search_fields = ("product__title", "user__username", "comment")


@admin.register(WishlistItem)
class WishlistItemAdmin(admin.ModelAdmin):
    list_display = ("user", "product", "created_at")
    search_fields = ("user__username", "product__title")


@admin.register(CartItem)
class CartItemAdmin(admin.ModelAdmin):
    list_display = ("user", "product", "quantity", "updated_at")
    search_fields = ("user__username", "product__title")


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ("code", "discount_percentage", "active", "created_at")
    list_filter = ("active",)
    search_fields = ("code", "description")


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("product", "product_title", "quantity", "price_at_purchase", "total_price")


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    readonly_fields = ("status", "changed_by", "notes", "changed_at")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "store", "status", "total_amount", "created_at")
    list_filter = ("status", "created_at")
    search_fields = ("id", "user__username", "store__name", "tracking_number")
    readonly_fields = ("created_at", "updated_at")
    inlines = [OrderItemInline, OrderStatusHistoryInline]
