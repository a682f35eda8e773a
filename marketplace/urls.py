from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .api.views import prometheus_metrics
from .cart.api.views.cart_views import CartViewSet
from .catalog.api.views.category_views import CategoryViewSet
from .catalog.api.views.image_views import ProductImageViewSet
from .catalog.api.views.product_views import ProductViewSet
from .catalog.api.views.rating_views import RatingViewSet
from .catalog.api.views.wishlist_views import WishlistViewSet
from .ordering.api.views.order_views import OrderViewSet, StoreViewSet

# Create the main router
router = DefaultRouter()
router.register(r"products", ProductViewSet, basename="product")
router.register(r"categories", CategoryViewSet, basename="category")
router.register(r"ratings", RatingViewSet, basename="rating")
router.register(r"cart", CartViewSet, basename="cart")
router.register(r"wishlist", WishlistViewSet, basename="wishlist")
router.register(r"orders", OrderViewSet, basename="order")
router.register(r"stores", StoreViewSet, basename="store")

app_name = "marketplace"

urlpatterns = [
    # Prometheus metrics endpoint
    path("metrics/", prometheus_metrics.marketplace_prometheus_metrics, name="marketplace-metrics"),
    # Main API routes
    path("", include(router.urls)),
    # Nested product routes (manual routing)
    path(
        "products/<uuid:product_id>/images/reorder/",
        ProductImageViewSet.as_view({"post": "reorder"}),
        name="product-images-reorder",
    ),
    path(
        "products/<uuid:product_id>/images/primary/",
        ProductImageViewSet.as_view({"post": "set_primary"}),
        name="product-images-primary",
    ),
]
