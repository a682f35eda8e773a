from django.contrib.auth import get_user_model
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from .catalog import Product


User = get_user_model()


class ProductRating(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="ratings")
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="product_ratings")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "product_ratings"
        constraints = [
            models.UniqueConstraint(fields=["product", "user"], name="unique_product_rating_per_user"),
        ]
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return f"{self.rating}/5 by {self.user.username} for {self.product.title}"


class WishlistItem(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="wishlist_items")
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="wishlisted_by")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "wishlist_items"
        constraints = [
            models.UniqueConstraint(fields=["user", "product"], name="unique_wishlist_item_per_user"),
        ]
        ordering = ["-created_at"]
        app_label = "marketplace"

    def __str__(self):
        return f"{self.product.title} in {self.user.username}'s wishlist"
