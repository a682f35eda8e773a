import random
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.utils.text import slugify

from marketplace.models import (
    CartItem,
    Category,
    Order,
    OrderItem,
    Product,
    ProductImage,
    ProductRating,
    Promotion,
    Store,
    WishlistItem,
)

User = get_user_model()


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user_{n}")
    email = factory.Sequence(lambda n: f"user_{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    password = factory.PostGenerationMethodCall("set_password", "defaultpassword")
    is_active = True


class SellerFactory(UserFactory):
    username = factory.Sequence(lambda n: f"seller_{n}")
    email = factory.Sequence(lambda n: f"seller_{n}@example.com")


class CategoryFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    description = factory.Faker("text", max_nb_chars=200)


class StoreFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Store

    name = factory.Sequence(lambda n: f"Store {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.name))
    description = factory.Faker("sentence", nb_words=8)
    owner = factory.SubFactory(SellerFactory)


class ProductFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Product

    title = factory.Sequence(lambda n: f"Product {n}")
    slug = factory.LazyAttribute(lambda o: slugify(o.title))
    description = factory.Faker("paragraph", nb_sentences=3)
    seller = factory.SubFactory(SellerFactory)
    category = factory.SubFactory(CategoryFactory)
    price = factory.LazyFunction(lambda: Decimal(f"{random.randint(10, 500)}.00"))
    stock = 10
    featured = False


class ProductImageFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductImage

    product = factory.SubFactory(ProductFactory)
    url = factory.Sequence(lambda n: f"https://cdn.example.com/products/{n}.jpg")
    alt_text = factory.Faker("sentence", nb_words=4)
    display_order = factory.Sequence(lambda n: n)
    is_primary = False


class CartItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = CartItem

    user = factory.SubFactory(UserFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 1


class PromotionFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Promotion

    code = factory.Sequence(lambda n: f"PROMO{n}")
    description = factory.Faker("sentence", nb_words=5)
    discount_percentage = Decimal("10.00")
    active = True


class ProductRatingFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = ProductRating

    product = factory.SubFactory(ProductFactory)
    user = factory.SubFactory(UserFactory)
    rating = factory.Faker("random_int", min=1, max=5)
    comment = factory.Faker("sentence", nb_words=12)


class WishlistItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = WishlistItem

    user = factory.SubFactory(UserFactory)
    product = factory.SubFactory(ProductFactory)


class OrderFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Order

    user = factory.SubFactory(UserFactory)
    store = factory.SubFactory(StoreFactory)
    status = "created"
    subtotal = Decimal("100.00")
    total_amount = Decimal("100.00")
    currency = "USD"


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory)
    product_title = factory.LazyAttribute(lambda o: o.product.title if o.product else "")
    quantity = 1
    price_at_purchase = Decimal("50.00")
    total_price = factory.LazyAttribute(lambda o: o.price_at_purchase * o.quantity)
