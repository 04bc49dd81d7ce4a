from decimal import Decimal

import factory
from catalog.models import Product, ProductVariant
from factory import Faker
from factory.django import DjangoModelFactory


class ProductFactory(DjangoModelFactory):
    class Meta:
        model = Product

    name = Faker("sentence", nb_words=3)
    slug = factory.Sequence(lambda n: f"product-{n}")
    sku = factory.Sequence(lambda n: f"BM-{n:05d}")
    description = Faker("paragraph")
    price = Decimal("19.99")
    inventory = 50
    status = Product.STATUS_ACTIVE
    vendor_ref = "vendor-acme"


class ProductVariantFactory(DjangoModelFactory):
    class Meta:
        model = ProductVariant

    product = factory.SubFactory(ProductFactory)
    sku = factory.Sequence(lambda n: f"BM-V-{n:05d}")
    price = None
    inventory = 10
    options = factory.LazyFunction(lambda: {"length": "8 ft"})
