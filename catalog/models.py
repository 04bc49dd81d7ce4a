"""Catalog app models.

Defines the products sold in the storefront and their purchasable variants.
Prices are stored as decimals with two places; a variant without its own
price sells at the product price.
"""

from common.choices import ProductStatus
from django.db import models


class TimeStampedModel(models.Model):
    """Abstract base model adding created/updated timestamps."""

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Product(TimeStampedModel):
    """Core product entity."""

    STATUS_ACTIVE = ProductStatus.ACTIVE
    STATUS_DRAFT = ProductStatus.DRAFT
    STATUS_ARCHIVED = ProductStatus.ARCHIVED
    STATUS_CHOICES = ProductStatus.choices

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=220, unique=True)
    description = models.TextField(blank=True)
    sku = models.CharField(max_length=64, unique=True)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    compare_at_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    inventory = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    vendor_ref = models.CharField(max_length=64, blank=True)
    is_featured = models.BooleanField(default=False, db_index=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.CheckConstraint(name="product_price_non_negative", check=models.Q(price__gte=0)),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class ProductVariant(TimeStampedModel):
    """Variant SKU under a product (e.g., length or finish)."""

    product = models.ForeignKey(Product, related_name="variants", on_delete=models.CASCADE)
    sku = models.CharField(max_length=64, unique=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    inventory = models.PositiveIntegerField(default=0)
    options = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["sku"]
        constraints = [
            models.CheckConstraint(
                name="variant_price_non_negative",
                check=models.Q(price__gte=0) | models.Q(price__isnull=True),
            ),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.product.name} ({self.sku})"

    @property
    def effective_price(self):
        return self.price if self.price is not None else self.product.price
