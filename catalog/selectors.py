"""Selectors for the catalog domain.

Expose read-only query helpers to keep views thin and allow reuse across
APIs and services. Selectors should return querysets or lightweight data
structures and avoid side effects.
"""

from typing import Optional, Tuple

from django.db.models import Prefetch, QuerySet

from .models import Product, ProductVariant


def list_active_products() -> QuerySet[Product]:
    """Return products visible in the storefront, ordered by name."""

    return Product.objects.filter(status=Product.STATUS_ACTIVE).order_by("name")


def get_active_product(slug: str) -> Optional[Product]:
    """Return an active product with its variants prefetched, or None."""

    qs = Product.objects.filter(status=Product.STATUS_ACTIVE).prefetch_related(
        Prefetch("variants", queryset=ProductVariant.objects.order_by("sku"))
    )
    return qs.filter(slug=slug).first()


def get_purchasable(product_id: int, variant_id: Optional[int] = None) -> Tuple[Optional[Product], Optional[ProductVariant]]:
    """Resolve the product (and optional variant) a shopper wants to buy.

    Returns ``(None, None)`` when the product is not active, and
    ``(product, None)`` when a variant id was given but does not belong to it;
    callers treat both as not found.
    """

    product = Product.objects.filter(pk=product_id, status=Product.STATUS_ACTIVE).first()
    if product is None:
        return None, None
    if variant_id is None:
        return product, None
    variant = ProductVariant.objects.filter(pk=variant_id, product=product).first()
    return product, variant
