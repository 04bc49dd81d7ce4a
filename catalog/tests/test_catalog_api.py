from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_product_detail_includes_variants_with_effective_price():
    product = ProductFactory(name="Deck Screws", slug="deck-screws", price=Decimal("24.50"))
    ProductVariantFactory(product=product, sku="SCR-1LB", price=None)
    ProductVariantFactory(product=product, sku="SCR-5LB", price=Decimal("99.00"))

    client = APIClient()
    resp = client.get("/api/v1/catalog/products/deck-screws/")
    assert resp.status_code == 200
    variants = {v["sku"]: v for v in resp.data["variants"]}
    assert variants["SCR-1LB"]["effective_price"] == "24.50"
    assert variants["SCR-5LB"]["effective_price"] == "99.00"


@pytest.mark.django_db
def test_featured_filter_and_search():
    ProductFactory(name="Cordless Drill", is_featured=True)
    ProductFactory(name="Claw Hammer", is_featured=False)

    client = APIClient()
    featured = client.get("/api/v1/catalog/products/?featured=true")
    assert [r["name"] for r in featured.data["results"]] == ["Cordless Drill"]

    search = client.get("/api/v1/catalog/products/?search=hammer")
    assert [r["name"] for r in search.data["results"]] == ["Claw Hammer"]


@pytest.mark.django_db
def test_ordering_by_price_descending():
    ProductFactory(name="Cheap", price=Decimal("1.00"))
    ProductFactory(name="Pricey", price=Decimal("300.00"))

    client = APIClient()
    resp = client.get("/api/v1/catalog/products/?ordering=-price")
    assert [r["name"] for r in resp.data["results"]] == ["Pricey", "Cheap"]


@pytest.mark.django_db
def test_in_stock_reflects_inventory():
    ProductFactory(name="Gone", inventory=0)

    client = APIClient()
    resp = client.get("/api/v1/catalog/products/")
    assert resp.data["results"][0]["in_stock"] is False
