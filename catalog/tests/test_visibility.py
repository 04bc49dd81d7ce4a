import pytest
from catalog.tests.factories import ProductFactory
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_product_list_hides_drafts_and_archived():
    ProductFactory(status="active", name="Visible One")
    ProductFactory(status="draft", name="Hidden Draft")
    ProductFactory(status="archived", name="Hidden Archived")

    client = APIClient()
    resp = client.get("/api/v1/catalog/products/")
    assert resp.status_code == 200
    names = [r["name"] for r in resp.data["results"]]
    assert "Visible One" in names
    assert "Hidden Draft" not in names
    assert "Hidden Archived" not in names


@pytest.mark.django_db
def test_product_detail_draft_returns_404():
    p = ProductFactory(status="draft")

    client = APIClient()
    resp = client.get(f"/api/v1/catalog/products/{p.slug}/")
    assert resp.status_code == 404
