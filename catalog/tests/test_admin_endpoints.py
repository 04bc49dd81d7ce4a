import pytest
from catalog.models import Product
from catalog.tests.factories import ProductFactory
from rest_framework.test import APIClient
from users.tests.factories import AdminUserFactory, UserFactory

PAYLOAD = {
    "name": "Concrete Mix 80lb",
    "slug": "concrete-mix-80lb",
    "sku": "CON-80",
    "price": "6.48",
    "inventory": 120,
    "status": "active",
}


@pytest.mark.django_db
def test_admin_create_product_requires_admin_role():
    client = APIClient()
    client.force_authenticate(user=UserFactory())
    resp_forbidden = client.post("/api/v1/admin/catalog/products/", PAYLOAD, format="json")
    assert resp_forbidden.status_code == 403

    client.force_authenticate(user=AdminUserFactory())
    resp = client.post("/api/v1/admin/catalog/products/", PAYLOAD, format="json")
    assert resp.status_code == 201
    assert resp.data["slug"] == "concrete-mix-80lb"
    assert Product.objects.filter(sku="CON-80").exists()


@pytest.mark.django_db
def test_admin_anonymous_is_unauthorized():
    client = APIClient()
    resp = client.get("/api/v1/admin/catalog/products/")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_admin_lists_drafts_and_updates_status():
    p = ProductFactory(status="draft")
    client = APIClient()
    client.force_authenticate(user=AdminUserFactory())

    listing = client.get("/api/v1/admin/catalog/products/?status=draft")
    assert [r["id"] for r in listing.data["results"]] == [p.id]

    resp = client.patch(f"/api/v1/admin/catalog/products/{p.id}/", {"status": "active"}, format="json")
    assert resp.status_code == 200
    p.refresh_from_db()
    assert p.status == "active"


@pytest.mark.django_db
def test_admin_rejects_compare_at_below_price():
    client = APIClient()
    client.force_authenticate(user=AdminUserFactory())
    resp = client.post(
        "/api/v1/admin/catalog/products/",
        {**PAYLOAD, "compare_at_price": "5.00"},
        format="json",
    )
    assert resp.status_code == 400
    assert "compare_at_price" in resp.data


@pytest.mark.django_db
def test_admin_variant_crud():
    product = ProductFactory()
    client = APIClient()
    client.force_authenticate(user=AdminUserFactory())

    created = client.post(
        "/api/v1/admin/catalog/variants/",
        {"product": product.id, "sku": "CON-80-PALLET", "price": "300.00", "options": {"pack": "pallet"}},
        format="json",
    )
    assert created.status_code == 201

    deleted = client.delete(f"/api/v1/admin/catalog/variants/{created.data['id']}/")
    assert deleted.status_code == 204
    assert product.variants.count() == 0
