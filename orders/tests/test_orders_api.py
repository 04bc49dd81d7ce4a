from decimal import Decimal

import pytest
from catalog.tests.factories import ProductFactory, ProductVariantFactory
from django.core import mail
from orders.models import IdempotencyKey, Order
from rest_framework.test import APIClient
from users.tests.factories import AdminUserFactory, UserFactory

from .factories import ADDRESS, OrderFactory, OrderItemFactory

pytestmark = pytest.mark.django_db

ORDERS_URL = "/api/v1/orders/"


def _client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


def _payload(product, **overrides):
    # 2 x 30.00 with WELCOME15: discount 9.00, tax 4.95, flat shipping
    payload = {
        "client_reference": "BM-123456QK",
        "email": "site@example.com",
        "first_name": "Sam",
        "last_name": "Builder",
        "phone": "+212600000000",
        "items": [
            {
                "product": product.id,
                "product_name": product.name,
                "sku": product.sku,
                "vendor_ref": "vendor-acme",
                "quantity": 2,
                "unit_price": "30.00",
                "line_total": "60.00",
            }
        ],
        "subtotal": "60.00",
        "tax": "4.95",
        "shipping": "12.99",
        "discount": "9.00",
        "total": "68.94",
        "coupon_code": "welcome15",
        "shipping_address": dict(ADDRESS),
    }
    payload.update(overrides)
    return payload


def test_list_requires_auth():
    resp = APIClient().get(ORDERS_URL)
    assert resp.status_code == 401


def test_list_shows_only_own_orders_newest_first():
    user = UserFactory()
    older = OrderFactory(user=user)
    newer = OrderFactory(user=user)
    OrderFactory()

    resp = _client(user).get(ORDERS_URL)

    assert resp.status_code == 200
    assert resp.data["count"] == 2
    assert [o["id"] for o in resp.data["results"]] == [newer.id, older.id]


def test_admin_sees_all_orders():
    OrderFactory()
    OrderFactory()
    resp = _client(AdminUserFactory()).get(ORDERS_URL)
    assert resp.data["count"] == 2


def test_list_filters():
    user = UserFactory()
    target = OrderFactory(user=user, status="shipped")
    OrderFactory(user=user)
    client = _client(user)

    assert [o["id"] for o in client.get(ORDERS_URL, {"status": "shipped"}).data["results"]] == [target.id]
    assert [o["id"] for o in client.get(ORDERS_URL, {"number": target.number}).data["results"]] == [target.id]


def test_create_order_assigns_number_and_timeline():
    user = UserFactory()
    product = ProductFactory(price=Decimal("30.00"))

    resp = _client(user).post(ORDERS_URL, _payload(product), format="json")

    assert resp.status_code == 201, resp.data
    order = Order.objects.get(pk=resp.data["id"])
    assert order.user == user
    assert order.number == f"BM-{order.id:06d}"
    assert order.client_reference == "BM-123456QK"
    assert order.coupon_code == "WELCOME15"
    assert order.billing_address == order.shipping_address
    assert resp.data["timeline"][0]["description"] == "Order placed"
    assert resp.data["items"][0]["line_total"] == "60.00"
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["site@example.com"]


def test_create_keeps_submitted_timeline():
    product = ProductFactory()
    timeline = [{"status": "pending", "description": "Order placed", "timestamp": "2026-03-02T09:30:00Z"}]
    resp = _client(UserFactory()).post(ORDERS_URL, _payload(product, timeline=timeline), format="json")
    assert resp.status_code == 201, resp.data
    assert resp.data["timeline"][0]["timestamp"].startswith("2026-03-02T09:30:00")


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"items": []}, "items"),
        ({"total": "1.00"}, "total"),
        ({"tax": "0.00"}, "tax"),
        ({"discount": "20.00"}, "discount"),
        ({"coupon_code": "SUMMER99"}, "coupon_code"),
        ({"status": "shipped"}, "status"),
        ({"payment_status": "paid"}, "payment_status"),
    ],
)
def test_create_rejects_inconsistent_drafts(overrides, field):
    product = ProductFactory()
    resp = _client(UserFactory()).post(ORDERS_URL, _payload(product, **overrides), format="json")
    assert resp.status_code == 400
    assert field in resp.data
    assert not Order.objects.exists()


def test_create_rejects_bad_line_total():
    product = ProductFactory()
    payload = _payload(product)
    payload["items"][0]["line_total"] = "59.99"
    resp = _client(UserFactory()).post(ORDERS_URL, payload, format="json")
    assert resp.status_code == 400
    assert "items" in resp.data


def test_create_rejects_variant_of_other_product():
    product = ProductFactory()
    payload = _payload(product)
    payload["items"][0]["variant"] = ProductVariantFactory().id
    resp = _client(UserFactory()).post(ORDERS_URL, payload, format="json")
    assert resp.status_code == 400


def test_create_is_idempotent_with_key():
    user = UserFactory()
    product = ProductFactory()
    client = _client(user)

    first = client.post(ORDERS_URL, _payload(product), format="json", HTTP_IDEMPOTENCY_KEY="ord-1")
    second = client.post(ORDERS_URL, _payload(product), format="json", HTTP_IDEMPOTENCY_KEY="ord-1")

    assert first.status_code == second.status_code == 201
    assert first.data["id"] == second.data["id"]
    assert Order.objects.count() == 1
    assert IdempotencyKey.objects.get().scope == f"user:{user.id}"


def test_detail_for_owner_and_404_for_others():
    item = OrderItemFactory()
    order = item.order

    resp = _client(order.user).get(f"{ORDERS_URL}{order.id}/")
    assert resp.status_code == 200
    assert resp.data["number"] == order.number
    assert resp.data["items"][0]["product_name"] == item.product_name

    assert _client(UserFactory()).get(f"{ORDERS_URL}{order.id}/").status_code == 404
    assert _client(AdminUserFactory()).get(f"{ORDERS_URL}{order.id}/").status_code == 200
    assert _client(order.user).get(f"{ORDERS_URL}999999/").status_code == 404
