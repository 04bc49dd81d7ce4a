import pytest
from django.contrib import admin
from django.test import Client, RequestFactory
from orders.admin import OrderAdmin
from orders.models import Order
from users.tests.factories import UserFactory

from .factories import OrderFactory

pytestmark = pytest.mark.django_db


def test_status_is_read_only_on_change_form():
    staff = UserFactory(is_staff=True, is_superuser=True)
    request = RequestFactory().get("/admin/orders/order/")
    request.user = staff
    order = OrderFactory()

    assert "status" in OrderAdmin(Order, admin.site).get_readonly_fields(request, order)


def test_change_form_has_no_status_input():
    staff = UserFactory(is_staff=True, is_superuser=True)
    order = OrderFactory()
    client = Client()
    client.force_login(staff)

    resp = client.get(f"/admin/orders/order/{order.id}/change/")
    assert resp.status_code == 200
    assert 'name="status"' not in resp.content.decode()


def test_status_action_appends_timeline_event():
    staff = UserFactory(is_staff=True, is_superuser=True)
    order = OrderFactory()
    client = Client()
    client.force_login(staff)

    resp = client.post(
        "/admin/orders/order/",
        {"action": "mark_shipped", "_selected_action": [order.id]},
    )

    assert resp.status_code == 302
    order.refresh_from_db()
    assert order.status == "shipped"
    assert [e.description for e in order.timeline.order_by("timestamp", "id")] == ["Order placed", "Order shipped"]
