import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from users.tests.factories import UserFactory


@pytest.mark.django_db
def test_register_creates_customer_and_returns_tokens():
    client = APIClient()
    resp = client.post(
        "/api/v1/account/register/",
        {
            "email": "New.Builder@Example.com",
            "password": "Sturdy-Lumber-42",
            "first_name": "Nadia",
            "last_name": "Haddad",
        },
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["user"]["email"] == "new.builder@example.com"
    assert resp.data["user"]["role"] == "customer"
    assert resp.data["access"] and resp.data["refresh"]

    user = get_user_model().objects.get(email="new.builder@example.com")
    assert user.check_password("Sturdy-Lumber-42")
    assert user.username == "new.builder@example.com"


@pytest.mark.django_db
def test_register_rejects_duplicate_email_with_conflict():
    UserFactory(email="taken@example.com")
    client = APIClient()
    resp = client.post(
        "/api/v1/account/register/",
        {"email": "TAKEN@example.com", "password": "Sturdy-Lumber-42", "first_name": "A", "last_name": "B"},
        format="json",
    )
    assert resp.status_code == 409
    assert resp.data == {"detail": "Email already registered."}
    assert get_user_model().objects.filter(email="taken@example.com").count() == 1


@pytest.mark.django_db
def test_register_rejects_weak_password():
    client = APIClient()
    resp = client.post(
        "/api/v1/account/register/",
        {"email": "weak@example.com", "password": "123", "first_name": "A", "last_name": "B"},
        format="json",
    )
    assert resp.status_code == 400
    assert "password" in resp.data


@pytest.mark.django_db
def test_register_rejects_malformed_phone():
    client = APIClient()
    resp = client.post(
        "/api/v1/account/register/",
        {
            "email": "phone@example.com",
            "password": "Sturdy-Lumber-42",
            "first_name": "A",
            "last_name": "B",
            "phone": "call me",
        },
        format="json",
    )
    assert resp.status_code == 400
    assert "phone" in resp.data
