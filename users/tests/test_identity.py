import json

import pytest
from common.storage import MemoryStorage
from rest_framework.test import APIRequestFactory
from users.identity import TOKEN_STORAGE_KEY, USER_STORAGE_KEY, Identity, IdentityStore, identity_from_request
from users.permissions import IsStoreAdmin
from users.tests.factories import AdminUserFactory, UserFactory


def _identity(**overrides):
    data = {"user_id": 7, "email": "ana@example.com", "first_name": "Ana", "token": "tok-123"}
    data.update(overrides)
    return Identity(**data)


def test_login_writes_record_and_token_together():
    storage = MemoryStorage()
    IdentityStore(storage).login(_identity())

    assert storage.get(TOKEN_STORAGE_KEY) == "tok-123"
    record = json.loads(storage.get(USER_STORAGE_KEY))
    assert record["email"] == "ana@example.com"
    assert "token" not in record


def test_current_round_trips_identity():
    storage = MemoryStorage()
    store = IdentityStore(storage)
    store.login(_identity())
    assert store.current() == _identity()


def test_logout_clears_both_keys():
    storage = MemoryStorage()
    store = IdentityStore(storage)
    store.login(_identity())
    store.logout()
    assert storage.keys() == []
    assert store.current() is None


def test_current_is_none_when_token_missing():
    storage = MemoryStorage({USER_STORAGE_KEY: json.dumps(_identity().record())})
    assert IdentityStore(storage).current() is None


def test_corrupt_record_is_discarded():
    storage = MemoryStorage({USER_STORAGE_KEY: "{not json", TOKEN_STORAGE_KEY: "tok"})
    assert IdentityStore(storage).current() is None
    assert storage.get(TOKEN_STORAGE_KEY) is None


@pytest.mark.django_db
def test_identity_from_request_requires_credential():
    user = UserFactory()
    request = APIRequestFactory().get("/")
    request.user = user
    request.auth = None
    assert identity_from_request(request) is None

    request.auth = "header.payload.sig"
    identity = identity_from_request(request)
    assert identity.user_id == user.id
    assert identity.token == "header.payload.sig"


@pytest.mark.django_db
def test_is_store_admin_permission():
    perm = IsStoreAdmin()
    request = APIRequestFactory().get("/")

    request.user = UserFactory()
    assert perm.has_permission(request, None) is False

    request.user = AdminUserFactory()
    assert perm.has_permission(request, None) is True

    staff = UserFactory(is_staff=True)
    request.user = staff
    assert perm.has_permission(request, None) is True
