import pytest
from django.conf import settings
from django.core.cache import cache
from django.test import override_settings
from rest_framework.test import APIClient


@pytest.mark.django_db
def test_cart_reads_and_writes_have_separate_scopes():
    cache.clear()
    rates = {**settings.REST_FRAMEWORK["DEFAULT_THROTTLE_RATES"], "cart": "1/min", "cart_write": "1/min"}
    with override_settings(REST_FRAMEWORK={**settings.REST_FRAMEWORK, "DEFAULT_THROTTLE_RATES": rates}):
        client = APIClient()
        assert client.get("/api/v1/cart/").status_code == 200
        assert client.get("/api/v1/cart/").status_code == 429
        assert client.post("/api/v1/cart/clear/").status_code == 200
        assert client.post("/api/v1/cart/clear/").status_code == 429
    cache.clear()
