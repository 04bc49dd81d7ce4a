"""Scoped throttling shared by the storefront APIs."""

from django.conf import settings
from rest_framework.throttling import ScopedRateThrottle


class SettingsScopedRateThrottle(ScopedRateThrottle):
    """ScopedRateThrottle that looks the rate up on every request.

    DRF caches ``DEFAULT_THROTTLE_RATES`` on the class at import time; reading
    settings per request lets ``override_settings`` change cart, catalog and
    order limits. Views may expose ``throttle_scope`` as a property to pick a
    read or write scope by HTTP method.
    """

    def get_rate(self):
        rates = getattr(settings, "REST_FRAMEWORK", {}).get("DEFAULT_THROTTLE_RATES", {})
        return rates.get(self.scope)
