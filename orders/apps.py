"""Django app configuration for orders."""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """Order requests, their status timeline and idempotent submission records."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
