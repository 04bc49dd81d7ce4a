from django.apps import AppConfig


class CartConfig(AppConfig):
    """Session cart, pricing and coupons; the cart has no database tables."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "cart"
    verbose_name = "Cart"
