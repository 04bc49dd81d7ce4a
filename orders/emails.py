"""Email utilities for the orders app.

Uses Django's email backend, with links composed from FRONTEND_URL.
"""

from django.conf import settings
from django.core.mail import send_mail


def send_order_placed_email(order) -> None:
    """Tell the customer their order request was received.

    Orders are confirmed manually, so the message says the order is pending and
    links to it on the frontend using `FRONTEND_URL`. Silently no-ops if no
    email is present.
    """
    to_email = order.email or getattr(order.user, "email", None)
    if not to_email:
        return

    subject = f"We received your order {order.number}"
    frontend = getattr(settings, "FRONTEND_URL", "")
    order_url = f"{frontend.rstrip('/')}/orders/{order.id}" if frontend else ""

    lines = [
        f"Hi {order.first_name or 'there'},",
        "",
        "Thanks for shopping with BuildMart. Your order request is pending confirmation by our team.",
        "",
        f"Order: {order.number}",
        f"Total: {order.total}",
    ]
    if order_url:
        lines += ["", f"You can follow your order here: {order_url}"]

    send_mail(
        subject,
        "\n".join(lines) + "\n",
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [to_email],
        fail_silently=True,
    )
