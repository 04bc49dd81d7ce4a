"""Turn a priced cart into an order draft.

The draft is what gets submitted to the order endpoint. It copies the cart's
lines and totals verbatim, carries a client-side draft id for display while the
request is in flight, and seeds the status timeline with the "Order placed"
event. Checkout requires a signed-in identity with a bearer credential.
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Tuple

from common.choices import OrderStatus, PaymentStatus
from django.conf import settings
from django.utils import timezone

DEFAULT_VENDOR_REF = "vendor-1"
ADDRESS_LABEL = "Shipping"


class CheckoutError(Exception):
    """Base class for checkout failures surfaced to the shopper."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(CheckoutError):
    status_code = 401


class EmptyCartError(CheckoutError):
    pass


@dataclass(frozen=True)
class ShippingInput:
    email: str
    first_name: str
    last_name: str
    address: str
    city: str
    phone: str
    notes: str = ""


@dataclass(frozen=True)
class OrderDraftItem:
    product_id: int
    variant_id: Optional[int]
    name: str
    sku: str
    vendor_ref: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal

    def to_payload(self) -> dict:
        return {
            "product": self.product_id,
            "variant": self.variant_id,
            "product_name": self.name,
            "sku": self.sku,
            "vendor_ref": self.vendor_ref,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "line_total": str(self.line_total),
        }


@dataclass(frozen=True)
class OrderDraft:
    client_draft_id: str
    user_id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    notes: str
    items: Tuple[OrderDraftItem, ...]
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    total: Decimal
    coupon_code: Optional[str]
    shipping_address: dict
    billing_address: dict
    created_at: datetime
    status: str = OrderStatus.PENDING
    payment_status: str = PaymentStatus.PENDING
    is_bulk_order: bool = False
    timeline: Tuple[dict, ...] = field(default=())

    def to_payload(self) -> dict:
        """JSON body accepted by the order create endpoint."""
        return {
            "client_reference": self.client_draft_id,
            "email": self.email,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "phone": self.phone,
            "notes": self.notes,
            "status": str(self.status),
            "payment_status": str(self.payment_status),
            "items": [item.to_payload() for item in self.items],
            "subtotal": str(self.subtotal),
            "tax": str(self.tax),
            "shipping": str(self.shipping),
            "discount": str(self.discount),
            "total": str(self.total),
            "coupon_code": self.coupon_code or "",
            "shipping_address": dict(self.shipping_address),
            "billing_address": dict(self.billing_address),
            "is_bulk_order": self.is_bulk_order,
            "timeline": [
                {
                    "status": str(event["status"]),
                    "description": event["description"],
                    "timestamp": event["timestamp"].isoformat(),
                }
                for event in self.timeline
            ],
        }


def generate_client_draft_id(now: datetime) -> str:
    """Short, time-derived reference such as ``BM-482913QK``."""
    millis = int(now.timestamp() * 1000) % 1_000_000
    suffix = "".join(secrets.choice(string.ascii_uppercase) for _ in range(2))
    return f"BM-{millis:06d}{suffix}"


def build_address(shipping: ShippingInput, country: Optional[str] = None) -> dict:
    return {
        "label": ADDRESS_LABEL,
        "street": shipping.address,
        "city": shipping.city,
        "state": "",
        "zip_code": "",
        "country": country or settings.STORE_COUNTRY,
    }


def assemble_order(cart, shipping: ShippingInput, identity, *, now: Optional[datetime] = None) -> OrderDraft:
    """Build the order draft for ``cart``.

    Raises ``UnauthenticatedError`` when there is no identity or it carries no
    credential, and ``EmptyCartError`` when the cart has no lines.
    """
    if identity is None or not getattr(identity, "token", None):
        raise UnauthenticatedError("Please sign in to place your order.")
    if cart.is_empty:
        raise EmptyCartError("Your cart is empty.")

    now = now or timezone.now()
    address = build_address(shipping)
    items = tuple(
        OrderDraftItem(
            product_id=item.product_id,
            variant_id=item.variant_id,
            name=item.name,
            sku=item.sku,
            vendor_ref=item.vendor_ref or DEFAULT_VENDOR_REF,
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=item.line_total,
        )
        for item in cart.items
    )
    return OrderDraft(
        client_draft_id=generate_client_draft_id(now),
        user_id=identity.user_id,
        email=shipping.email,
        first_name=shipping.first_name,
        last_name=shipping.last_name,
        phone=shipping.phone,
        notes=shipping.notes or "",
        items=items,
        subtotal=cart.subtotal,
        tax=cart.tax,
        shipping=cart.shipping,
        discount=cart.discount,
        total=cart.total,
        coupon_code=cart.coupon_code,
        shipping_address=address,
        billing_address=dict(address),
        created_at=now,
        timeline=({"status": OrderStatus.PENDING, "description": "Order placed", "timestamp": now},),
    )
