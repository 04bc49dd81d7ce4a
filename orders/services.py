import hashlib
import json
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Callable, Optional, Tuple

from common.choices import OrderStatus
from django.db import IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from .emails import send_order_placed_email
from .models import IdempotencyKey, Order, OrderItem, OrderTimelineEvent

logger = logging.getLogger("buildmart.orders")


class OrderStatusError(Exception):
    """Raised when a status change is not allowed for the acting user."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def order_number_for(order_id: int) -> str:
    return f"BM-{int(order_id):06d}"


def create_order(*, user, data: dict) -> Order:
    """Persist a validated order draft for ``user``.

    The server assigns the order number; the draft's own id is kept as
    ``client_reference``. Items and the submitted timeline are stored as given.
    """

    items = data.get("items") or []
    timeline = data.get("timeline") or [
        {"status": OrderStatus.PENDING, "description": "Order placed", "timestamp": timezone.now()}
    ]
    with transaction.atomic():
        order = Order.objects.create(
            user=user,
            client_reference=data.get("client_reference", ""),
            email=data["email"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            phone=data.get("phone", ""),
            notes=data.get("notes", ""),
            subtotal=data["subtotal"],
            tax=data["tax"],
            shipping=data["shipping"],
            discount=data["discount"],
            total=data["total"],
            coupon_code=data.get("coupon_code") or "",
            shipping_address=data["shipping_address"],
            billing_address=data.get("billing_address") or data["shipping_address"],
            is_bulk_order=data.get("is_bulk_order", False),
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=item["product"],
                    variant=item.get("variant"),
                    product_name=item["product_name"],
                    sku=item.get("sku", ""),
                    vendor_ref=item.get("vendor_ref", ""),
                    quantity=item["quantity"],
                    unit_price=item["unit_price"],
                    line_total=item["line_total"],
                )
                for item in items
            ]
        )
        OrderTimelineEvent.objects.bulk_create(
            [
                OrderTimelineEvent(
                    order=order,
                    status=event["status"],
                    description=event["description"],
                    timestamp=event["timestamp"],
                )
                for event in timeline
            ]
        )
        order.number = order_number_for(order.id)
        order.save(update_fields=["number"])

    logger.info(
        "order_created",
        extra={
            "event": "order_created",
            "order_id": order.id,
            "order_number": order.number,
            "client_reference": order.client_reference,
            "user_id": order.user_id,
            "item_count": len(items),
            "total": str(order.total),
        },
    )
    send_order_placed_email(order)
    return order


def can_view(order: Order, user) -> bool:
    return bool(getattr(user, "is_store_admin", False) or order.user_id == getattr(user, "id", None))


def update_order_status(order: Order, *, status: str, actor) -> Order:
    """Move an order to ``status`` and append a timeline event.

    Store admins may set any status. The owner may only cancel an order that
    is still pending. Setting the current status again is a no-op.
    """

    if status not in OrderStatus.values:
        raise OrderStatusError(f"Unknown status: {status}")
    is_admin = getattr(actor, "is_store_admin", False)
    if not is_admin:
        if order.user_id != getattr(actor, "id", None):
            raise OrderStatusError("Not authorized to update this order.", status_code=403)
        if status != OrderStatus.CANCELLED or order.status != OrderStatus.PENDING:
            raise OrderStatusError("Only pending orders can be cancelled.", status_code=403)
    if order.status == status:
        return order

    prev = order.status
    with transaction.atomic():
        order.status = status
        order.save(update_fields=["status", "updated_at"])
        OrderTimelineEvent.objects.create(order=order, status=status, description=f"Order {status}")
    logger.info(
        "order_status_changed",
        extra={
            "event": "order_status_changed",
            "order_id": order.id,
            "user_id": order.user_id,
            "actor_id": getattr(actor, "id", None),
            "status_from": prev,
            "status_to": status,
        },
    )
    return order


def list_orders_for(user) -> QuerySet[Order]:
    """Orders visible to ``user``, newest first; admins see every order."""

    qs = Order.objects.all() if getattr(user, "is_store_admin", False) else Order.objects.filter(user_id=user.id)
    return qs.order_by("-created_at", "-id").prefetch_related("items", "timeline")


def with_idempotency(
    *,
    key: str,
    user,
    path: str,
    method: str,
    handler: Callable[[], Tuple[dict, int]],
    request_hash: Optional[str] = None,
    scope: Optional[str] = None,
) -> Tuple[dict, int]:
    """Run handler idempotently and persist its response for the given key and scope.

    - Scope defaults to the caller: for authenticated users, "user:<id>"; otherwise "anon".
      Callers that identify the shopper some other way pass ``scope`` explicitly.
    - If a record exists and the stored `request_hash` differs from the provided one, returns 409.
    - If a record exists but response is not yet stored, returns 409 to indicate in-progress.
    """

    if scope is None:
        scope = f"user:{getattr(user, 'id', None)}" if getattr(user, "id", None) else "anon"
    method = str(method).upper()
    path = str(path)

    try:
        with transaction.atomic():
            idem = IdempotencyKey.objects.create(
                key=key,
                user=user if getattr(user, "id", None) else None,
                scope=scope,
                path=path,
                method=method,
                request_hash=request_hash,
                expires_at=timezone.now() + timedelta(hours=24),
            )
    except IntegrityError:
        idem = IdempotencyKey.objects.get(key=key, scope=scope, path=path, method=method)
        if idem.request_hash and request_hash and idem.request_hash != request_hash:
            return {"detail": "Idempotency key reused with different request payload"}, 409
        if idem.response_json is not None and idem.response_code is not None:
            return idem.response_json, int(idem.response_code)
        return {"detail": "Request in progress"}, 409

    body, code = handler()

    def _json_safe(value):
        if isinstance(value, Decimal):
            return str(value)
        if isinstance(value, dict):
            return {k: _json_safe(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [_json_safe(v) for v in value]
        return value

    IdempotencyKey.objects.filter(id=idem.id).update(response_json=_json_safe(body), response_code=code)
    return body, code


def compute_request_hash(data: Optional[dict]) -> Optional[str]:
    """Compute a canonical SHA256 hash of the request body.

    Uses sorted keys JSON representation to stabilize the hash across equivalent payloads.
    Returns None when data is falsy or not JSON serializable.
    """
    if not data:
        return None
    try:
        payload = json.dumps(data, sort_keys=True, separators=(",", ":"))
    except (TypeError, ValueError):
        return None
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
