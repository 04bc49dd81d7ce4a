"""Checkout: assemble the draft, submit it, then clear the cart.

One ``CheckoutService`` serves one shopper's cart. Only one submission per
shopper may be in flight at a time. The in-flight token lives in the Django
cache under ``flight_key``, so a second request for the same shopper is
refused even when another worker is handling the first one. A rejected
submission leaves the cart as it was so the shopper can fix the problem and
try again. There is no automatic retry.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from common.notifications import Notifier
from django.core.cache import cache

from .assembler import CheckoutError, ShippingInput, assemble_order
from .gateway import OrderSubmissionError

logger = logging.getLogger("buildmart.orders")

# Upper bound on how long a crashed worker can block the shopper.
IN_FLIGHT_TIMEOUT = 60


def flight_key_for(user_id) -> str:
    return f"checkout:user:{user_id}"


class CheckoutInProgressError(CheckoutError):
    status_code = 409


@dataclass(frozen=True)
class CheckoutResult:
    client_draft_id: str
    order_id: int
    order_number: str
    order: dict


class CheckoutService:
    def __init__(self, cart_store, gateway, notifier: Optional[Notifier] = None, *, flight_key: Optional[str] = None):
        self.cart_store = cart_store
        self.gateway = gateway
        self.notifier = notifier or Notifier()
        self.flight_key = flight_key or f"checkout:{uuid4().hex}"

    @property
    def in_flight(self) -> bool:
        return cache.get(self.flight_key) is not None

    def place_order(self, shipping: ShippingInput, identity, *, now=None) -> CheckoutResult:
        """Submit the current cart as an order for ``identity``.

        The stored order's id and number replace the draft's. The cart is
        cleared afterwards unless it was already emptied elsewhere.
        """
        if not cache.add(self.flight_key, 1, IN_FLIGHT_TIMEOUT):
            raise CheckoutInProgressError("Your order is already being submitted.")
        try:
            draft = assemble_order(self.cart_store.cart, shipping, identity, now=now)
            try:
                order = self.gateway.submit(draft, identity.token)
            except OrderSubmissionError as exc:
                logger.warning(
                    "checkout.failed",
                    extra={
                        "event": "checkout.failed",
                        "client_reference": draft.client_draft_id,
                        "user_id": identity.user_id,
                        "status_code": exc.status_code,
                        "reason": exc.message,
                    },
                )
                self.notifier.error(exc.message)
                raise

            if not self.cart_store.reload().is_empty:
                self.cart_store.clear_cart()
            result = CheckoutResult(
                client_draft_id=draft.client_draft_id,
                order_id=order["id"],
                order_number=order["number"],
                order=order,
            )
            logger.info(
                "checkout.completed",
                extra={
                    "event": "checkout.completed",
                    "client_reference": result.client_draft_id,
                    "order_number": result.order_number,
                    "user_id": identity.user_id,
                },
            )
            self.notifier.success(f"Order {result.order_number} placed")
            return result
        finally:
            cache.delete(self.flight_key)
