"""Order submission gateway.

Checkout hands an order draft and the shopper's bearer credential to a gateway,
which returns the stored order as the order endpoint would render it. The local
gateway runs in-process: it checks the credential the same way the API does,
validates the draft with the order write serializer and persists it.
"""

import logging

from django.db import DatabaseError
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication

from .assembler import CheckoutError
from .serializers import OrderCreateSerializer, OrderSerializer

logger = logging.getLogger("buildmart.orders")


class OrderSubmissionError(CheckoutError):
    """The order service refused or failed to store the order."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


def _first_error(errors) -> str:
    if isinstance(errors, dict):
        for field, value in errors.items():
            message = _first_error(value)
            if message:
                return message if field == "non_field_errors" else f"{field}: {message}"
    if isinstance(errors, list):
        for value in errors:
            message = _first_error(value)
            if message:
                return message
        return ""
    return str(errors) if errors else ""


class LocalOrderGateway:
    def __init__(self, authentication=None):
        self.authentication = authentication or JWTAuthentication()

    def authenticate(self, credential: str):
        try:
            token = self.authentication.get_validated_token(credential)
            return self.authentication.get_user(token)
        except AuthenticationFailed as exc:
            raise OrderSubmissionError("Your session has expired. Please sign in again.", status_code=401) from exc

    def submit(self, draft, credential: str) -> dict:
        user = self.authenticate(credential)
        serializer = OrderCreateSerializer(data=draft.to_payload())
        if not serializer.is_valid():
            logger.warning(
                "order_rejected",
                extra={"event": "order_rejected", "user_id": user.id, "errors": serializer.errors},
            )
            raise OrderSubmissionError(_first_error(serializer.errors) or "Failed to create order")
        try:
            order = serializer.save(user=user)
        except DatabaseError as exc:
            logger.exception("order_create_failed", extra={"event": "order_create_failed", "user_id": user.id})
            raise OrderSubmissionError("Failed to create order", status_code=500) from exc
        return OrderSerializer(order).data
