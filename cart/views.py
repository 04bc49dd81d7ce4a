"""DRF views for the session cart.

The cart lives in the visitor's session, so every endpoint is open to
anonymous shoppers; only checkout needs a signed-in identity. Each response
carries the cart and the notifications the operation produced.
"""

from common.notifications import CollectingNotifier
from common.storage import SessionStorage
from common.throttling import SettingsScopedRateThrottle
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, inline_serializer
from orders.assembler import CheckoutError, ShippingInput
from orders.checkout import CheckoutService, flight_key_for
from orders.gateway import LocalOrderGateway
from orders.services import compute_request_hash, with_idempotency
from rest_framework import serializers as rf_serializers
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle
from rest_framework.views import APIView
from users.identity import IdentityStore, identity_from_request

from .serializers import (
    AddItemSerializer,
    CartReadSerializer,
    CouponSerializer,
    ShippingInputSerializer,
    UpdateQuantitySerializer,
)
from .store import CartStore

CART_EXAMPLE = {
    "cart": {
        "items": [
            {
                "id": "ci-3f9a1c2b7d4e",
                "product_id": 12,
                "variant_id": None,
                "name": "Framing Lumber 2x4x8",
                "sku": "LUM-2X4-8",
                "vendor_ref": "vendor-acme",
                "unit_price": "40.00",
                "quantity": 2,
                "line_total": "80.00",
            }
        ],
        "coupon_code": "WELCOME15",
        "discount": "12.00",
        "subtotal": "80.00",
        "tax": "6.60",
        "shipping": "0.00",
        "total": "74.60",
        "item_count": 2,
        "is_empty": False,
    },
    "notifications": [{"level": "success", "message": "Coupon applied: WELCOME15"}],
}

CartResponse = inline_serializer(
    name="CartResponse",
    fields={
        "cart": CartReadSerializer(),
        "notifications": rf_serializers.ListField(child=rf_serializers.DictField()),
    },
)
NotFoundResponse = inline_serializer(name="CartNotFoundError", fields={"detail": rf_serializers.CharField()})


class CartView(APIView):
    """Base for cart endpoints: builds the store around the session."""

    permission_classes = [AllowAny]
    throttle_classes = [SettingsScopedRateThrottle, UserRateThrottle, AnonRateThrottle]
    throttle_scope = "cart_write"

    def get_store(self, request):
        self.notifier = CollectingNotifier()
        return CartStore(SessionStorage(request.session), self.notifier)

    def cart_response(self, store, code=status.HTTP_200_OK, **extra):
        body = {"cart": CartReadSerializer(store.cart).data, "notifications": self.notifier.as_list(), **extra}
        if self.notifier.errors and code < 400:
            code = status.HTTP_400_BAD_REQUEST
            body["detail"] = self.notifier.errors[0].message
        return Response(body, status=code)

    def not_found(self):
        return Response({"detail": "Not found."}, status=status.HTTP_404_NOT_FOUND)


class CartDetailView(CartView):
    """Return the visitor's cart."""

    throttle_scope = "cart"

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Get cart",
        description="Returns the session cart with items and re-derived totals.",
        responses={200: CartResponse},
        examples=[OpenApiExample("Cart", value=CART_EXAMPLE, response_only=True)],
    )
    def get(self, request):
        return self.cart_response(self.get_store(request))


class CartItemsView(CartView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Add item to cart",
        description=(
            "Adds a product (and optional variant) to the cart. Adding the same product/variant again "
            "increases the quantity of the existing line."
        ),
        request=AddItemSerializer,
        responses={201: CartResponse, 400: CartResponse},
        examples=[OpenApiExample("Add", value={"product_id": 12, "quantity": 2}, request_only=True)],
    )
    def post(self, request):
        serializer = AddItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = self.get_store(request)
        data = serializer.validated_data
        store.add_item(data["product"], quantity=data["quantity"], variant=data["variant"])
        return self.cart_response(store, status.HTTP_201_CREATED)


class CartItemDetailView(CartView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Update cart item quantity",
        description="Sets the quantity of a line. Quantities below 1 are rejected; use DELETE to remove a line.",
        request=UpdateQuantitySerializer,
        responses={200: CartResponse, 400: CartResponse, 404: NotFoundResponse},
    )
    def patch(self, request, item_id: str):
        serializer = UpdateQuantitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = self.get_store(request)
        if store.cart.get_item(item_id) is None:
            return self.not_found()
        store.update_quantity(item_id, serializer.validated_data["quantity"])
        return self.cart_response(store)

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Remove cart item",
        responses={200: CartResponse, 404: NotFoundResponse},
    )
    def delete(self, request, item_id: str):
        store = self.get_store(request)
        if store.cart.get_item(item_id) is None:
            return self.not_found()
        store.remove_item(item_id)
        return self.cart_response(store)


class CartClearView(CartView):
    @extend_schema(tags=["Cart Endpoints"], summary="Clear cart", request=None, responses={200: CartResponse})
    def post(self, request):
        store = self.get_store(request)
        store.clear_cart()
        return self.cart_response(store)


class CartCouponView(CartView):
    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Apply coupon",
        description="Applies a coupon code (case-insensitive). Unknown codes are rejected and the cart is unchanged.",
        request=CouponSerializer,
        responses={200: CartResponse, 400: CartResponse},
        examples=[OpenApiExample("Apply", value={"code": "welcome15"}, request_only=True)],
    )
    def post(self, request):
        serializer = CouponSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        store = self.get_store(request)
        store.apply_coupon(serializer.validated_data["code"])
        return self.cart_response(store)

    @extend_schema(tags=["Cart Endpoints"], summary="Remove coupon", responses={200: CartResponse})
    def delete(self, request):
        store = self.get_store(request)
        store.remove_coupon()
        return self.cart_response(store)


class CartCheckoutView(CartView):
    """Submit the cart as an order for the signed-in shopper."""

    @extend_schema(
        tags=["Cart Endpoints"],
        summary="Checkout cart",
        description=(
            "Assembles an order from the cart and the shipping form and submits it. Requires a signed-in "
            "identity: either a Bearer token on the request or the identity stored in the session at sign-in. "
            "On success the cart is cleared and the stored order is returned."
        ),
        request=ShippingInputSerializer,
        parameters=[
            OpenApiParameter(
                name="Idempotency-Key",
                location=OpenApiParameter.HEADER,
                required=False,
                description="When provided, checkout becomes idempotent for this caller+path+method",
                type=str,
            )
        ],
        responses={
            201: inline_serializer(
                name="CheckoutResponse",
                fields={
                    "client_draft_id": rf_serializers.CharField(),
                    "order_number": rf_serializers.CharField(),
                    "order": rf_serializers.DictField(),
                    "notifications": rf_serializers.ListField(child=rf_serializers.DictField()),
                },
            ),
            400: inline_serializer(name="CheckoutError", fields={"detail": rf_serializers.CharField()}),
            401: inline_serializer(name="CheckoutUnauthenticated", fields={"detail": rf_serializers.CharField()}),
            409: inline_serializer(name="CheckoutConflict", fields={"detail": rf_serializers.CharField()}),
        },
    )
    def post(self, request):
        serializer = ShippingInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        shipping = ShippingInput(**serializer.validated_data)

        identity = identity_from_request(request) or IdentityStore(SessionStorage(request.session)).current()
        if identity is None:
            return Response(
                {"detail": "Please sign in to place your order.", "notifications": []},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        def _checkout_handler():
            store = self.get_store(request)
            service = CheckoutService(
                store, LocalOrderGateway(), self.notifier, flight_key=flight_key_for(identity.user_id)
            )
            try:
                result = service.place_order(shipping, identity)
            except CheckoutError as exc:
                return {"detail": exc.message, "notifications": self.notifier.as_list()}, exc.status_code
            return {
                "client_draft_id": result.client_draft_id,
                "order_number": result.order_number,
                "order": result.order,
                "notifications": self.notifier.as_list(),
            }, status.HTTP_201_CREATED

        idem_key = request.headers.get("Idempotency-Key")
        if idem_key:
            body, code = with_idempotency(
                key=idem_key,
                user=request.user,
                scope=f"user:{identity.user_id}",
                path=str(request.path),
                method=str(request.method),
                request_hash=compute_request_hash(getattr(request, "data", None)),
                handler=_checkout_handler,
            )
            return Response(body, status=code)
        body, code = _checkout_handler()
        return Response(body, status=code)
