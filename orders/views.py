"""Orders API endpoints.

- list/create: shoppers see their own orders (admins see all); creating accepts
  an order draft, re-prices it and stores it with a server-assigned number.
- detail: read one order, or PUT a new status which is appended to its timeline.
"""

from common.throttling import SettingsScopedRateThrottle
from django.http import Http404
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema
from rest_framework import generics, status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from .models import Order
from .serializers import OrderCreateSerializer, OrderSerializer, OrderStatusUpdateSerializer
from .services import OrderStatusError, can_view, compute_request_hash, list_orders_for, update_order_status, with_idempotency

IDEMPOTENCY_PARAMETER = OpenApiParameter(
    name="Idempotency-Key",
    location=OpenApiParameter.HEADER,
    required=False,
    description="Makes the request idempotent within scope+path+method",
    type=str,
)


class DefaultPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"


class OrderListView(generics.ListAPIView):
    """List the caller's orders with basic filters, or submit a new order.

    Filters:
    - `status`: one of the OrderStatus values
    - `number`: exact match of order number
    - `start`: ISO date/time string; filters `created_at >= start`
    - `end`: ISO date/time string; filters `created_at <= end`
    """

    permission_classes = [IsAuthenticated]
    throttle_classes = [SettingsScopedRateThrottle, UserRateThrottle]
    serializer_class = OrderSerializer
    pagination_class = DefaultPagination

    @property
    def throttle_scope(self):
        return "orders_write" if self.request.method == "POST" else "orders"

    def get_queryset(self):
        qs = list_orders_for(self.request.user)
        status_filter = self.request.query_params.get("status")
        if status_filter:
            qs = qs.filter(status=status_filter)
        number = self.request.query_params.get("number")
        if number:
            qs = qs.filter(number=number)
        start = self.request.query_params.get("start")
        if start:
            qs = qs.filter(created_at__gte=start)
        end = self.request.query_params.get("end")
        if end:
            qs = qs.filter(created_at__lte=end)
        return qs

    @extend_schema(
        tags=["Orders"],
        summary="List orders",
        description="List orders newest first with optional filters and pagination. Admins see every order.",
        parameters=[
            OpenApiParameter(name="status", description="Order status filter", required=False, type=str),
            OpenApiParameter(name="number", description="Order number exact match", required=False, type=str),
            OpenApiParameter(name="start", description="Created at >= start (ISO)", required=False, type=str),
            OpenApiParameter(name="end", description="Created at <= end (ISO)", required=False, type=str),
            OpenApiParameter(name="page", description="Page number", required=False, type=int),
            OpenApiParameter(name="page_size", description="Items per page", required=False, type=int),
        ],
    )
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    @extend_schema(
        tags=["Orders"],
        summary="Create order",
        description=(
            "Stores an order draft for the caller. Line totals, aggregates and the coupon discount are "
            "re-validated. The server assigns `number`; the draft id is kept as `client_reference`."
        ),
        request=OrderCreateSerializer,
        parameters=[IDEMPOTENCY_PARAMETER],
        responses={201: OrderSerializer},
    )
    def post(self, request, *args, **kwargs):
        def _handler():
            serializer = OrderCreateSerializer(data=request.data)
            if not serializer.is_valid():
                return serializer.errors, 400
            order = serializer.save(user=request.user)
            return OrderSerializer(order, context={"request": request}).data, 201

        idem_key = request.headers.get("Idempotency-Key")
        if idem_key:
            body, code = with_idempotency(
                key=idem_key,
                user=request.user,
                path=str(request.path),
                method=str(request.method),
                request_hash=compute_request_hash(getattr(request, "data", None)),
                handler=_handler,
            )
            return Response(body, status=code)

        body, code = _handler()
        return Response(body, status=code)


class OrderDetailView(APIView):
    """Retrieve an order or update its status.

    Orders the caller cannot see return 404.
    """

    permission_classes = [IsAuthenticated]
    throttle_classes = [SettingsScopedRateThrottle, UserRateThrottle]

    @property
    def throttle_scope(self):
        return "orders" if self.request.method == "GET" else "orders_write"

    def get_object(self, order_id) -> Order:
        try:
            order = Order.objects.prefetch_related("items", "timeline").get(pk=int(order_id))
        except (Order.DoesNotExist, ValueError):
            raise Http404("Not found.")
        if not can_view(order, self.request.user):
            raise Http404("Not found.")
        return order

    @extend_schema(tags=["Orders"], summary="Get order detail", responses={200: OrderSerializer})
    def get(self, request, order_id: int):
        order = self.get_object(order_id)
        return Response(OrderSerializer(order, context={"request": request}).data)

    @extend_schema(
        tags=["Orders"],
        summary="Update order status",
        description=(
            "Sets the order status and appends `Order <status>` to its timeline. Admins may set any status; "
            "the owner may only cancel a pending order."
        ),
        request=OrderStatusUpdateSerializer,
        responses={200: OrderSerializer},
        examples=[
            OpenApiExample("Cancel", value={"status": "cancelled"}, request_only=True),
            OpenApiExample("Forbidden", value={"detail": "Only pending orders can be cancelled."}, response_only=True),
        ],
    )
    def put(self, request, order_id: int):
        order = self.get_object(order_id)
        serializer = OrderStatusUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            updated = update_order_status(order, status=serializer.validated_data["status"], actor=request.user)
        except OrderStatusError as exc:
            return Response({"detail": exc.message}, status=exc.status_code)
        updated = self.get_object(updated.pk)
        return Response(OrderSerializer(updated, context={"request": request}).data, status=status.HTTP_200_OK)
