"""DRF serializers for Orders.

The write serializer accepts an order draft as submitted at checkout and
re-prices it: line totals, aggregates and the coupon discount must match what
the cart pricing rules produce for the submitted lines, otherwise the order is
rejected.
"""

from collections import namedtuple
from decimal import Decimal

from cart.coupons import discount_for, resolve
from cart.pricing import compute_totals, line_total
from catalog.models import Product, ProductVariant
from common.choices import OrderStatus, PaymentStatus
from rest_framework import serializers

from .models import Order, OrderItem, OrderTimelineEvent
from .services import create_order

MONEY = {"max_digits": 12, "decimal_places": 2}


class OrderItemSerializer(serializers.ModelSerializer):
    """API representation of an order line item."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "variant",
            "product_name",
            "sku",
            "vendor_ref",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class OrderTimelineEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderTimelineEvent
        fields = ["id", "status", "description", "timestamp"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """API representation for an order with its lines and status history."""

    items = OrderItemSerializer(many=True, read_only=True)
    timeline = OrderTimelineEventSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "number",
            "client_reference",
            "user",
            "status",
            "payment_status",
            "email",
            "first_name",
            "last_name",
            "phone",
            "items",
            "subtotal",
            "tax",
            "shipping",
            "discount",
            "total",
            "coupon_code",
            "notes",
            "shipping_address",
            "billing_address",
            "is_bulk_order",
            "timeline",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class AddressSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=64, required=False, default="Shipping")
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    state = serializers.CharField(max_length=120, required=False, allow_blank=True, default="")
    zip_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")
    country = serializers.CharField(max_length=64)


class OrderItemWriteSerializer(serializers.Serializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    variant = serializers.PrimaryKeyRelatedField(queryset=ProductVariant.objects.all(), required=False, allow_null=True)
    product_name = serializers.CharField(max_length=200)
    sku = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    vendor_ref = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(min_value=Decimal("0"), **MONEY)
    line_total = serializers.DecimalField(**MONEY)

    def validate(self, attrs):
        variant = attrs.get("variant")
        if variant is not None and variant.product_id != attrs["product"].id:
            raise serializers.ValidationError({"variant": "Variant does not belong to product."})
        if attrs["line_total"] != line_total(attrs["quantity"], attrs["unit_price"]):
            raise serializers.ValidationError({"line_total": "Line total does not match quantity and price."})
        return attrs


class TimelineEventWriteSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
    description = serializers.CharField(max_length=255)
    timestamp = serializers.DateTimeField()


PricedLine = namedtuple("PricedLine", ["quantity", "line_total"])


class OrderCreateSerializer(serializers.Serializer):
    """Validate a submitted order draft.

    New orders always start pending with payment pending. When no timeline is
    submitted, the "Order placed" event is recorded at creation time.
    """

    client_reference = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    phone = serializers.CharField(max_length=32)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False, default=OrderStatus.PENDING)
    payment_status = serializers.ChoiceField(
        choices=PaymentStatus.choices, required=False, default=PaymentStatus.PENDING
    )
    items = OrderItemWriteSerializer(many=True)
    subtotal = serializers.DecimalField(**MONEY)
    tax = serializers.DecimalField(**MONEY)
    shipping = serializers.DecimalField(**MONEY)
    discount = serializers.DecimalField(min_value=Decimal("0"), **MONEY)
    total = serializers.DecimalField(**MONEY)
    coupon_code = serializers.CharField(max_length=32, required=False, allow_blank=True, default="")
    shipping_address = AddressSerializer()
    billing_address = AddressSerializer(required=False)
    is_bulk_order = serializers.BooleanField(required=False, default=False)
    timeline = TimelineEventWriteSerializer(many=True, required=False)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("Order must contain at least one item.")
        return value

    def validate_status(self, value):
        if value != OrderStatus.PENDING:
            raise serializers.ValidationError("New orders must be pending.")
        return value

    def validate_payment_status(self, value):
        if value != PaymentStatus.PENDING:
            raise serializers.ValidationError("New orders must have a pending payment.")
        return value

    def validate(self, attrs):
        lines = [PricedLine(item["quantity"], item["line_total"]) for item in attrs["items"]]
        subtotal = compute_totals(lines).subtotal

        code = attrs.get("coupon_code") or ""
        if code:
            coupon = resolve(code)
            if coupon is None:
                raise serializers.ValidationError({"coupon_code": "Invalid coupon code."})
            attrs["coupon_code"] = coupon.code
            expected_discount = discount_for(subtotal, coupon)
        else:
            expected_discount = Decimal("0.00")
        if attrs["discount"] != expected_discount:
            raise serializers.ValidationError({"discount": "Discount does not match the applied coupon."})

        totals = compute_totals(lines, expected_discount)
        mismatched = [
            name
            for name, expected in (
                ("subtotal", totals.subtotal),
                ("tax", totals.tax),
                ("shipping", totals.shipping),
                ("total", totals.total),
            )
            if attrs[name] != expected
        ]
        if mismatched:
            raise serializers.ValidationError({name: "Does not match the order lines." for name in mismatched})

        if not attrs.get("billing_address"):
            attrs["billing_address"] = dict(attrs["shipping_address"])
        return attrs

    def create(self, validated_data):
        return create_order(user=validated_data.pop("user"), data=validated_data)


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)
