"""Cart serializers for read and write operations."""

from catalog import selectors
from rest_framework import serializers

MONEY = {"max_digits": 12, "decimal_places": 2, "read_only": True}


class LineItemReadSerializer(serializers.Serializer):
    """Read serializer for a cart line."""

    id = serializers.CharField(read_only=True)
    product_id = serializers.IntegerField(read_only=True)
    variant_id = serializers.IntegerField(read_only=True, allow_null=True)
    name = serializers.CharField(read_only=True)
    sku = serializers.CharField(read_only=True)
    vendor_ref = serializers.CharField(read_only=True)
    unit_price = serializers.DecimalField(**MONEY)
    quantity = serializers.IntegerField(read_only=True)
    line_total = serializers.DecimalField(**MONEY)


class CartReadSerializer(serializers.Serializer):
    """Read serializer for the cart summary and items."""

    items = LineItemReadSerializer(many=True, read_only=True)
    coupon_code = serializers.CharField(read_only=True, allow_null=True)
    discount = serializers.DecimalField(**MONEY)
    subtotal = serializers.DecimalField(**MONEY)
    tax = serializers.DecimalField(**MONEY)
    shipping = serializers.DecimalField(**MONEY)
    total = serializers.DecimalField(**MONEY)
    item_count = serializers.IntegerField(read_only=True)
    is_empty = serializers.BooleanField(read_only=True)


class AddItemSerializer(serializers.Serializer):
    """Resolve the product (and optional variant) a shopper adds.

    Quantity bounds are enforced by the cart itself so that a rejected value
    comes back as a notification like every other cart rejection.
    """

    product_id = serializers.IntegerField()
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(required=False, default=1)

    def validate(self, attrs):
        product, variant = selectors.get_purchasable(attrs["product_id"], attrs.get("variant_id"))
        if product is None:
            raise serializers.ValidationError({"product_id": "Product not found."})
        if attrs.get("variant_id") is not None and variant is None:
            raise serializers.ValidationError({"variant_id": "Variant not found for this product."})
        attrs["product"] = product
        attrs["variant"] = variant
        return attrs


class UpdateQuantitySerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class CouponSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32, trim_whitespace=True)


class ShippingInputSerializer(serializers.Serializer):
    """Checkout form: contact details and the delivery address."""

    email = serializers.EmailField()
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=120)
    phone = serializers.CharField(max_length=32)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
