"""Admin serializers for write endpoints in the catalog app.

Provide ModelSerializers with writable relationships for admin use.
"""

from rest_framework import serializers

from .models import Product, ProductVariant


class ProductAdminSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "description",
            "sku",
            "price",
            "compare_at_price",
            "inventory",
            "status",
            "vendor_ref",
            "is_featured",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["created_at", "updated_at"]

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError("Price must be zero or greater.")
        return value

    def validate(self, attrs):
        price = attrs.get("price", getattr(self.instance, "price", None))
        compare_at = attrs.get("compare_at_price", getattr(self.instance, "compare_at_price", None))
        if compare_at is not None and price is not None and compare_at < price:
            raise serializers.ValidationError({"compare_at_price": "Must be greater than or equal to price."})
        return attrs


class ProductVariantAdminSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductVariant
        fields = [
            "id",
            "product",
            "sku",
            "price",
            "inventory",
            "options",
        ]

    def validate_price(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Price must be zero or greater.")
        return value

    def validate_options(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Options must be an object of name/value pairs.")
        return value
