"""Serializers for the public catalog API."""

from rest_framework import serializers

from .models import Product, ProductVariant


class ProductVariantSerializer(serializers.ModelSerializer):
    effective_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = ProductVariant
        fields = ["id", "sku", "price", "effective_price", "inventory", "options"]


class ProductListSerializer(serializers.ModelSerializer):
    in_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "slug",
            "sku",
            "price",
            "compare_at_price",
            "is_featured",
            "in_stock",
        ]

    def get_in_stock(self, obj) -> bool:
        return obj.inventory > 0


class ProductDetailSerializer(ProductListSerializer):
    variants = ProductVariantSerializer(many=True, read_only=True)

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            "description",
            "inventory",
            "vendor_ref",
            "variants",
            "created_at",
            "updated_at",
        ]
