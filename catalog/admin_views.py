"""Admin viewsets for write endpoints in the catalog app.

Endpoints are restricted to store admins and use scoped throttling.
"""

from common.throttling import SettingsScopedRateThrottle
from django_filters import rest_framework as filters
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from users.permissions import IsStoreAdmin

from .admin_serializers import ProductAdminSerializer, ProductVariantAdminSerializer
from .models import Product, ProductVariant


class AdminBaseViewSet(viewsets.ModelViewSet):
    permission_classes = [IsStoreAdmin]
    throttle_classes = [SettingsScopedRateThrottle]
    throttle_scope = "catalog_admin_write"


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List products (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get product (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create product"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update product"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update product"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete product"),
)
class ProductAdminViewSet(AdminBaseViewSet):
    """All products regardless of status; filter with `status`, search by name or sku."""

    queryset = Product.objects.all().order_by("name")
    serializer_class = ProductAdminSerializer
    filter_backends = [filters.DjangoFilterBackend, drf_filters.SearchFilter]
    filterset_fields = ["status", "is_featured", "vendor_ref"]
    search_fields = ["name", "sku"]


@extend_schema_view(
    list=extend_schema(tags=["Admin Endpoints"], summary="List variants (admin)"),
    retrieve=extend_schema(tags=["Admin Endpoints"], summary="Get variant (admin)"),
    create=extend_schema(tags=["Admin Endpoints"], summary="Create variant"),
    update=extend_schema(tags=["Admin Endpoints"], summary="Update variant"),
    partial_update=extend_schema(tags=["Admin Endpoints"], summary="Partial update variant"),
    destroy=extend_schema(tags=["Admin Endpoints"], summary="Delete variant"),
)
class ProductVariantAdminViewSet(AdminBaseViewSet):
    queryset = ProductVariant.objects.select_related("product").order_by("sku")
    serializer_class = ProductVariantAdminSerializer
    filter_backends = [filters.DjangoFilterBackend]
    filterset_fields = ["product"]
