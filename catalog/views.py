"""Read-only viewsets for the public catalog."""

from common.throttling import SettingsScopedRateThrottle
from django_filters import rest_framework as filters
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiExample, OpenApiParameter, extend_schema, extend_schema_view
from rest_framework import filters as drf_filters
from rest_framework import viewsets
from rest_framework.throttling import AnonRateThrottle, UserRateThrottle

from . import selectors
from .models import Product
from .serializers import ProductDetailSerializer, ProductListSerializer


class ProductFilterSet(filters.FilterSet):
    featured = filters.BooleanFilter(field_name="is_featured")
    min_price = filters.NumberFilter(field_name="price", lookup_expr="gte")
    max_price = filters.NumberFilter(field_name="price", lookup_expr="lte")

    class Meta:
        model = Product
        fields = ["featured", "min_price", "max_price"]


@extend_schema_view(
    list=extend_schema(
        summary="List products",
        description=(
            "Returns active products. Supports `featured`, `min_price` and `max_price` filters, "
            "ordering by `name`, `price` or `created_at`, and search via `search`."
        ),
        tags=["Catalog Endpoints"],
        parameters=[
            OpenApiParameter("featured", OpenApiTypes.BOOL, location="query", description="Only featured products"),
            OpenApiParameter(
                "ordering", OpenApiTypes.STR, location="query", description="Order by `name`, `price` or `created_at`"
            ),
            OpenApiParameter("search", OpenApiTypes.STR, location="query", description="Search name, sku, description"),
        ],
        examples=[
            OpenApiExample(
                "Product list",
                value={
                    "count": 1,
                    "next": None,
                    "previous": None,
                    "results": [
                        {
                            "id": 1,
                            "name": "Framing Lumber 2x4x8",
                            "slug": "framing-lumber-2x4x8",
                            "sku": "LUM-2X4-8",
                            "price": "4.98",
                            "compare_at_price": None,
                            "is_featured": True,
                            "in_stock": True,
                        }
                    ],
                },
                response_only=True,
            )
        ],
    ),
    retrieve=extend_schema(
        summary="Get product by slug",
        description="Returns an active product with its variants",
        tags=["Catalog Endpoints"],
    ),
)
class ProductViewSet(viewsets.ReadOnlyModelViewSet):
    lookup_field = "slug"
    lookup_value_regex = "[^/]+"
    filterset_class = ProductFilterSet
    throttle_scope = "catalog"
    throttle_classes = [SettingsScopedRateThrottle, UserRateThrottle, AnonRateThrottle]
    filter_backends = [filters.DjangoFilterBackend, drf_filters.OrderingFilter, drf_filters.SearchFilter]
    ordering_fields = ["name", "price", "created_at"]
    search_fields = ["name", "sku", "description"]

    def get_queryset(self):
        if self.action == "list":
            return selectors.list_active_products()
        return selectors.list_active_products().prefetch_related("variants")

    def get_serializer_class(self):
        return ProductDetailSerializer if self.action == "retrieve" else ProductListSerializer
