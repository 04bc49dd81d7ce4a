from common.choices import OrderStatus
from django.contrib import admin

from .models import IdempotencyKey, Order, OrderItem, OrderTimelineEvent
from .services import update_order_status


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ("product_name", "sku", "vendor_ref", "quantity", "unit_price", "line_total")
    readonly_fields = fields
    can_delete = False


class OrderTimelineEventInline(admin.TabularInline):
    model = OrderTimelineEvent
    extra = 0
    fields = ("status", "description", "timestamp")
    readonly_fields = fields
    can_delete = False


def _status_action(target: str):
    def action(modeladmin, request, queryset):
        changed = 0
        for order in queryset:
            if order.status != target:
                update_order_status(order, status=target, actor=request.user)
                changed += 1
        modeladmin.message_user(request, f"Marked {changed} order(s) as {target}.")

    action.__name__ = f"mark_{target}"
    action.short_description = f"Mark selected orders as {target}"
    return action


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("number", "status", "payment_status", "user", "email", "total", "created_at")
    list_filter = ("status", "payment_status", "is_bulk_order", "created_at")
    search_fields = ("number", "client_reference", "email", "last_name")
    date_hierarchy = "created_at"
    # Status moves only through the actions so every change lands on the timeline.
    readonly_fields = ("number", "client_reference", "status", "subtotal", "tax", "shipping", "discount", "total")
    inlines = [OrderItemInline, OrderTimelineEventInline]
    actions = [
        _status_action(OrderStatus.PROCESSING),
        _status_action(OrderStatus.SHIPPED),
        _status_action(OrderStatus.DELIVERED),
        _status_action(OrderStatus.CANCELLED),
    ]


@admin.register(IdempotencyKey)
class IdempotencyKeyAdmin(admin.ModelAdmin):
    list_display = ("id", "key", "scope", "path", "method", "response_code", "created_at")
    list_filter = ("method", "response_code", "created_at")
    search_fields = ("key", "scope", "path")
    date_hierarchy = "created_at"
