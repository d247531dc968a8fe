# orders/admin.py
"""
=====================================================
PATH: orders/admin.py
=====================================================

Admin rules:
- Orders, items, status events and payment records are read-only here:
  status only moves through the lifecycle service (API admin actions).
- Refund obligations can be marked resolved once finance settles them.
"""

from __future__ import annotations

from django.contrib import admin
from django.utils import timezone

from orders.models import Order, OrderItem, OrderStatusEvent, PaymentRecord, RefundObligation


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    fields = ("product_name", "pack_variant_name", "quantity", "units_per_item", "unit_price", "line_total")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusEventInline(admin.TabularInline):
    model = OrderStatusEvent
    extra = 0
    can_delete = False
    fields = ("from_status", "to_status", "actor", "reason", "performed_by", "created_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_no", "user", "status", "total", "shipping_commune", "created_at")
    list_filter = ("status", "shipping_commune")
    search_fields = ("order_no", "user__email", "external_payment_reference")
    inlines = [OrderItemInline, OrderStatusEventInline]
    readonly_fields = [f.name for f in Order._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ("transaction_id", "order", "status", "amount", "settles_order", "created_at")
    list_filter = ("status", "settles_order")
    search_fields = ("transaction_id", "external_reference", "order__order_no")
    readonly_fields = [f.name for f in PaymentRecord._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(RefundObligation)
class RefundObligationAdmin(admin.ModelAdmin):
    list_display = ("order", "reason", "amount", "created_at", "resolved_at")
    list_filter = ("reason", "resolved_at")
    search_fields = ("order__order_no", "note")
    readonly_fields = ("order", "payment_record", "amount", "reason", "created_at", "resolved_at")
    actions = ["mark_resolved"]

    @admin.action(description="Mark selected refunds as resolved")
    def mark_resolved(self, request, queryset):
        updated = queryset.filter(resolved_at__isnull=True).update(resolved_at=timezone.now())
        self.message_user(request, f"{updated} refund obligation(s) marked resolved.")

    def has_add_permission(self, request):
        return False
