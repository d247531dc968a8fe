# catalog/admin.py
"""
=====================================================
PATH: catalog/admin.py
=====================================================

Admin rules:
- Products and pack variants are editable catalog data.
- Product.stock is shown read-only on change forms once a product exists:
  after launch it only moves through the stock ledger (reservations).
- Stock reservations are an audit trail: read-only, never deleted.
"""

from __future__ import annotations

from django.contrib import admin

from catalog.models import PackVariant, Product, StockReservation


class PackVariantInline(admin.TabularInline):
    model = PackVariant
    extra = 0
    fields = ("name", "units", "price", "is_active", "is_default")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "price", "stock", "allow_individual_sale", "is_active")
    list_filter = ("is_active", "allow_individual_sale")
    search_fields = ("sku", "name")
    inlines = [PackVariantInline]

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return ("stock", "created_at", "updated_at")
        return ("created_at", "updated_at")


@admin.register(StockReservation)
class StockReservationAdmin(admin.ModelAdmin):
    list_display = ("id", "product", "quantity", "order", "created_at", "released_at")
    list_filter = ("released_at",)
    search_fields = ("product__sku", "order__order_no")
    readonly_fields = ("product", "quantity", "order", "created_at", "released_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
