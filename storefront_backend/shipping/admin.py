# shipping/admin.py

from django.contrib import admin

from shipping.models import Address, ShippingZone


@admin.register(ShippingZone)
class ShippingZoneAdmin(admin.ModelAdmin):
    list_display = ("commune", "cost", "delivery_days", "is_active", "updated_at")
    list_filter = ("is_active", "delivery_days")
    search_fields = ("commune",)
    readonly_fields = ("commune_key", "created_at", "updated_at")


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ("user", "label", "street", "commune", "is_default")
    list_filter = ("commune", "is_default")
    search_fields = ("user__email", "street", "commune")
    readonly_fields = ("created_at", "updated_at")
