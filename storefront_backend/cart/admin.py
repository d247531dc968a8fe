from django.contrib import admin

from .models import CartLine

# =====================================================
# CART LINE ADMIN (READ-ONLY)
# =====================================================


@admin.register(CartLine)
class CartLineAdmin(admin.ModelAdmin):
    list_display = ("user", "product", "pack_variant", "quantity", "updated_at")
    search_fields = ("user__email", "product__sku", "product__name")
    readonly_fields = ("user", "product", "pack_variant", "quantity", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False
