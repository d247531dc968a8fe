"""
PATH: cart/serializers/cart.py

CART SERIALIZERS

Purpose:
- Input shapes for cart mutations (Swagger + transport validation).
- Output shape for the priced cart snapshot.

Money is integer (smallest currency unit) and always server-derived.
"""

from django.conf import settings
from rest_framework import serializers


# =====================================================
# INPUT
# =====================================================


class AddCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    pack_variant_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(min_value=1, default=1)


class SetCartItemQuantityInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    pack_variant_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    quantity = serializers.IntegerField(min_value=0)


class RemoveCartItemInputSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    pack_variant_id = serializers.UUIDField(required=False, allow_null=True, default=None)


# =====================================================
# OUTPUT
# =====================================================


class CartLineSerializer(serializers.Serializer):
    id = serializers.UUIDField(source="line_id")
    product_id = serializers.UUIDField(source="product.id")
    product_name = serializers.CharField(source="product.name")
    sku = serializers.CharField(source="product.sku")
    pack_variant_id = serializers.SerializerMethodField()
    pack_variant_name = serializers.SerializerMethodField()
    quantity = serializers.IntegerField()
    unit_price = serializers.IntegerField()
    units_per_item = serializers.IntegerField()
    effective_units = serializers.IntegerField()
    line_total = serializers.IntegerField()

    def get_pack_variant_id(self, obj):
        return str(obj.pack_variant.id) if obj.pack_variant else None

    def get_pack_variant_name(self, obj):
        return obj.pack_variant.name if obj.pack_variant else None


class CartSnapshotSerializer(serializers.Serializer):
    lines = CartLineSerializer(many=True)
    subtotal = serializers.IntegerField()
    item_count = serializers.IntegerField()
    currency = serializers.SerializerMethodField()

    def get_currency(self, obj) -> str:
        return settings.STORE_CURRENCY
