"""
PATH: orders/serializers/order.py

ORDER SERIALIZERS

- Checkout input/result shapes.
- Read-only order payloads (member history + admin board).
- Admin lifecycle command inputs.

Order money fields are frozen snapshots; nothing here recomputes them.
"""

from rest_framework import serializers

from orders.models import Order, OrderItem, OrderStatus, OrderStatusEvent, PaymentRecord
from orders.services.order_lifecycle import ADMIN_ADVANCE_TARGETS


# =====================================================
# CHECKOUT
# =====================================================


class CheckoutInputSerializer(serializers.Serializer):
    address_id = serializers.UUIDField()


class CheckoutResultSerializer(serializers.Serializer):
    order_id = serializers.UUIDField(source="order.id")
    order_no = serializers.CharField(source="order.order_no")
    status = serializers.CharField(source="order.status")
    subtotal = serializers.IntegerField(source="order.subtotal")
    shipping_cost = serializers.IntegerField(source="order.shipping_cost")
    total = serializers.IntegerField(source="order.total")
    currency = serializers.CharField(source="order.currency")
    redirect_url = serializers.CharField()


# =====================================================
# READ
# =====================================================


class OrderItemSerializer(serializers.ModelSerializer):
    base_units = serializers.IntegerField(read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product",
            "product_name",
            "sku",
            "pack_variant",
            "pack_variant_name",
            "quantity",
            "units_per_item",
            "base_units",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class OrderStatusEventSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusEvent
        fields = ["from_status", "to_status", "actor", "reason", "created_at"]
        read_only_fields = fields


class PaymentRecordSerializer(serializers.ModelSerializer):
    class Meta:
        model = PaymentRecord
        fields = [
            "id",
            "transaction_id",
            "status",
            "status_detail",
            "amount",
            "currency",
            "settles_order",
            "created_at",
            "approved_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "status",
            "total",
            "currency",
            "shipping_commune",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj):
        return sum(int(item.quantity) for item in obj.items.all())


class OrderSerializer(serializers.ModelSerializer):
    """
    Full order payload (detail + admin).
    Payment records are only exposed when the view asks for them.
    """

    items = OrderItemSerializer(many=True, read_only=True)
    status_events = OrderStatusEventSerializer(many=True, read_only=True)
    payment_records = serializers.SerializerMethodField()
    customer_email = serializers.EmailField(source="user.email", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_no",
            "status",
            "customer_email",
            "shipping_commune",
            "shipping_address_line",
            "subtotal",
            "shipping_cost",
            "total",
            "currency",
            "payment_redirect_url",
            "items",
            "status_events",
            "payment_records",
            "created_at",
            "paid_at",
            "shipped_at",
            "delivered_at",
            "cancelled_at",
            "cancel_reason",
        ]
        read_only_fields = fields

    def get_payment_records(self, obj):
        if not self.context.get("include_payments"):
            return None
        return PaymentRecordSerializer(obj.payment_records.all(), many=True).data


# =====================================================
# ADMIN COMMANDS
# =====================================================


class AdminAdvanceInputSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[s for s in OrderStatus.values if s in ADMIN_ADVANCE_TARGETS],
    )
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class AdminCancelInputSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)
