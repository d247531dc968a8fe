"""
======================================================
PATH: orders/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Order, OrderItem, OrderStatusEvent, PaymentRecord,
RefundObligation
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
        ("shipping", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                (
                    "order_no",
                    models.CharField(
                        blank=True,
                        help_text="System-generated public order number",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("shipping_commune", models.CharField(max_length=120)),
                ("shipping_address_line", models.CharField(blank=True, default="", max_length=400)),
                ("subtotal", models.PositiveBigIntegerField(default=0)),
                ("shipping_cost", models.PositiveBigIntegerField(default=0)),
                ("total", models.PositiveBigIntegerField(default=0)),
                ("currency", models.CharField(default="CLP", max_length=8)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending payment"),
                            ("PAID", "Paid"),
                            ("PREPARING", "Preparing"),
                            ("SHIPPED", "Shipped"),
                            ("DELIVERED", "Delivered"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("external_payment_reference", models.CharField(blank=True, default="", max_length=128)),
                ("payment_redirect_url", models.CharField(blank=True, default="", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("shipped_at", models.DateTimeField(blank=True, null=True)),
                ("delivered_at", models.DateTimeField(blank=True, null=True)),
                ("cancelled_at", models.DateTimeField(blank=True, null=True)),
                ("cancel_reason", models.CharField(blank=True, default="", max_length=255)),
                (
                    "address",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders",
                        to="shipping.address",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
                    models.Index(fields=["user", "created_at"], name="orders_user_created_idx"),
                    models.Index(fields=["external_payment_reference"], name="orders_ext_ref_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(total=models.F("subtotal") + models.F("shipping_cost")),
                        name="orders_total_is_subtotal_plus_shipping",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("position", models.PositiveSmallIntegerField(default=0)),
                ("product_name", models.CharField(max_length=255)),
                ("sku", models.CharField(max_length=64)),
                ("pack_variant_name", models.CharField(blank=True, default="", max_length=120)),
                ("quantity", models.PositiveIntegerField()),
                ("units_per_item", models.PositiveIntegerField(default=1)),
                ("unit_price", models.PositiveIntegerField()),
                ("line_total", models.PositiveBigIntegerField()),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
                (
                    "pack_variant",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_items",
                        to="catalog.packvariant",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["order", "position"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(line_total=models.F("unit_price") * models.F("quantity")),
                        name="orders_item_line_total_consistent",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderStatusEvent",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("from_status", models.CharField(blank=True, default="", max_length=16)),
                ("to_status", models.CharField(max_length=16)),
                (
                    "actor",
                    models.CharField(
                        choices=[
                            ("customer", "Customer (checkout)"),
                            ("gateway", "Payment gateway"),
                            ("admin", "Store admin"),
                            ("system", "System (expiry sweep)"),
                        ],
                        max_length=16,
                    ),
                ),
                ("reason", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="status_events",
                        to="orders.order",
                    ),
                ),
                (
                    "performed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="order_status_events",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="PaymentRecord",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("transaction_id", models.CharField(blank=True, max_length=128, null=True, unique=True)),
                ("external_reference", models.CharField(blank=True, default="", max_length=128)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("status_detail", models.CharField(blank=True, default="", max_length=255)),
                ("amount", models.BigIntegerField(default=0)),
                ("currency", models.CharField(default="CLP", max_length=8)),
                ("settles_order", models.BooleanField(default=False)),
                ("raw_payload", models.JSONField(blank=True, default=dict)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="payment_records",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["order", "created_at"], name="orders_pay_order_created_idx"),
                    models.Index(fields=["status"], name="orders_pay_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(settles_order=True),
                        fields=("order",),
                        name="uniq_settling_payment_per_order",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="RefundObligation",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("amount", models.BigIntegerField()),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("admin_cancel_after_payment", "Cancelled by admin after payment"),
                            ("late_approval", "Approval arrived after cancellation"),
                            ("duplicate_approval", "Second approved payment for a paid order"),
                            ("amount_mismatch", "Approved amount differs from order total"),
                        ],
                        max_length=32,
                    ),
                ),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("resolved_at", models.DateTimeField(blank=True, null=True)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="refund_obligations",
                        to="orders.order",
                    ),
                ),
                (
                    "payment_record",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="refund_obligations",
                        to="orders.paymentrecord",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["resolved_at"], name="orders_refund_resolved_idx"),
                ],
            },
        ),
    ]
