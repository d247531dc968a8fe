"""
======================================================
PATH: catalog/migrations/0001_initial.py
======================================================
MIGRATION: CREATE Product, PackVariant, StockReservation

The StockReservation -> Order link is added in 0002 (orders depends on catalog).
"""

from __future__ import annotations

import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
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
                ("sku", models.CharField(db_index=True, max_length=64, unique=True)),
                ("name", models.CharField(db_index=True, max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "price",
                    models.PositiveIntegerField(
                        help_text="Base unit price (smallest currency unit)."
                    ),
                ),
                (
                    "stock",
                    models.PositiveIntegerField(default=0, help_text="Available base units."),
                ),
                ("allow_individual_sale", models.BooleanField(default=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["sku"], name="catalog_pro_sku_idx"),
                    models.Index(fields=["is_active", "name"], name="catalog_pro_active_name_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(stock__gte=0),
                        name="catalog_product_stock_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PackVariant",
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
                ("name", models.CharField(max_length=120)),
                (
                    "units",
                    models.PositiveIntegerField(
                        validators=[django.core.validators.MinValueValidator(1)]
                    ),
                ),
                (
                    "price",
                    models.PositiveIntegerField(help_text="Pack price (smallest currency unit)."),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("is_default", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="pack_variants",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["units", "name"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(units__gte=1),
                        name="catalog_pack_variant_units_positive",
                    ),
                    models.UniqueConstraint(
                        fields=("product",),
                        condition=models.Q(is_default=True),
                        name="uniq_default_pack_variant_per_product",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockReservation",
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
                ("quantity", models.PositiveIntegerField(help_text="Reserved base units.")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("released_at", models.DateTimeField(blank=True, null=True)),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="stock_reservations",
                        to="catalog.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at"],
            },
        ),
    ]
