"""
======================================================
PATH: catalog/migrations/0002_stockreservation_order.py
======================================================
MIGRATION: LINK StockReservation -> Order (+ lookup indexes)
"""

from __future__ import annotations

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    dependencies = [
        ("catalog", "0001_initial"),
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="stockreservation",
            name="order",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.PROTECT,
                related_name="stock_reservations",
                to="orders.order",
            ),
        ),
        migrations.AddIndex(
            model_name="stockreservation",
            index=models.Index(fields=["product", "released_at"], name="catalog_res_product_rel_idx"),
        ),
        migrations.AddIndex(
            model_name="stockreservation",
            index=models.Index(fields=["order", "released_at"], name="catalog_res_order_rel_idx"),
        ),
    ]
