"""
======================================================
PATH: orders/migrations/0002_paymentrecord_uniq_approved_payment_per_order.py
======================================================
MIGRATION: at most one approved PaymentRecord per order
"""

from __future__ import annotations

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.AddConstraint(
            model_name="paymentrecord",
            constraint=models.UniqueConstraint(
                condition=models.Q(status="approved"),
                fields=("order",),
                name="uniq_approved_payment_per_order",
            ),
        ),
    ]
