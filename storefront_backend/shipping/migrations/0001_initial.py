"""
======================================================
PATH: shipping/migrations/0001_initial.py
======================================================
MIGRATION: CREATE ShippingZone + Address
"""

from __future__ import annotations

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="ShippingZone",
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
                ("commune", models.CharField(max_length=120)),
                ("commune_key", models.CharField(editable=False, max_length=120, unique=True)),
                (
                    "cost",
                    models.PositiveIntegerField(help_text="Shipping cost (smallest currency unit)."),
                ),
                ("delivery_days", models.PositiveSmallIntegerField(default=1)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["cost", "commune"],
            },
        ),
        migrations.CreateModel(
            name="Address",
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
                ("label", models.CharField(blank=True, default="", max_length=60)),
                ("recipient_name", models.CharField(blank=True, default="", max_length=120)),
                ("phone", models.CharField(blank=True, default="", max_length=40)),
                ("street", models.CharField(max_length=255)),
                ("apartment", models.CharField(blank=True, default="", max_length=60)),
                ("commune", models.CharField(max_length=120)),
                ("city", models.CharField(default="Santiago", max_length=120)),
                ("region", models.CharField(default="Región Metropolitana", max_length=120)),
                ("postal_code", models.CharField(blank=True, default="", max_length=20)),
                ("is_default", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="addresses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-is_default", "-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(is_default=True),
                        fields=("user",),
                        name="uniq_default_address_per_user",
                    ),
                ],
            },
        ),
    ]
