# catalog/models/product.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


class Product(models.Model):
    """
    Represents a sellable product.

    STOCK MODEL (IMPORTANT):
    - `stock` is the number of AVAILABLE base units (already net of held
      reservations).
    - Only catalog.services.stock_ledger mutates it, through conditional
      updates; it can never go below zero (DB check constraint).

    MONEY:
    - `price` is the base-unit price in the smallest currency unit (integer).
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sku = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    price = models.PositiveIntegerField(help_text="Base unit price (smallest currency unit).")
    stock = models.PositiveIntegerField(default=0, help_text="Available base units.")

    # Some products are only sold as packs (e.g. 10-unit boxes).
    allow_individual_sale = models.BooleanField(default=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["sku"], name="catalog_pro_sku_idx"),
            models.Index(fields=["is_active", "name"], name="catalog_pro_active_name_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="catalog_product_stock_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    def clean(self):
        if self.price is None or int(self.price) <= 0:
            raise ValidationError({"price": "Price must be greater than zero"})
