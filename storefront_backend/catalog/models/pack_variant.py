# catalog/models/pack_variant.py

import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class PackVariant(models.Model):
    """
    A multi-unit pack of a product (e.g. "Caja 10 unidades").

    Buying one pack consumes `units` base units of the product's stock.
    A product has at most one default variant.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.CASCADE,
        related_name="pack_variants",
    )

    name = models.CharField(max_length=120)
    units = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    price = models.PositiveIntegerField(help_text="Pack price (smallest currency unit).")

    is_active = models.BooleanField(default=True)
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["units", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(units__gte=1),
                name="catalog_pack_variant_units_positive",
            ),
            models.UniqueConstraint(
                fields=["product"],
                condition=models.Q(is_default=True),
                name="uniq_default_pack_variant_per_product",
            ),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.name} x{self.units}"

    def clean(self):
        if not self.units or int(self.units) < 1:
            raise ValidationError({"units": "A pack must contain at least one unit"})
        if self.price is None or int(self.price) <= 0:
            raise ValidationError({"price": "Price must be greater than zero"})
