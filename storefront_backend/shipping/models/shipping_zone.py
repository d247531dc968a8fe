# shipping/models/shipping_zone.py

import uuid

from django.core.exceptions import ValidationError
from django.db import models


def normalize_commune(value) -> str:
    """Trim + collapse inner whitespace ("  Las   Condes " -> "Las Condes")."""
    return " ".join(str(value or "").split())


class ShippingZone(models.Model):
    """
    Flat shipping rate for one commune.

    Lookups are case-insensitive through `commune_key` (casefolded), which
    also works for non-ASCII names ("Ñuñoa") on every database backend.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    commune = models.CharField(max_length=120)
    commune_key = models.CharField(max_length=120, unique=True, editable=False)

    cost = models.PositiveIntegerField(help_text="Shipping cost (smallest currency unit).")
    delivery_days = models.PositiveSmallIntegerField(default=1)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["cost", "commune"]

    @staticmethod
    def key_for(commune) -> str:
        return normalize_commune(commune).casefold()

    def clean(self):
        if not normalize_commune(self.commune):
            raise ValidationError({"commune": "Commune is required"})

    def save(self, *args, **kwargs):
        self.commune = normalize_commune(self.commune)
        self.commune_key = self.key_for(self.commune)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.commune} | {self.cost} | {self.delivery_days}d"
