# shipping/models/address.py

import uuid

from django.conf import settings
from django.db import models

from .shipping_zone import normalize_commune


class Address(models.Model):
    """
    Member delivery address.

    The commerce core only reads `commune` (for the shipping quote) and
    snapshots it on the order.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="addresses",
    )

    label = models.CharField(max_length=60, blank=True, default="")
    recipient_name = models.CharField(max_length=120, blank=True, default="")
    phone = models.CharField(max_length=40, blank=True, default="")

    street = models.CharField(max_length=255)
    apartment = models.CharField(max_length=60, blank=True, default="")
    commune = models.CharField(max_length=120)
    city = models.CharField(max_length=120, default="Santiago")
    region = models.CharField(max_length=120, default="Región Metropolitana")
    postal_code = models.CharField(max_length=20, blank=True, default="")

    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_default", "-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user"],
                condition=models.Q(is_default=True),
                name="uniq_default_address_per_user",
            ),
        ]

    def save(self, *args, **kwargs):
        self.commune = normalize_commune(self.commune)
        super().save(*args, **kwargs)

    def one_line(self) -> str:
        parts = [self.street, self.apartment, self.commune, self.city]
        return ", ".join(p for p in parts if p)

    def __str__(self):
        return f"{self.label or 'Address'} | {self.one_line()}"
