# cart/models/cart_line.py

import uuid

from django.conf import settings
from django.db import models


class CartLine(models.Model):
    """
    One line of a member's server-owned cart.

    Identity: (user, product, pack_variant). The NULL variant (individual
    units) is its own line, so two conditional unique constraints cover both
    cases. Prices are NOT stored here; they are resolved on every read and
    frozen only when an order is created.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="cart_lines",
    )
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.CASCADE,
        related_name="cart_lines",
    )
    pack_variant = models.ForeignKey(
        "catalog.PackVariant",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="cart_lines",
    )

    quantity = models.PositiveIntegerField(default=1)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="cart_line_quantity_positive",
            ),
            models.UniqueConstraint(
                fields=["user", "product", "pack_variant"],
                condition=models.Q(pack_variant__isnull=False),
                name="uniq_cart_line_user_product_variant",
            ),
            models.UniqueConstraint(
                fields=["user", "product"],
                condition=models.Q(pack_variant__isnull=True),
                name="uniq_cart_line_user_product_unit",
            ),
        ]

    @property
    def units_per_item(self) -> int:
        return int(self.pack_variant.units) if self.pack_variant_id else 1

    def __str__(self):
        variant = self.pack_variant.name if self.pack_variant_id else "unit"
        return f"{self.user_id} | {self.product_id} ({variant}) x{self.quantity}"
