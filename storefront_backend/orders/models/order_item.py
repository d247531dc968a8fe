# orders/models/order_item.py

from django.db import models


class OrderItem(models.Model):
    """
    Frozen order line.

    unit_price / line_total / names are snapshots taken at checkout; later
    catalog price changes never touch them.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="items",
    )
    position = models.PositiveSmallIntegerField(default=0)

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    pack_variant = models.ForeignKey(
        "catalog.PackVariant",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )

    product_name = models.CharField(max_length=255)
    sku = models.CharField(max_length=64)
    pack_variant_name = models.CharField(max_length=120, blank=True, default="")

    quantity = models.PositiveIntegerField()
    units_per_item = models.PositiveIntegerField(default=1)
    unit_price = models.PositiveIntegerField()
    line_total = models.PositiveBigIntegerField()

    class Meta:
        ordering = ["order", "position"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(line_total=models.F("unit_price") * models.F("quantity")),
                name="orders_item_line_total_consistent",
            ),
        ]

    @property
    def base_units(self) -> int:
        return int(self.quantity) * int(self.units_per_item)

    def __str__(self):
        variant = f" ({self.pack_variant_name})" if self.pack_variant_name else ""
        return f"{self.product_name}{variant} x{self.quantity}"
