# catalog/models/stock_reservation.py

import uuid

from django.db import models


class StockReservation(models.Model):
    """
    Explicit reservation token for base units taken out of Product.stock.

    Lifecycle:
    - created by stock_ledger.reserve() (stock already decremented)
    - attached to an Order once the order row exists
    - released at most once (released_at stamped; stock restored by the claimant)

    Conservation: Product.stock + sum(held reservations) is constant under
    checkout activity.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="stock_reservations",
    )

    quantity = models.PositiveIntegerField(help_text="Reserved base units.")

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="stock_reservations",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    released_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["product", "released_at"], name="catalog_res_product_rel_idx"),
            models.Index(fields=["order", "released_at"], name="catalog_res_order_rel_idx"),
        ]

    @property
    def is_held(self) -> bool:
        return self.released_at is None

    def __str__(self):
        state = "held" if self.is_held else "released"
        return f"{self.product_id} x{self.quantity} ({state})"
