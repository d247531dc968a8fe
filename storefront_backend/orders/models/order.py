# orders/models/order.py

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending payment"
    PAID = "PAID", "Paid"
    PREPARING = "PREPARING", "Preparing"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


class Order(models.Model):
    """
    Member order.

    Key rules:
    - Created by checkout in PENDING with stock already reserved.
    - Prices, subtotal, shipping and total are FROZEN at creation
      (total == subtotal + shipping_cost, DB check constraint).
    - `status` only moves through orders.services.order_lifecycle.
    - Orders are never deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order_no = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="System-generated public order number",
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    # Delivery (address row may change later; commune + line are snapshots)
    address = models.ForeignKey(
        "shipping.Address",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    shipping_commune = models.CharField(max_length=120)
    shipping_address_line = models.CharField(max_length=400, blank=True, default="")

    # Money (smallest currency unit, server authoritative)
    subtotal = models.PositiveBigIntegerField(default=0)
    shipping_cost = models.PositiveBigIntegerField(default=0)
    total = models.PositiveBigIntegerField(default=0)
    currency = models.CharField(max_length=8, default="CLP")

    status = models.CharField(
        max_length=16,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )

    # Payment intent handle (set after the gateway call succeeds)
    external_payment_reference = models.CharField(max_length=128, blank=True, default="")
    payment_redirect_url = models.CharField(max_length=500, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancel_reason = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="orders_status_created_idx"),
            models.Index(fields=["user", "created_at"], name="orders_user_created_idx"),
            models.Index(fields=["external_payment_reference"], name="orders_ext_ref_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total=models.F("subtotal") + models.F("shipping_cost")),
                name="orders_total_is_subtotal_plus_shipping",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self.order_no:
            prefix = timezone.now().strftime("ORD%Y%m%d")
            self.order_no = f"{prefix}-{uuid.uuid4().hex[:8].upper()}"
        super().save(*args, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.status in {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

    def __str__(self):
        return f"{self.order_no} | {self.total} | {self.status}"
