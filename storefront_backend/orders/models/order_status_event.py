# orders/models/order_status_event.py

from django.conf import settings
from django.db import models


class TransitionActor(models.TextChoices):
    CUSTOMER = "customer", "Customer (checkout)"
    GATEWAY = "gateway", "Payment gateway"
    ADMIN = "admin", "Store admin"
    SYSTEM = "system", "System (expiry sweep)"


class OrderStatusEvent(models.Model):
    """
    Append-only audit row, one per status change (plus the initial PENDING).
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="status_events",
    )

    from_status = models.CharField(max_length=16, blank=True, default="")
    to_status = models.CharField(max_length=16)
    actor = models.CharField(max_length=16, choices=TransitionActor.choices)
    reason = models.CharField(max_length=255, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_status_events",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.order_id}: {self.from_status or '-'} -> {self.to_status} ({self.actor})"
