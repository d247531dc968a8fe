# orders/models/payment_record.py

import uuid

from django.db import models


class PaymentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    APPROVED = "approved", "Approved"
    REJECTED = "rejected", "Rejected"
    REFUNDED = "refunded", "Refunded"


class PaymentRecord(models.Model):
    """
    One gateway payment attempt/notification for an order.

    Idempotency rules:
    - transaction_id (gateway transaction) is unique when present; repeated
      notifications for it collapse onto this row.
    - At most ONE record per order is approved: the one with settles_order=True,
      the only one that moved the order to PAID. Approved money that cannot
      settle the order is stored as refunded (a RefundObligation backs it).
    - The intent record created at checkout has no transaction_id yet; the
      first notification for the order adopts it.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="payment_records",
    )

    transaction_id = models.CharField(max_length=128, unique=True, null=True, blank=True)
    external_reference = models.CharField(max_length=128, blank=True, default="")

    status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    status_detail = models.CharField(max_length=255, blank=True, default="")

    # Raw amount as reported (may disagree with the order total).
    amount = models.BigIntegerField(default=0)
    currency = models.CharField(max_length=8, default="CLP")

    settles_order = models.BooleanField(default=False)
    raw_payload = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    approved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["order", "created_at"], name="orders_pay_order_created_idx"),
            models.Index(fields=["status"], name="orders_pay_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order"],
                condition=models.Q(settles_order=True),
                name="uniq_settling_payment_per_order",
            ),
            models.UniqueConstraint(
                fields=["order"],
                condition=models.Q(status=PaymentStatus.APPROVED),
                name="uniq_approved_payment_per_order",
            ),
        ]

    @property
    def is_final(self) -> bool:
        return self.status in {PaymentStatus.APPROVED, PaymentStatus.REJECTED, PaymentStatus.REFUNDED}

    def __str__(self):
        return f"{self.transaction_id or 'intent'} | {self.status} | {self.amount}"
