# orders/models/refund_obligation.py

from django.db import models


class RefundObligation(models.Model):
    """
    Money the store owes back to a member.

    The core never moves money: it records the obligation and emits
    orders.signals.refund_owed. Finance resolves it out of band.
    """

    REASON_ADMIN_CANCEL_AFTER_PAYMENT = "admin_cancel_after_payment"
    REASON_LATE_APPROVAL = "late_approval"
    REASON_DUPLICATE_APPROVAL = "duplicate_approval"
    REASON_AMOUNT_MISMATCH = "amount_mismatch"

    REASON_CHOICES = [
        (REASON_ADMIN_CANCEL_AFTER_PAYMENT, "Cancelled by admin after payment"),
        (REASON_LATE_APPROVAL, "Approval arrived after cancellation"),
        (REASON_DUPLICATE_APPROVAL, "Second approved payment for a paid order"),
        (REASON_AMOUNT_MISMATCH, "Approved amount differs from order total"),
    ]

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="refund_obligations",
    )
    payment_record = models.ForeignKey(
        "orders.PaymentRecord",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="refund_obligations",
    )

    amount = models.BigIntegerField()
    reason = models.CharField(max_length=32, choices=REASON_CHOICES)
    note = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["resolved_at"], name="orders_refund_resolved_idx"),
        ]

    @property
    def is_open(self) -> bool:
        return self.resolved_at is None

    def __str__(self):
        return f"{self.order_id} | {self.reason} | {self.amount}"
