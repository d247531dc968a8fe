# orders/services/refunds.py

"""
REFUND OBLIGATIONS

The core never moves money. When money must go back to a member we record a
RefundObligation and emit orders.signals.refund_owed once the surrounding
transaction commits.
"""

from __future__ import annotations

import logging

from django.db import transaction

from orders.models import RefundObligation
from orders.signals import refund_owed

logger = logging.getLogger(__name__)


def raise_refund_obligation(*, order, amount: int, reason: str, payment_record=None, note: str = "") -> RefundObligation:
    obligation = RefundObligation.objects.create(
        order=order,
        payment_record=payment_record,
        amount=int(amount),
        reason=reason,
        note=(note or "")[:255],
    )

    logger.warning(
        "Refund owed",
        extra={
            "order_id": str(order.id),
            "amount": int(amount),
            "reason": reason,
            "obligation_id": obligation.id,
        },
    )

    transaction.on_commit(
        lambda: refund_owed.send(sender=RefundObligation, obligation=obligation, order=order)
    )
    return obligation
