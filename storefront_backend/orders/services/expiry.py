# orders/services/expiry.py

"""
PENDING ORDER EXPIRY

Orders that never receive a payment confirmation would hold their stock
forever. The sweep cancels PENDING orders older than
settings.ORDER_PAYMENT_TIMEOUT_MINUTES (actor: system), which releases
their reservations through the lifecycle.

An order that gets paid (or cancelled) between the query and the
transition is skipped; the lifecycle re-checks the status under lock.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from orders.models import Order, OrderStatus, TransitionActor
from orders.services.exceptions import InvalidTransitionError
from orders.services.order_lifecycle import cancel_order

logger = logging.getLogger(__name__)


def stale_pending_orders(*, older_than: timedelta | None = None, now=None):
    if older_than is None:
        older_than = timedelta(minutes=int(settings.ORDER_PAYMENT_TIMEOUT_MINUTES))
    cutoff = (now or timezone.now()) - older_than
    return Order.objects.filter(status=OrderStatus.PENDING, created_at__lt=cutoff).order_by("created_at")


def expire_stale_orders(*, older_than: timedelta | None = None, now=None) -> int:
    expired = 0
    for order in stale_pending_orders(older_than=older_than, now=now):
        try:
            cancel_order(
                order=order,
                actor=TransitionActor.SYSTEM,
                reason="payment window expired",
            )
        except InvalidTransitionError:
            logger.info(
                "Order left pending sweep before expiry",
                extra={"order_id": str(order.id)},
            )
            continue
        expired += 1

    if expired:
        logger.info("Expired pending orders", extra={"count": expired})
    return expired
