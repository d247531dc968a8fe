# orders/services/order_lifecycle.py

"""
ORDER LIFECYCLE

This module defines the ONLY allowed lifecycle transitions for orders and
is the only code that writes Order.status.

    PENDING -> PAID -> PREPARING -> SHIPPED -> DELIVERED
    PENDING -> CANCELLED        (gateway rejection/expiry, admin, expiry sweep)
    PAID    -> CANCELLED        (admin only; refund owed)

DELIVERED and CANCELLED are terminal. Every transition is actor-checked.

Side effects of a successful transition (same DB transaction):
- OrderStatusEvent audit row
- -> CANCELLED: every held stock reservation of the order is released
- PAID -> CANCELLED: RefundObligation + refund_owed signal

Linearizability: the order row is locked (select_for_update) for the whole
check-and-write, so concurrent webhook/admin/sweep calls serialize per order.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from catalog.services.stock_ledger import release_for_order
from orders.models import (
    Order,
    OrderStatus,
    OrderStatusEvent,
    PaymentRecord,
    RefundObligation,
    TransitionActor,
)
from orders.services.exceptions import InvalidTransitionError
from orders.services.refunds import raise_refund_obligation

logger = logging.getLogger(__name__)

# ============================================================
# STATE DEFINITIONS
# ============================================================

TERMINAL_STATES = {
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
}

# from_status -> {to_status: actors allowed to drive it}
ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.PAID: {TransitionActor.GATEWAY},
        OrderStatus.CANCELLED: {
            TransitionActor.GATEWAY,
            TransitionActor.ADMIN,
            TransitionActor.SYSTEM,
        },
    },
    OrderStatus.PAID: {
        OrderStatus.PREPARING: {TransitionActor.ADMIN},
        OrderStatus.CANCELLED: {TransitionActor.ADMIN},
    },
    OrderStatus.PREPARING: {
        OrderStatus.SHIPPED: {TransitionActor.ADMIN},
    },
    OrderStatus.SHIPPED: {
        OrderStatus.DELIVERED: {TransitionActor.ADMIN},
    },
}

ADMIN_ADVANCE_TARGETS = {
    OrderStatus.PREPARING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
}

_TIMESTAMP_FIELDS = {
    OrderStatus.PAID: "paid_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


# ============================================================
# DOMAIN RULES
# ============================================================


def can_transition(*, from_status: str, to_status: str, actor: str | None = None) -> bool:
    if from_status in TERMINAL_STATES:
        return False

    actors = ALLOWED_TRANSITIONS.get(from_status, {}).get(to_status)
    if not actors:
        return False

    return actor is None or actor in actors


def validate_transition(*, order: Order, to_status: str, actor: str) -> None:
    if not can_transition(from_status=order.status, to_status=to_status, actor=actor):
        logger.warning(
            "Invalid order transition refused",
            extra={
                "order_id": str(order.id),
                "from_status": order.status,
                "to_status": to_status,
                "actor": actor,
            },
        )
        raise InvalidTransitionError(
            order_id=order.id,
            from_status=order.status,
            to_status=to_status,
            actor=actor,
        )


# ============================================================
# TRANSITIONS
# ============================================================


@transaction.atomic
def transition(*, order: Order, to_status: str, actor: str, reason: str = "", performed_by=None) -> Order:
    locked = Order.objects.select_for_update().get(pk=order.pk)
    from_status = locked.status

    validate_transition(order=locked, to_status=to_status, actor=actor)

    now = timezone.now()
    locked.status = to_status
    update_fields = ["status", "updated_at"]

    stamp = _TIMESTAMP_FIELDS.get(to_status)
    if stamp:
        setattr(locked, stamp, now)
        update_fields.append(stamp)

    if to_status == OrderStatus.CANCELLED:
        locked.cancel_reason = (reason or "")[:255]
        update_fields.append("cancel_reason")

    locked.save(update_fields=update_fields)

    OrderStatusEvent.objects.create(
        order=locked,
        from_status=from_status,
        to_status=to_status,
        actor=actor,
        reason=(reason or "")[:255],
        performed_by=performed_by,
    )

    if to_status == OrderStatus.CANCELLED:
        released = release_for_order(order=locked)
        logger.info(
            "Order cancelled; stock released",
            extra={"order_id": str(locked.id), "released_tokens": released, "actor": actor},
        )

        if from_status == OrderStatus.PAID:
            raise_refund_obligation(
                order=locked,
                amount=locked.total,
                reason=RefundObligation.REASON_ADMIN_CANCEL_AFTER_PAYMENT,
                payment_record=PaymentRecord.objects.filter(order=locked, settles_order=True).first(),
                note=reason,
            )

    logger.info(
        "Order transitioned",
        extra={
            "order_id": str(locked.id),
            "from_status": from_status,
            "to_status": to_status,
            "actor": actor,
        },
    )

    # Keep the caller's instance in sync with the row.
    order.refresh_from_db()
    return locked


def mark_paid(*, order: Order, reason: str = "") -> Order:
    return transition(
        order=order,
        to_status=OrderStatus.PAID,
        actor=TransitionActor.GATEWAY,
        reason=reason or "payment approved",
    )


def cancel_order(*, order: Order, actor: str, reason: str = "", performed_by=None) -> Order:
    return transition(
        order=order,
        to_status=OrderStatus.CANCELLED,
        actor=actor,
        reason=reason,
        performed_by=performed_by,
    )


def advance_order(*, order: Order, to_status: str, performed_by=None, reason: str = "") -> Order:
    """Admin fulfilment step (PAID -> PREPARING -> SHIPPED -> DELIVERED, one at a time)."""
    if to_status not in ADMIN_ADVANCE_TARGETS:
        # Cancellation has its own action (admin_cancel_order).
        logger.warning(
            "Admin advance refused",
            extra={"order_id": str(order.id), "from_status": order.status, "to_status": to_status},
        )
        raise InvalidTransitionError(
            order_id=order.id,
            from_status=order.status,
            to_status=to_status,
            actor=TransitionActor.ADMIN,
        )
    return transition(
        order=order,
        to_status=to_status,
        actor=TransitionActor.ADMIN,
        reason=reason,
        performed_by=performed_by,
    )


def admin_cancel_order(*, order: Order, reason: str = "", performed_by=None) -> Order:
    return cancel_order(
        order=order,
        actor=TransitionActor.ADMIN,
        reason=reason or "cancelled by admin",
        performed_by=performed_by,
    )
