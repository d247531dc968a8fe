# orders/services/payment_webhook.py

"""
PAYMENT WEBHOOK PROCESSOR

Purpose:
- Ingest asynchronous gateway notifications and reconcile them with orders.

Order of checks (first failure wins, no side effects before it):
1) signature  -> InvalidSignatureError       (HTTP 401)
2) payload    -> MalformedNotificationError  (HTTP 400)
3) order      -> UnknownOrderError           (HTTP 404)

Reconciliation (order row locked for the whole decision):
- same transaction_id already recorded with the same status, or already in
  a final status -> duplicate, nothing re-applied
- approved + PENDING order + amount == total -> record settles the order,
  PENDING -> PAID
- approved with a different amount -> stored as refunded, refund owed,
  order untouched
- approved for a CANCELLED order (late) or an already PAID+ order (second
  payment) -> stored as refunded, refund owed
- only the settling record is ever stored as approved
- rejected / expired + PENDING order -> PENDING -> CANCELLED (stock released)
- anything else -> recorded for audit only

Database failures surface as RetryableWebhookError (HTTP 503) so the
gateway redelivers; redelivery is safe because of the dedup rules above.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass

from django.db import DatabaseError, transaction
from django.utils import timezone

from orders.models import (
    Order,
    OrderStatus,
    PaymentRecord,
    PaymentStatus,
    RefundObligation,
    TransitionActor,
)
from orders.services import order_lifecycle
from orders.services.exceptions import (
    InvalidSignatureError,
    MalformedNotificationError,
    RetryableWebhookError,
    UnknownOrderError,
)
from orders.services.refunds import raise_refund_obligation
from payments.services.exceptions import GatewayConfigurationError
from payments.services.gateway import verify_signature

logger = logging.getLogger(__name__)

# gateway status -> PaymentRecord status
GATEWAY_STATUS_MAP = {
    "approved": PaymentStatus.APPROVED,
    "pending": PaymentStatus.PENDING,
    "in_process": PaymentStatus.PENDING,
    "rejected": PaymentStatus.REJECTED,
    "expired": PaymentStatus.REJECTED,
    "cancelled": PaymentStatus.REJECTED,
    "refunded": PaymentStatus.REFUNDED,
}

REQUIRED_FIELDS = ("external_reference", "transaction_id", "status", "amount")

OUTCOME_APPLIED = "applied"
OUTCOME_RECORDED = "recorded"
OUTCOME_DUPLICATE = "duplicate"


@dataclass(frozen=True)
class PaymentNotification:
    external_reference: str
    transaction_id: str
    gateway_status: str
    status: str
    status_detail: str
    amount: int
    payload: dict


@dataclass(frozen=True)
class WebhookAck:
    order_id: object
    outcome: str
    order_status: str
    payment_record_id: object = None

    @property
    def duplicate(self) -> bool:
        return self.outcome == OUTCOME_DUPLICATE


# ============================================================
# PARSING
# ============================================================


def _to_amount(value) -> int:
    if isinstance(value, bool):
        raise MalformedNotificationError("amount must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise MalformedNotificationError("amount must be an integer (smallest currency unit)")


def parse_notification(raw_body: bytes) -> PaymentNotification:
    try:
        payload = json.loads((raw_body or b"").decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedNotificationError("Notification body is not valid JSON") from exc

    if not isinstance(payload, dict):
        raise MalformedNotificationError("Notification body must be a JSON object")

    missing = [f for f in REQUIRED_FIELDS if payload.get(f) in (None, "")]
    if missing:
        raise MalformedNotificationError(f"Missing fields: {', '.join(missing)}")

    gateway_status = str(payload["status"]).strip().lower()
    status = GATEWAY_STATUS_MAP.get(gateway_status)
    if status is None:
        raise MalformedNotificationError(f"Unknown payment status '{payload['status']}'")

    return PaymentNotification(
        external_reference=str(payload["external_reference"]).strip(),
        transaction_id=str(payload["transaction_id"]).strip(),
        gateway_status=gateway_status,
        status=status,
        status_detail=str(payload.get("status_detail") or gateway_status)[:255],
        amount=_to_amount(payload["amount"]),
        payload=payload,
    )


# ============================================================
# RECONCILIATION
# ============================================================


def _is_duplicate(record: PaymentRecord, notification: PaymentNotification) -> bool:
    if record.status == notification.status:
        return True
    # approved -> refunded is the only move out of a final status
    if record.status == PaymentStatus.APPROVED and notification.status == PaymentStatus.REFUNDED:
        return False
    return record.is_final


def _store(
    record: PaymentRecord,
    notification: PaymentNotification,
    *,
    order: Order,
    status: str | None = None,
) -> PaymentRecord:
    record.transaction_id = notification.transaction_id
    record.external_reference = record.external_reference or order.external_payment_reference
    record.status = status or notification.status
    if record.status == notification.status:
        record.status_detail = notification.status_detail
    else:
        record.status_detail = f"{notification.gateway_status}: {notification.status_detail}"[:255]
    record.amount = notification.amount
    record.currency = order.currency
    record.raw_payload = notification.payload
    if notification.status == PaymentStatus.APPROVED and not record.approved_at:
        record.approved_at = timezone.now()
    record.save()
    return record


def _ack(order: Order, outcome: str, record: PaymentRecord | None) -> WebhookAck:
    return WebhookAck(
        order_id=order.id,
        outcome=outcome,
        order_status=order.status,
        payment_record_id=record.id if record else None,
    )


@transaction.atomic
def _apply(notification: PaymentNotification) -> WebhookAck:
    try:
        order_id = uuid.UUID(notification.external_reference)
    except ValueError as exc:
        raise UnknownOrderError(f"Unknown order reference '{notification.external_reference}'") from exc

    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise UnknownOrderError(f"Unknown order reference '{notification.external_reference}'")

    existing = PaymentRecord.objects.filter(transaction_id=notification.transaction_id).first()
    if existing is not None and existing.order_id != order.id:
        raise MalformedNotificationError(
            f"Transaction {notification.transaction_id} belongs to another order"
        )

    if existing is not None and _is_duplicate(existing, notification):
        logger.info(
            "Duplicate payment notification ignored",
            extra={"order_id": str(order.id), "transaction_id": notification.transaction_id},
        )
        return _ack(order, OUTCOME_DUPLICATE, existing)

    # First notification for the order adopts the intent record created at checkout.
    record = existing or (
        PaymentRecord.objects.filter(
            order=order,
            transaction_id__isnull=True,
            status=PaymentStatus.PENDING,
        ).first()
        or PaymentRecord(order=order)
    )

    if notification.status == PaymentStatus.APPROVED:
        return _apply_approval(order=order, record=record, notification=notification)

    record = _store(record, notification, order=order)

    if notification.status == PaymentStatus.REJECTED and order.status == OrderStatus.PENDING:
        order_lifecycle.cancel_order(
            order=order,
            actor=TransitionActor.GATEWAY,
            reason=f"payment {notification.gateway_status}: {notification.status_detail}",
        )
        return _ack(order, OUTCOME_APPLIED, record)

    logger.info(
        "Payment notification recorded",
        extra={
            "order_id": str(order.id),
            "transaction_id": notification.transaction_id,
            "payment_status": notification.status,
            "order_status": order.status,
        },
    )
    return _ack(order, OUTCOME_RECORDED, record)


def _apply_approval(*, order: Order, record: PaymentRecord, notification: PaymentNotification) -> WebhookAck:
    # Only the settling record is ever stored as approved; any other approved
    # money is stored as refunded and backed by a RefundObligation.
    if order.status == OrderStatus.PENDING:
        if notification.amount == order.total:
            record.settles_order = True
            record = _store(record, notification, order=order)
            order_lifecycle.mark_paid(
                order=order,
                reason=f"payment {notification.transaction_id} approved",
            )
            return _ack(order, OUTCOME_APPLIED, record)

        logger.error(
            "Approved amount does not match order total",
            extra={
                "order_id": str(order.id),
                "transaction_id": notification.transaction_id,
                "paid": notification.amount,
                "expected": order.total,
            },
        )
        reason = RefundObligation.REASON_AMOUNT_MISMATCH
    elif order.status == OrderStatus.CANCELLED:
        reason = RefundObligation.REASON_LATE_APPROVAL
    else:
        reason = RefundObligation.REASON_DUPLICATE_APPROVAL

    record = _store(record, notification, order=order, status=PaymentStatus.REFUNDED)
    raise_refund_obligation(
        order=order,
        amount=notification.amount,
        reason=reason,
        payment_record=record,
        note=f"transaction {notification.transaction_id}",
    )
    return _ack(order, OUTCOME_RECORDED, record)


# ============================================================
# ENTRYPOINT
# ============================================================


def ingest(*, raw_body: bytes, signature: str | None) -> WebhookAck:
    try:
        valid = verify_signature(raw_body=raw_body, signature=signature)
    except GatewayConfigurationError as exc:
        logger.error("Webhook secret not configured", extra={"error": str(exc)})
        raise RetryableWebhookError(str(exc)) from exc

    if not valid:
        logger.warning("Invalid payment notification signature")
        raise InvalidSignatureError("Invalid signature")

    notification = parse_notification(raw_body)

    try:
        ack = _apply(notification)
    except DatabaseError as exc:
        logger.exception(
            "Database error while applying payment notification",
            extra={"transaction_id": notification.transaction_id},
        )
        raise RetryableWebhookError("Temporary failure; please redeliver") from exc

    logger.info(
        "Payment notification processed",
        extra={
            "order_id": str(ack.order_id),
            "transaction_id": notification.transaction_id,
            "outcome": ack.outcome,
            "order_status": ack.order_status,
        },
    )
    return ack
