# orders/services/checkout_orchestrator.py

"""
CHECKOUT ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Turn the member's cart into a PENDING order with stock reserved, then ask the
  payment gateway for an intent the member is redirected to.

Phase 1 (one DB transaction):
- lock + price the cart lines (server-side pricing, never client totals)
- resolve the delivery address and its commune shipping rate
- reserve base units per product (ascending product id, all-or-nothing)
- create Order + frozen OrderItems + initial status event + intent PaymentRecord
- attach reservations to the order, clear the cart

Phase 2 (no transaction, no locks held):
- create the gateway intent with the order id as idempotency key
- store the intent reference + redirect URL on the order

Failure rules:
- Any phase-1 failure rolls back everything: no order, no reservation, cart intact.
- A gateway failure leaves the order PENDING (stock reserved, cart already
  consumed) and raises PaymentGatewayError carrying the order, so the client
  retries with retry_payment_intent() instead of checking out again. If it is
  never paid, the expiry sweep cancels it and releases the stock.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from cart.services.cart import cart_snapshot, clear_cart
from catalog.services import stock_ledger
from orders.models import (
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusEvent,
    PaymentRecord,
    PaymentStatus,
    TransitionActor,
)
from orders.services.exceptions import EmptyCartError, OrderNotPayableError, PaymentGatewayError
from payments.services import gateway
from payments.services.exceptions import GatewayError
from shipping.services.rates import quote_for_address

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckoutResult:
    order: Order
    redirect_url: str


# ============================================================
# PHASE 1: RESERVE + CREATE (ATOMIC)
# ============================================================


@transaction.atomic
def _create_pending_order(*, user, address_id) -> Order:
    snapshot = cart_snapshot(user=user, lock=True)
    if snapshot.is_empty:
        raise EmptyCartError("Cart is empty")

    # Address + rate first: a missing zone must not churn reservations.
    address, quote = quote_for_address(user=user, address_id=address_id)

    tokens = stock_ledger.reserve_many(demands=snapshot.base_unit_demand())

    subtotal = snapshot.subtotal
    order = Order.objects.create(
        user=user,
        address=address,
        shipping_commune=quote.commune,
        shipping_address_line=address.one_line()[:400],
        subtotal=subtotal,
        shipping_cost=quote.cost,
        total=subtotal + quote.cost,
        currency=settings.STORE_CURRENCY,
        status=OrderStatus.PENDING,
    )

    OrderItem.objects.bulk_create(
        [
            OrderItem(
                order=order,
                position=position,
                product=line.product,
                pack_variant=line.pack_variant,
                product_name=line.product.name,
                sku=line.product.sku,
                pack_variant_name=line.pack_variant.name if line.pack_variant else "",
                quantity=line.quantity,
                units_per_item=line.units_per_item,
                unit_price=line.unit_price,
                line_total=line.line_total,
            )
            for position, line in enumerate(snapshot.lines)
        ]
    )

    stock_ledger.attach_to_order(tokens=tokens, order=order)

    OrderStatusEvent.objects.create(
        order=order,
        from_status="",
        to_status=OrderStatus.PENDING,
        actor=TransitionActor.CUSTOMER,
        reason="checkout",
        performed_by=user,
    )

    PaymentRecord.objects.create(
        order=order,
        status=PaymentStatus.PENDING,
        amount=order.total,
        currency=order.currency,
        status_detail="intent_requested",
    )

    clear_cart(user=user)

    logger.info(
        "Order created",
        extra={
            "order_id": str(order.id),
            "order_no": order.order_no,
            "total": order.total,
            "lines": len(snapshot.lines),
        },
    )
    return order


# ============================================================
# PHASE 2: PAYMENT INTENT (NO LOCKS)
# ============================================================


def _request_intent(*, order: Order) -> CheckoutResult:
    try:
        intent = gateway.create_intent(
            order_id=order.id,
            amount=order.total,
            currency=order.currency,
            description=f"Order {order.order_no}",
            payer_email=getattr(order.user, "email", "") or "",
        )
    except GatewayError as exc:
        logger.error(
            "Payment intent failed; order stays pending",
            extra={"order_id": str(order.id), "error": str(exc)},
        )
        raise PaymentGatewayError(
            f"Payment provider unavailable for order {order.order_no}: {exc}",
            order=order,
        ) from exc

    with transaction.atomic():
        Order.objects.filter(pk=order.pk, external_payment_reference="").update(
            external_payment_reference=intent.external_reference,
            payment_redirect_url=intent.redirect_url,
            updated_at=timezone.now(),
        )
        PaymentRecord.objects.filter(
            order=order,
            transaction_id__isnull=True,
            status=PaymentStatus.PENDING,
        ).update(external_reference=intent.external_reference, updated_at=timezone.now())

    order.refresh_from_db()
    logger.info(
        "Payment intent stored",
        extra={"order_id": str(order.id), "external_reference": order.external_payment_reference},
    )
    return CheckoutResult(order=order, redirect_url=order.payment_redirect_url)


# ============================================================
# PUBLIC API
# ============================================================


def checkout(*, user, address_id) -> CheckoutResult:
    order = _create_pending_order(user=user, address_id=address_id)
    return _request_intent(order=order)


def retry_payment_intent(*, order: Order) -> CheckoutResult:
    """
    Re-request the intent for a PENDING order whose gateway call failed.
    Never touches stock or creates an order; a no-op when a reference exists.
    """
    order.refresh_from_db()

    if order.status != OrderStatus.PENDING:
        raise OrderNotPayableError(
            f"Order {order.order_no} is {order.status}; only pending orders can be paid"
        )

    if order.external_payment_reference:
        return CheckoutResult(order=order, redirect_url=order.payment_redirect_url)

    return _request_intent(order=order)
