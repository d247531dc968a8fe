# orders/tests/test_lifecycle.py

"""
ORDER LIFECYCLE TESTS

GUARANTEES:
- Only the listed transitions are legal, and only for their actors
- Terminal states never move
- Cancellation releases reservations exactly once
- Cancelling a paid order owes a refund
"""

from __future__ import annotations

from itertools import product as cartesian

from django.test import TestCase

from catalog.models import Product
from orders.models import OrderStatus, RefundObligation, TransitionActor
from orders.services.checkout_orchestrator import checkout
from orders.services.exceptions import InvalidTransitionError
from orders.services.order_lifecycle import (
    TERMINAL_STATES,
    admin_cancel_order,
    advance_order,
    can_transition,
    cancel_order,
    mark_paid,
    transition,
)
from orders.signals import refund_owed
from orders.tests.helpers import fill_cart, make_address, make_catalog, make_member, patch_gateway

LEGAL = {
    (OrderStatus.PENDING, OrderStatus.PAID, TransitionActor.GATEWAY),
    (OrderStatus.PENDING, OrderStatus.CANCELLED, TransitionActor.GATEWAY),
    (OrderStatus.PENDING, OrderStatus.CANCELLED, TransitionActor.ADMIN),
    (OrderStatus.PENDING, OrderStatus.CANCELLED, TransitionActor.SYSTEM),
    (OrderStatus.PAID, OrderStatus.PREPARING, TransitionActor.ADMIN),
    (OrderStatus.PAID, OrderStatus.CANCELLED, TransitionActor.ADMIN),
    (OrderStatus.PREPARING, OrderStatus.SHIPPED, TransitionActor.ADMIN),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED, TransitionActor.ADMIN),
}


class TransitionTableTests(TestCase):
    def test_full_legality_grid(self):
        for from_status, to_status, actor in cartesian(
            OrderStatus.values, OrderStatus.values, TransitionActor.values
        ):
            with self.subTest(from_status=from_status, to_status=to_status, actor=actor):
                expected = (from_status, to_status, actor) in LEGAL
                self.assertEqual(
                    can_transition(from_status=from_status, to_status=to_status, actor=actor),
                    expected,
                )

    def test_terminal_states_have_no_exits(self):
        for terminal in TERMINAL_STATES:
            for target in OrderStatus.values:
                self.assertFalse(can_transition(from_status=terminal, to_status=target))


class LifecycleServiceTests(TestCase):
    def setUp(self):
        self.user = make_member()
        self.admin = make_member(email="admin@example.com", role="admin")
        self.product, self.pack = make_catalog(stock=50)
        fill_cart(self.user, self.product, self.pack)
        with patch_gateway():
            self.order = checkout(user=self.user, address_id=make_address(self.user).id).order

    def _stock(self):
        return Product.objects.get(pk=self.product.pk).stock

    def test_fulfilment_path_records_every_step(self):
        mark_paid(order=self.order)
        for target in (OrderStatus.PREPARING, OrderStatus.SHIPPED, OrderStatus.DELIVERED):
            advance_order(order=self.order, to_status=target, performed_by=self.admin)

        self.assertEqual(self.order.status, OrderStatus.DELIVERED)
        self.assertIsNotNone(self.order.shipped_at)
        self.assertIsNotNone(self.order.delivered_at)
        trail = list(self.order.status_events.values_list("to_status", flat=True))
        self.assertEqual(trail, ["PENDING", "PAID", "PREPARING", "SHIPPED", "DELIVERED"])
        self.assertEqual(self._stock(), 46)

    def test_skipping_a_step_is_refused_without_changes(self):
        mark_paid(order=self.order)

        with self.assertRaises(InvalidTransitionError):
            advance_order(order=self.order, to_status=OrderStatus.SHIPPED, performed_by=self.admin)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PAID)
        self.assertEqual(self.order.status_events.count(), 2)

    def test_advance_cannot_cancel_or_pay(self):
        for target in (OrderStatus.CANCELLED, OrderStatus.PAID):
            with self.assertRaises(InvalidTransitionError):
                advance_order(order=self.order, to_status=target)

    def test_customer_actor_cannot_drive_transitions(self):
        with self.assertRaises(InvalidTransitionError):
            transition(order=self.order, to_status=OrderStatus.PAID, actor=TransitionActor.CUSTOMER)

    def test_cancel_releases_stock_once(self):
        cancel_order(order=self.order, actor=TransitionActor.GATEWAY, reason="rejected")
        self.assertEqual(self._stock(), 50)

        with self.assertRaises(InvalidTransitionError):
            cancel_order(order=self.order, actor=TransitionActor.ADMIN)
        self.assertEqual(self._stock(), 50)

    def test_admin_cancel_after_payment_owes_refund(self):
        mark_paid(order=self.order)

        received = []

        def _receiver(sender, obligation, order, **kwargs):
            received.append(obligation.amount)

        refund_owed.connect(_receiver)
        self.addCleanup(refund_owed.disconnect, _receiver)

        with self.captureOnCommitCallbacks(execute=True):
            admin_cancel_order(order=self.order, reason="out of stock at warehouse", performed_by=self.admin)

        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertEqual(self._stock(), 50)
        refund = RefundObligation.objects.get(order=self.order)
        self.assertEqual(refund.reason, RefundObligation.REASON_ADMIN_CANCEL_AFTER_PAYMENT)
        self.assertEqual(refund.amount, 1042500)
        self.assertEqual(received, [1042500])

    def test_gateway_cannot_cancel_paid_order(self):
        mark_paid(order=self.order)
        with self.assertRaises(InvalidTransitionError):
            cancel_order(order=self.order, actor=TransitionActor.GATEWAY)
