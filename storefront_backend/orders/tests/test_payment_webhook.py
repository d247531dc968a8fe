# orders/tests/test_payment_webhook.py

"""
PAYMENT WEBHOOK TESTS

GUARANTEES:
- Only signed notifications are read
- Redelivery of the same transaction never re-applies effects
- Money that cannot settle an order turns into a refund obligation
"""

from __future__ import annotations

import json
import uuid

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework.test import APIClient

from catalog.models import Product, StockReservation
from orders.models import Order, OrderStatus, PaymentRecord, RefundObligation
from orders.services.checkout_orchestrator import checkout
from orders.services.exceptions import (
    InvalidSignatureError,
    MalformedNotificationError,
    RetryableWebhookError,
    UnknownOrderError,
)
from orders.services.order_lifecycle import admin_cancel_order
from orders.services.payment_webhook import ingest, parse_notification
from orders.signals import refund_owed
from orders.tests.helpers import (
    WEBHOOK_SETTINGS,
    fill_cart,
    make_address,
    make_catalog,
    make_member,
    notification,
    patch_gateway,
    signed,
)


@override_settings(PAYMENTS=WEBHOOK_SETTINGS)
class WebhookServiceTests(TestCase):
    def setUp(self):
        self.user = make_member()
        self.product, self.pack = make_catalog(stock=50)
        self.address = make_address(self.user)
        fill_cart(self.user, self.product, self.pack)
        with patch_gateway():
            self.order = checkout(user=self.user, address_id=self.address.id).order

    def _ingest(self, raw_body):
        return ingest(raw_body=raw_body, signature=signed(raw_body))

    def _stock(self):
        return Product.objects.get(pk=self.product.pk).stock

    # ---------------- approval ----------------

    def test_approval_marks_order_paid_and_keeps_stock(self):
        ack = self._ingest(notification(self.order))

        self.order.refresh_from_db()
        self.assertEqual(ack.outcome, "applied")
        self.assertEqual(self.order.status, OrderStatus.PAID)
        self.assertIsNotNone(self.order.paid_at)
        self.assertEqual(self._stock(), 46)

        record = PaymentRecord.objects.get(order=self.order)
        self.assertEqual(record.transaction_id, "tx-1")
        self.assertTrue(record.settles_order)
        self.assertEqual(record.status, "approved")

    def test_duplicate_approval_is_acknowledged_once(self):
        body = notification(self.order)
        first = self._ingest(body)
        second = self._ingest(body)

        self.assertEqual(first.outcome, "applied")
        self.assertTrue(second.duplicate)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PAID)
        self.assertEqual(PaymentRecord.objects.filter(order=self.order, status="approved").count(), 1)
        self.assertEqual(self.order.status_events.filter(to_status=OrderStatus.PAID).count(), 1)
        self.assertFalse(RefundObligation.objects.exists())

    def test_amount_mismatch_never_settles(self):
        ack = self._ingest(notification(self.order, amount=1000))

        self.order.refresh_from_db()
        self.assertEqual(ack.outcome, "recorded")
        self.assertEqual(self.order.status, OrderStatus.PENDING)
        refund = RefundObligation.objects.get(order=self.order)
        self.assertEqual(refund.reason, RefundObligation.REASON_AMOUNT_MISMATCH)
        self.assertEqual(refund.amount, 1000)

        record = PaymentRecord.objects.get(transaction_id="tx-1")
        self.assertEqual(record.status, "refunded")
        self.assertFalse(record.settles_order)
        self.assertTrue(record.status_detail.startswith("approved"))
        self.assertEqual(refund.payment_record_id, record.id)

    def test_correct_approval_after_mismatch_is_the_only_approved_record(self):
        self._ingest(notification(self.order, transaction_id="tx-a", amount=1000))
        ack = self._ingest(notification(self.order, transaction_id="tx-b"))

        self.order.refresh_from_db()
        self.assertEqual(ack.outcome, "applied")
        self.assertEqual(self.order.status, OrderStatus.PAID)
        approved = PaymentRecord.objects.filter(order=self.order, status="approved")
        self.assertEqual([r.transaction_id for r in approved], ["tx-b"])
        self.assertTrue(approved.get().settles_order)

    def test_mismatched_approval_redelivery_is_duplicate(self):
        body = notification(self.order, amount=1000)
        self._ingest(body)
        ack = self._ingest(body)

        self.assertTrue(ack.duplicate)
        self.assertEqual(RefundObligation.objects.filter(order=self.order).count(), 1)

    def test_second_transaction_for_paid_order_owes_refund(self):
        self._ingest(notification(self.order, transaction_id="tx-1"))
        self._ingest(notification(self.order, transaction_id="tx-2"))

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PAID)
        self.assertEqual(PaymentRecord.objects.filter(order=self.order, settles_order=True).count(), 1)
        self.assertEqual(PaymentRecord.objects.filter(order=self.order, status="approved").count(), 1)
        self.assertEqual(PaymentRecord.objects.get(transaction_id="tx-2").status, "refunded")
        refund = RefundObligation.objects.get(order=self.order)
        self.assertEqual(refund.reason, RefundObligation.REASON_DUPLICATE_APPROVAL)

    def test_late_approval_after_cancellation_owes_refund(self):
        admin_cancel_order(order=self.order, reason="customer called")
        self.assertEqual(self._stock(), 50)

        received = []

        def _receiver(sender, obligation, order, **kwargs):
            received.append((obligation.reason, order.id))

        refund_owed.connect(_receiver)
        self.addCleanup(refund_owed.disconnect, _receiver)

        with self.captureOnCommitCallbacks(execute=True):
            self._ingest(notification(self.order))

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertEqual(self._stock(), 50)
        self.assertEqual(received, [(RefundObligation.REASON_LATE_APPROVAL, self.order.id)])
        self.assertFalse(PaymentRecord.objects.filter(order=self.order, status="approved").exists())

    # ---------------- rejection ----------------

    def test_rejection_cancels_and_releases_stock(self):
        ack = self._ingest(notification(self.order, status="rejected", status_detail="cc_rejected_other"))

        self.order.refresh_from_db()
        self.assertEqual(ack.outcome, "applied")
        self.assertEqual(self.order.status, OrderStatus.CANCELLED)
        self.assertIn("cc_rejected_other", self.order.cancel_reason)
        self.assertEqual(self._stock(), 50)
        self.assertFalse(StockReservation.objects.filter(order=self.order, released_at__isnull=True).exists())

    def test_rejection_redelivery_releases_only_once(self):
        body = notification(self.order, status="rejected")
        self._ingest(body)
        ack = self._ingest(body)

        self.assertTrue(ack.duplicate)
        self.assertEqual(self._stock(), 50)

    def test_pending_notification_is_only_recorded(self):
        ack = self._ingest(notification(self.order, status="in_process"))

        self.order.refresh_from_db()
        self.assertEqual(ack.outcome, "recorded")
        self.assertEqual(self.order.status, OrderStatus.PENDING)
        self.assertEqual(PaymentRecord.objects.get(order=self.order).transaction_id, "tx-1")

    def test_refund_notification_updates_approved_record(self):
        self._ingest(notification(self.order))
        ack = self._ingest(notification(self.order, status="refunded"))

        self.assertEqual(ack.outcome, "recorded")
        record = PaymentRecord.objects.get(transaction_id="tx-1")
        self.assertEqual(record.status, "refunded")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PAID)

    # ---------------- refusals ----------------

    def test_bad_signature_has_no_side_effects(self):
        body = notification(self.order)
        with self.assertRaises(InvalidSignatureError):
            ingest(raw_body=body, signature="0" * 64)
        with self.assertRaises(InvalidSignatureError):
            ingest(raw_body=body, signature=None)

        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)
        self.assertIsNone(PaymentRecord.objects.get(order=self.order).transaction_id)

    def test_unknown_order(self):
        body = json.dumps(
            {"external_reference": str(uuid.uuid4()), "transaction_id": "tx-9", "status": "approved", "amount": 1}
        ).encode()
        with self.assertRaises(UnknownOrderError):
            self._ingest(body)

    def test_transaction_reused_for_other_order_is_malformed(self):
        self._ingest(notification(self.order))

        other = Order.objects.create(
            user=self.user,
            shipping_commune="Las Condes",
            subtotal=100,
            shipping_cost=3500,
            total=3600,
        )
        with self.assertRaises(MalformedNotificationError):
            self._ingest(notification(other))

    @override_settings(PAYMENTS={"GATEWAY": {}})
    def test_missing_secret_is_retryable(self):
        with self.assertRaises(RetryableWebhookError):
            ingest(raw_body=b"{}", signature="abc")


class ParseNotificationTests(TestCase):
    def test_rejects_bad_payloads(self):
        bad_bodies = [
            b"not json",
            b"[]",
            json.dumps({"external_reference": "x", "status": "approved", "amount": 1}).encode(),
            json.dumps({"external_reference": "x", "transaction_id": "t", "status": "weird", "amount": 1}).encode(),
            json.dumps({"external_reference": "x", "transaction_id": "t", "status": "approved", "amount": 1.5}).encode(),
        ]
        for body in bad_bodies:
            with self.subTest(body=body):
                with self.assertRaises(MalformedNotificationError):
                    parse_notification(body)

    def test_expired_maps_to_rejected(self):
        parsed = parse_notification(
            json.dumps({"external_reference": "x", "transaction_id": "t", "status": "EXPIRED", "amount": "10"}).encode()
        )
        self.assertEqual(parsed.status, "rejected")
        self.assertEqual(parsed.status_detail, "expired")
        self.assertEqual(parsed.amount, 10)


@override_settings(PAYMENTS=WEBHOOK_SETTINGS)
class WebhookApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("payments:webhook")
        self.user = make_member()
        self.product, self.pack = make_catalog(stock=50)
        fill_cart(self.user, self.product, self.pack)
        with patch_gateway():
            self.order = checkout(user=self.user, address_id=make_address(self.user).id).order

    def _post(self, body, signature):
        headers = {"HTTP_X_GATEWAY_SIGNATURE": signature} if signature else {}
        return self.client.generic("POST", self.url, body, content_type="application/json", **headers)

    def test_signed_approval_returns_200(self):
        body = notification(self.order)
        response = self._post(body, signed(body))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["order_status"], "PAID")

        again = self._post(body, signed(body))
        self.assertEqual(again.status_code, 200)
        self.assertEqual(again.data["detail"], "duplicate")

    def test_invalid_signature_returns_401(self):
        body = notification(self.order)
        response = self._post(body, "deadbeef")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.data["error"]["code"], "INVALID_SIGNATURE")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_malformed_and_unknown(self):
        body = b'{"status": "approved"}'
        response = self._post(body, signed(body))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "MALFORMED_NOTIFICATION")

        body = json.dumps(
            {"external_reference": "nope", "transaction_id": "t", "status": "approved", "amount": 1}
        ).encode()
        response = self._post(body, signed(body))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "UNKNOWN_ORDER")
