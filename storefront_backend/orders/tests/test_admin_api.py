# orders/tests/test_admin_api.py

"""
ADMIN ORDER BOARD TESTS

Run with:
    python manage.py test orders.tests.test_admin_api -v 2
"""

from __future__ import annotations

from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from catalog.models import PackVariant, Product
from orders.models import RefundObligation
from orders.services.checkout_orchestrator import checkout
from orders.services.order_lifecycle import mark_paid
from orders.tests.helpers import fill_cart, make_address, make_catalog, make_member, patch_gateway
from shipping.models import ShippingZone


class AdminOrderApiTests(TestCase):
    def setUp(self):
        self.member = make_member()
        self.admin = make_member(email="admin@example.com", role="admin")
        self.product, self.pack = make_catalog(stock=50)
        self.address = make_address(self.member)

        fill_cart(self.member, self.product, self.pack)
        with patch_gateway():
            self.order = checkout(user=self.member, address_id=self.address.id).order

        self.client = APIClient()
        self.client.force_authenticate(user=self.admin)

    def _url(self, name, **kwargs):
        return reverse(f"orders:{name}", kwargs=kwargs or None)

    def test_members_are_forbidden(self):
        client = APIClient()
        client.force_authenticate(user=self.member)

        self.assertEqual(client.get(self._url("admin-orders-list")).status_code, 403)
        response = client.post(
            self._url("admin-orders-advance", order_id=self.order.id),
            {"status": "PREPARING"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    def test_list_includes_status_counts_and_filters(self):
        response = self.client.get(self._url("admin-orders-list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["counts"]["PENDING"], 1)
        self.assertEqual(response.data["counts"]["PAID"], 0)

        response = self.client.get(self._url("admin-orders-list"), {"status": "PAID"})
        self.assertEqual(response.data["count"], 0)

    def test_detail_exposes_payment_records(self):
        response = self.client.get(self._url("admin-orders-detail", order_id=self.order.id))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["payment_records"]), 1)
        self.assertEqual(response.data["customer_email"], "member@example.com")

    def test_advance_pending_order_is_conflict(self):
        response = self.client.post(
            self._url("admin-orders-advance", order_id=self.order.id),
            {"status": "PREPARING"},
            format="json",
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "INVALID_TRANSITION")

    def test_advance_paid_order(self):
        mark_paid(order=self.order)

        response = self.client.post(
            self._url("admin-orders-advance", order_id=self.order.id),
            {"status": "PREPARING", "reason": "picking"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "PREPARING")
        self.assertEqual(response.data["status_events"][-1]["reason"], "picking")

    def test_advance_rejects_unknown_target(self):
        response = self.client.post(
            self._url("admin-orders-advance", order_id=self.order.id),
            {"status": "CANCELLED"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_cancel_paid_order_releases_stock_and_owes_refund(self):
        mark_paid(order=self.order)

        response = self.client.post(
            self._url("admin-orders-cancel", order_id=self.order.id),
            {"reason": "damaged"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "CANCELLED")
        self.assertEqual(Product.objects.get(pk=self.product.pk).stock, 50)
        self.assertTrue(RefundObligation.objects.filter(order=self.order).exists())

        again = self.client.post(self._url("admin-orders-cancel", order_id=self.order.id), {}, format="json")
        self.assertEqual(again.status_code, 409)


class SeedStorefrontCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        out = StringIO()
        call_command("seed_storefront", "--with-users", stdout=out)
        call_command("seed_storefront", "--with-users", stdout=out)

        self.assertEqual(ShippingZone.objects.count(), 10)
        self.assertEqual(ShippingZone.objects.get(commune_key="ñuñoa").cost, 4000)
        self.assertEqual(Product.objects.count(), 3)
        self.assertEqual(PackVariant.objects.filter(product__sku="COF-CAPS-ESP").count(), 2)
        self.assertFalse(Product.objects.get(sku="COF-CAPS-ESP").allow_individual_sale)
