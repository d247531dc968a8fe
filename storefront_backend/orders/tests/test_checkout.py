# orders/tests/test_checkout.py

"""
CHECKOUT ORCHESTRATOR TESTS

Run with:
    python manage.py test orders -v 2
"""

from __future__ import annotations

import uuid

from django.test import SimpleTestCase, TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from cart.models import CartLine
from catalog.models import Product, StockReservation
from catalog.services.exceptions import InsufficientStockError, ProductNotFoundError, VariantNotFoundError
from orders.models import Order, OrderItem, OrderStatus, OrderStatusEvent, PaymentRecord
from orders.services.checkout_orchestrator import checkout, retry_payment_intent
from orders.services.exceptions import EmptyCartError, OrderNotPayableError, PaymentGatewayError
from orders.services.order_lifecycle import mark_paid
from orders.tests.helpers import (
    fill_cart,
    intent_for,
    make_address,
    make_catalog,
    make_member,
    patch_gateway,
)
from orders.views.checkout import checkout_error_response
from payments.services.exceptions import GatewayRequestError
from shipping.services.exceptions import AddressNotFoundError, UnknownShippingZoneError


# ============================================================
# SERVICE
# ============================================================


class CheckoutServiceTests(TestCase):
    """
    GUARANTEES:
    - Totals are server-computed: subtotal + commune shipping
    - Stock is reserved in base units before the order exists
    - Any failure before the gateway call leaves no order and no reservation
    """

    def setUp(self):
        self.user = make_member()
        self.product, self.pack = make_catalog(stock=50)
        self.address = make_address(self.user)

    def _stock(self):
        return Product.objects.get(pk=self.product.pk).stock

    def test_happy_path_creates_pending_order_and_reserves_stock(self):
        fill_cart(self.user, self.product, self.pack)

        with patch_gateway() as gw:
            result = checkout(user=self.user, address_id=self.address.id)

        order = result.order
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.subtotal, 1039000)
        self.assertEqual(order.shipping_cost, 3500)
        self.assertEqual(order.total, 1042500)
        self.assertEqual(order.shipping_commune, "Las Condes")
        self.assertEqual(self._stock(), 46)

        self.assertTrue(order.order_no.startswith("ORD"))
        self.assertEqual(order.external_payment_reference, f"pi_{order.id}")
        self.assertEqual(result.redirect_url, f"https://gateway.test/pay/{order.id}")

        gw.assert_called_once()
        self.assertEqual(gw.call_args.kwargs["amount"], 1042500)
        self.assertEqual(gw.call_args.kwargs["order_id"], order.id)

        items = list(OrderItem.objects.filter(order=order).order_by("position"))
        self.assertEqual([i.base_units for i in items], [1, 3])
        self.assertEqual(items[1].pack_variant_name, "Pack of 3")

        held = StockReservation.objects.filter(order=order, released_at__isnull=True)
        self.assertEqual(sum(r.quantity for r in held), 4)

        self.assertFalse(CartLine.objects.filter(user=self.user).exists())

        event = OrderStatusEvent.objects.get(order=order)
        self.assertEqual((event.from_status, event.to_status, event.actor), ("", "PENDING", "customer"))

        intent = PaymentRecord.objects.get(order=order)
        self.assertEqual(intent.status, "pending")
        self.assertIsNone(intent.transaction_id)
        self.assertEqual(intent.external_reference, order.external_payment_reference)

    def test_insufficient_stock_creates_nothing(self):
        Product.objects.filter(pk=self.product.pk).update(stock=2)
        CartLine.objects.create(user=self.user, product=self.product, pack_variant=self.pack, quantity=1)

        with patch_gateway() as gw:
            with self.assertRaises(InsufficientStockError):
                checkout(user=self.user, address_id=self.address.id)

        gw.assert_not_called()
        self.assertEqual(self._stock(), 2)
        self.assertFalse(Order.objects.exists())
        self.assertFalse(StockReservation.objects.exists())
        self.assertEqual(CartLine.objects.filter(user=self.user).count(), 1)

    def test_empty_cart_is_refused(self):
        with self.assertRaises(EmptyCartError):
            checkout(user=self.user, address_id=self.address.id)
        self.assertFalse(Order.objects.exists())

    def test_unknown_commune_reserves_nothing(self):
        fill_cart(self.user, self.product, self.pack)
        address = make_address(self.user, commune="Valparaíso")

        with self.assertRaises(UnknownShippingZoneError):
            checkout(user=self.user, address_id=address.id)

        self.assertEqual(self._stock(), 50)
        self.assertFalse(Order.objects.exists())
        self.assertEqual(CartLine.objects.filter(user=self.user).count(), 2)

    def test_foreign_address_is_not_found(self):
        fill_cart(self.user, self.product, self.pack)
        other = make_member(email="other@example.com")
        foreign = make_address(other)

        with self.assertRaises(AddressNotFoundError):
            checkout(user=self.user, address_id=foreign.id)
        self.assertEqual(self._stock(), 50)

    def test_item_prices_are_frozen_at_checkout(self):
        fill_cart(self.user, self.product, self.pack)
        with patch_gateway():
            order = checkout(user=self.user, address_id=self.address.id).order

        Product.objects.filter(pk=self.product.pk).update(price=999999)
        self.pack.price = 1
        self.pack.save(update_fields=["price"])

        order.refresh_from_db()
        prices = list(order.items.order_by("position").values_list("unit_price", flat=True))
        self.assertEqual(prices, [289000, 750000])
        self.assertEqual(order.total, 1042500)

    def test_gateway_failure_keeps_pending_order_and_retry_recovers(self):
        fill_cart(self.user, self.product, self.pack)

        with patch_gateway(side_effect=GatewayRequestError("gateway down", status_code=503)):
            with self.assertRaises(PaymentGatewayError) as ctx:
                checkout(user=self.user, address_id=self.address.id)

        order = ctx.exception.order
        self.assertIsNotNone(order)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.external_payment_reference, "")
        self.assertEqual(self._stock(), 46)
        self.assertEqual(Order.objects.count(), 1)

        with patch_gateway(return_value=intent_for("retry")) as gw:
            result = retry_payment_intent(order=order)
            again = retry_payment_intent(order=order)

        gw.assert_called_once()
        self.assertEqual(result.order.external_payment_reference, "pi_retry")
        self.assertEqual(again.redirect_url, result.redirect_url)
        self.assertEqual(self._stock(), 46)
        self.assertEqual(Order.objects.count(), 1)

    def test_retry_refused_for_non_pending_order(self):
        fill_cart(self.user, self.product, self.pack)
        with patch_gateway():
            order = checkout(user=self.user, address_id=self.address.id).order
        mark_paid(order=order)

        with self.assertRaises(OrderNotPayableError):
            retry_payment_intent(order=order)


# ============================================================
# API
# ============================================================


class CheckoutApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_member()
        self.client.force_authenticate(user=self.user)
        self.product, self.pack = make_catalog(stock=50)
        self.address = make_address(self.user)
        self.url = reverse("orders:checkout")

    def test_requires_authentication(self):
        response = APIClient().post(self.url, {"address_id": str(self.address.id)}, format="json")
        self.assertEqual(response.status_code, 401)

    def test_checkout_returns_created_order_summary(self):
        fill_cart(self.user, self.product, self.pack)

        with patch_gateway():
            response = self.client.post(self.url, {"address_id": str(self.address.id)}, format="json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["status"], "PENDING")
        self.assertEqual(response.data["total"], 1042500)
        self.assertEqual(response.data["currency"], "CLP")
        self.assertTrue(response.data["redirect_url"].startswith("https://gateway.test/pay/"))

    def test_error_codes(self):
        response = self.client.post(self.url, {"address_id": str(self.address.id)}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "EMPTY_CART")

        fill_cart(self.user, self.product, self.pack)

        response = self.client.post(self.url, {"address_id": str(uuid.uuid4())}, format="json")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["error"]["code"], "ADDRESS_NOT_FOUND")

        Product.objects.filter(pk=self.product.pk).update(stock=3)
        response = self.client.post(self.url, {"address_id": str(self.address.id)}, format="json")
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"]["code"], "INSUFFICIENT_STOCK")

    def test_gateway_failure_returns_502_with_order_reference(self):
        fill_cart(self.user, self.product, self.pack)

        with patch_gateway(side_effect=GatewayRequestError("timeout")):
            response = self.client.post(self.url, {"address_id": str(self.address.id)}, format="json")

        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.data["error"]["code"], "PAYMENT_PROVIDER_ERROR")
        order = Order.objects.get()
        self.assertEqual(response.data["error"]["order_id"], str(order.id))

        retry_url = reverse("orders:payment-retry", kwargs={"order_id": order.id})
        with patch_gateway():
            response = self.client.post(retry_url, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["order_id"], str(order.id))

    def test_member_sees_only_own_orders(self):
        fill_cart(self.user, self.product, self.pack)
        with patch_gateway():
            order = checkout(user=self.user, address_id=self.address.id).order

        response = self.client.get(reverse("orders:order-list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["item_count"], 2)

        detail = self.client.get(reverse("orders:order-detail", kwargs={"order_id": order.id}))
        self.assertEqual(detail.status_code, 200)
        self.assertEqual(len(detail.data["items"]), 2)
        self.assertIsNone(detail.data["payment_records"])

        stranger = APIClient()
        stranger.force_authenticate(user=make_member(email="stranger@example.com"))
        response = stranger.get(reverse("orders:order-detail", kwargs={"order_id": order.id}))
        self.assertEqual(response.status_code, 404)


class CheckoutErrorMappingTests(SimpleTestCase):
    def test_variant_not_found_maps_to_404(self):
        response = checkout_error_response(VariantNotFoundError("pack 9 is not sold"))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(
            response.data,
            {"error": {"code": "VARIANT_NOT_FOUND", "message": "pack 9 is not sold"}},
        )

    def test_missing_product_falls_back_to_invalid_selection(self):
        response = checkout_error_response(ProductNotFoundError("no such product"))

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"]["code"], "INVALID_SELECTION")

    def test_unmapped_errors_propagate(self):
        with self.assertRaises(KeyError):
            checkout_error_response(KeyError("boom"))
