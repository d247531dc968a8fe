# orders/tests/helpers.py

"""
Shared fixtures for order tests.

Catalog mirrors the reference scenario:
- Product A: 289000 per unit, stock 50
- "Pack of 3": 750000, 3 units
- Las Condes shipping: 3500
"""

from __future__ import annotations

import json
from unittest.mock import patch

from django.contrib.auth import get_user_model

from cart.services.cart import add_to_cart
from catalog.models import PackVariant, Product
from payments.services.gateway import GatewayIntent, sign_payload
from shipping.models import Address, ShippingZone

User = get_user_model()

WEBHOOK_SETTINGS = {
    "GATEWAY": {
        "BASE_URL": "https://gateway.test",
        "API_KEY": "test-key",
        "WEBHOOK_SECRET": "test-webhook-secret",
        "RETURN_URL": "https://shop.test/return",
        "TIMEOUT_SECONDS": 5,
    }
}


def make_member(email="member@example.com", role="customer"):
    return User.objects.create_user(email=email, password="pass1234", role=role)


def make_catalog(*, stock=50):
    product = Product.objects.create(sku="A", name="Product A", price=289000, stock=stock)
    pack = PackVariant.objects.create(product=product, name="Pack of 3", units=3, price=750000)
    return product, pack


def make_address(user, commune="Las Condes"):
    ShippingZone.objects.get_or_create(
        commune_key=ShippingZone.key_for("Las Condes"),
        defaults={"commune": "Las Condes", "cost": 3500, "delivery_days": 1},
    )
    return Address.objects.create(user=user, street="Av. Apoquindo 3000", commune=commune)


def fill_cart(user, product, pack):
    add_to_cart(user=user, product_id=product.id, quantity=1)
    add_to_cart(user=user, product_id=product.id, pack_variant_id=pack.id, quantity=1)


def intent_for(order_id="pi_test"):
    return GatewayIntent(
        external_reference=f"pi_{order_id}",
        redirect_url=f"https://gateway.test/pay/{order_id}",
    )


def patch_gateway(**kwargs):
    if not kwargs:
        kwargs = {"side_effect": lambda **kw: intent_for(kw["order_id"])}
    return patch("payments.services.gateway.create_intent", **kwargs)


def notification(order, *, transaction_id="tx-1", status="approved", amount=None, **extra):
    payload = {
        "external_reference": str(order.id),
        "transaction_id": transaction_id,
        "status": status,
        "amount": order.total if amount is None else amount,
    }
    payload.update(extra)
    return json.dumps(payload).encode("utf-8")


def signed(raw_body: bytes) -> str:
    """Must run under override_settings(PAYMENTS=WEBHOOK_SETTINGS)."""
    return sign_payload(raw_body)
