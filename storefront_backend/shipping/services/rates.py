# shipping/services/rates.py

"""
SHIPPING RATE TABLE

Purpose:
- Commune -> (cost, delivery days), read-only at checkout time.

Rules:
- Case-insensitive commune lookup.
- Unknown or inactive commune is a hard failure (UnknownShippingZoneError);
  we never guess a default cost.
"""

from __future__ import annotations

from dataclasses import dataclass

from django.core.exceptions import ValidationError

from shipping.models import Address, ShippingZone, normalize_commune
from shipping.services.exceptions import AddressNotFoundError, UnknownShippingZoneError


@dataclass(frozen=True)
class ShippingQuote:
    commune: str
    cost: int
    delivery_days: int


def quote_for_commune(*, commune) -> ShippingQuote:
    name = normalize_commune(commune)
    zone = (
        ShippingZone.objects.filter(commune_key=ShippingZone.key_for(name), is_active=True)
        .only("commune", "cost", "delivery_days")
        .first()
    )
    if zone is None:
        raise UnknownShippingZoneError(name)

    return ShippingQuote(
        commune=zone.commune,
        cost=int(zone.cost),
        delivery_days=int(zone.delivery_days),
    )


def cost_for_commune(*, commune) -> int:
    return quote_for_commune(commune=commune).cost


def address_for_user(*, user, address_id) -> Address:
    try:
        return Address.objects.get(pk=address_id, user=user)
    except (Address.DoesNotExist, ValidationError, ValueError, TypeError) as exc:
        raise AddressNotFoundError(f"Address {address_id} not found") from exc


def quote_for_address(*, user, address_id) -> tuple[Address, ShippingQuote]:
    address = address_for_user(user=user, address_id=address_id)
    return address, quote_for_commune(commune=address.commune)
