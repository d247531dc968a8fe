# catalog/services/stock_ledger.py

"""
STOCK LEDGER

Purpose:
- Reserve base units at checkout; release them when an order is cancelled
  or expires.

Concurrency model:
- reserve() is a single conditional UPDATE (stock = stock - n WHERE stock >= n),
  i.e. compare-and-swap at the database. Two reservations that together
  exceed stock cannot both succeed, on any backend.
- release() first CLAIMS the token (released_at IS NULL -> now). Only the
  claimant restores stock, so a token is released at most once.

Invariant:
- Product.stock + sum(held reservations) == stock before checkout activity.
- Product.stock never goes negative.
"""

from __future__ import annotations

import logging
import uuid

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from catalog.models import Product, StockReservation
from catalog.services.exceptions import InsufficientStockError

logger = logging.getLogger(__name__)


def _to_base_units(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError("base_units must be a whole number >= 1")
    return value


def _token_id(token):
    if isinstance(token, StockReservation):
        return token.pk
    try:
        return uuid.UUID(str(token))
    except (TypeError, ValueError, AttributeError):
        return None


@transaction.atomic
def reserve(*, product_id, base_units) -> StockReservation:
    n = _to_base_units(base_units)

    updated = Product.objects.filter(pk=product_id, stock__gte=n).update(
        stock=F("stock") - n,
        updated_at=timezone.now(),
    )
    if not updated:
        row = Product.objects.filter(pk=product_id).values("stock", "name").first() or {}
        logger.info(
            "Stock reservation refused",
            extra={"product_id": str(product_id), "requested": n, "available": row.get("stock", 0)},
        )
        raise InsufficientStockError(
            product_id=product_id,
            requested=n,
            available=row.get("stock", 0),
            product_name=row.get("name", ""),
        )

    reservation = StockReservation.objects.create(product_id=product_id, quantity=n)
    logger.info(
        "Stock reserved",
        extra={"product_id": str(product_id), "quantity": n, "reservation_id": str(reservation.id)},
    )
    return reservation


def release(token) -> bool:
    """
    Return a reservation's units to stock.

    Idempotent: releasing twice, or an unknown/malformed token, is a no-op
    that returns False.
    """
    token_id = _token_id(token)
    if token_id is None:
        return False

    with transaction.atomic():
        claimed = StockReservation.objects.filter(
            pk=token_id,
            released_at__isnull=True,
        ).update(released_at=timezone.now())
        if not claimed:
            return False

        row = StockReservation.objects.values("product_id", "quantity").get(pk=token_id)
        Product.objects.filter(pk=row["product_id"]).update(
            stock=F("stock") + row["quantity"],
            updated_at=timezone.now(),
        )

    logger.info(
        "Stock released",
        extra={"reservation_id": str(token_id), "product_id": str(row["product_id"]), "quantity": row["quantity"]},
    )
    return True


def reserve_many(*, demands: dict) -> list[StockReservation]:
    """
    Reserve {product_id: base_units} all-or-nothing.

    Products are taken in ascending id order. On the first failure every
    token already taken in this call is released and the error re-raised.
    """
    taken: list[StockReservation] = []
    for product_id in sorted(demands, key=str):
        try:
            taken.append(reserve(product_id=product_id, base_units=demands[product_id]))
        except InsufficientStockError:
            for token in taken:
                release(token)
            raise
    return taken


def attach_to_order(*, tokens, order) -> int:
    ids = [t.pk for t in tokens]
    return StockReservation.objects.filter(pk__in=ids, order__isnull=True).update(order=order)


def release_for_order(*, order) -> int:
    held = StockReservation.objects.filter(order=order, released_at__isnull=True).values_list("pk", flat=True)
    released = 0
    for token_id in list(held):
        if release(token_id):
            released += 1
    return released


def available(*, product_id) -> int:
    stock = Product.objects.filter(pk=product_id).values_list("stock", flat=True).first()
    return int(stock or 0)


def held_units(*, product_id) -> int:
    total = 0
    for qty in StockReservation.objects.filter(
        product_id=product_id, released_at__isnull=True
    ).values_list("quantity", flat=True):
        total += qty
    return total
