# cart/services/cart.py

"""
CART SERVICE (SERVER-OWNED, PER MEMBER)

Purpose:
- Add / set / remove / clear lines of the member's cart.
- Produce a priced snapshot (server-side pricing; the client never sends prices).

Rules:
- Quantities are whole numbers. Negative or non-integer -> CartValidationError.
- set_quantity(0) removes the line; add_to_cart requires >= 1.
- Stock check here is ADVISORY (base units vs current Product.stock across all
  of the member's lines for that product). The authoritative check is the
  reservation at checkout.
- Same product + variant increments the existing line.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from cart.models import CartLine
from cart.services.exceptions import CartValidationError
from catalog.models import PackVariant, Product
from catalog.services.exceptions import InsufficientStockError, ProductNotFoundError
from catalog.services.pricing import resolve_line

logger = logging.getLogger(__name__)


# ============================================================
# SNAPSHOT TYPES
# ============================================================


@dataclass(frozen=True)
class PricedCartLine:
    line_id: object
    product: Product
    pack_variant: PackVariant | None
    quantity: int
    unit_price: int
    units_per_item: int
    effective_units: int
    line_total: int


@dataclass(frozen=True)
class CartSnapshot:
    lines: tuple
    subtotal: int
    item_count: int

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def base_unit_demand(self) -> dict:
        """{product_id: base units} across every line."""
        demand: dict = {}
        for line in self.lines:
            demand[line.product.id] = demand.get(line.product.id, 0) + line.effective_units
        return demand


# ============================================================
# HELPERS
# ============================================================


def _to_int_qty(value, *, allow_zero: bool) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CartValidationError("quantity must be a whole number")
    if value < 0:
        raise CartValidationError("quantity cannot be negative")
    if value == 0 and not allow_zero:
        raise CartValidationError("quantity must be at least 1")
    return value


def _get_product(product_id) -> Product:
    try:
        product = Product.objects.prefetch_related("pack_variants").filter(pk=product_id).first()
    except (ValidationError, ValueError, TypeError):
        product = None
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


def _lines_for(user):
    return CartLine.objects.filter(user=user).select_related("pack_variant")


def _advisory_stock_check(*, user, product: Product, resolved, exclude_line_id=None) -> None:
    other_units = 0
    for other in _lines_for(user).filter(product=product):
        if exclude_line_id is not None and other.pk == exclude_line_id:
            continue
        other_units += int(other.quantity) * other.units_per_item

    requested = other_units + resolved.effective_units
    if requested > int(product.stock):
        raise InsufficientStockError(
            product_id=product.id,
            requested=requested,
            available=product.stock,
            product_name=product.name,
        )


def _find_line(*, user, product, pack_variant):
    return (
        CartLine.objects.select_for_update()
        .filter(user=user, product=product, pack_variant=pack_variant)
        .first()
    )


# ============================================================
# OPERATIONS
# ============================================================


@transaction.atomic
def add_to_cart(*, user, product_id, pack_variant_id=None, quantity) -> CartSnapshot:
    qty = _to_int_qty(quantity, allow_zero=False)
    product = _get_product(product_id)

    # Validates the selection (inactive product, pack-only, foreign variant).
    variant = resolve_line(product=product, pack_variant_id=pack_variant_id, quantity=qty).pack_variant

    line = _find_line(user=user, product=product, pack_variant=variant)
    new_qty = qty + (int(line.quantity) if line else 0)

    resolved = resolve_line(product=product, pack_variant_id=pack_variant_id, quantity=new_qty)
    _advisory_stock_check(
        user=user,
        product=product,
        resolved=resolved,
        exclude_line_id=line.pk if line else None,
    )

    if line:
        line.quantity = new_qty
        line.save(update_fields=["quantity", "updated_at"])
    else:
        try:
            with transaction.atomic():
                CartLine.objects.create(user=user, product=product, pack_variant=variant, quantity=qty)
        except IntegrityError:
            # A concurrent request created the same line first; add on top of it.
            line = _find_line(user=user, product=product, pack_variant=variant)
            line.quantity = int(line.quantity) + qty
            line.save(update_fields=["quantity", "updated_at"])

    logger.info(
        "Cart line added",
        extra={"user_id": str(user.pk), "product_id": str(product.id), "quantity": new_qty},
    )
    return cart_snapshot(user=user)


@transaction.atomic
def set_quantity(*, user, product_id, pack_variant_id=None, quantity) -> CartSnapshot:
    qty = _to_int_qty(quantity, allow_zero=True)
    if qty == 0:
        return remove_from_cart(user=user, product_id=product_id, pack_variant_id=pack_variant_id)

    product = _get_product(product_id)
    resolved = resolve_line(product=product, pack_variant_id=pack_variant_id, quantity=qty)

    line = _find_line(user=user, product=product, pack_variant=resolved.pack_variant)
    _advisory_stock_check(
        user=user,
        product=product,
        resolved=resolved,
        exclude_line_id=line.pk if line else None,
    )

    if line:
        line.quantity = qty
        line.save(update_fields=["quantity", "updated_at"])
    else:
        CartLine.objects.create(
            user=user,
            product=product,
            pack_variant=resolved.pack_variant,
            quantity=qty,
        )

    return cart_snapshot(user=user)


@transaction.atomic
def remove_from_cart(*, user, product_id, pack_variant_id=None) -> CartSnapshot:
    try:
        qs = CartLine.objects.filter(user=user, product_id=product_id)
        if pack_variant_id is None:
            qs = qs.filter(pack_variant__isnull=True)
        else:
            qs = qs.filter(pack_variant_id=pack_variant_id)
        qs.delete()
    except ValidationError as exc:
        raise CartValidationError("Invalid product or pack variant id") from exc

    return cart_snapshot(user=user)


def clear_cart(*, user) -> int:
    deleted, _ = CartLine.objects.filter(user=user).delete()
    return deleted


def cart_snapshot(*, user, lock: bool = False) -> CartSnapshot:
    """
    Priced view of the cart, ordered by line creation.

    lock=True takes row locks on the member's lines (must run inside
    transaction.atomic); checkout uses it so the lines cannot change
    underneath the reservation.
    """
    qs = _lines_for(user).select_related("product").prefetch_related("product__pack_variants")
    if lock:
        qs = qs.select_for_update(of=("self",))

    lines = []
    subtotal = 0
    item_count = 0
    for line in qs.order_by("created_at", "id"):
        resolved = resolve_line(
            product=line.product,
            pack_variant_id=line.pack_variant_id,
            quantity=int(line.quantity),
        )
        lines.append(
            PricedCartLine(
                line_id=line.pk,
                product=line.product,
                pack_variant=resolved.pack_variant,
                quantity=int(line.quantity),
                unit_price=resolved.unit_price,
                units_per_item=resolved.units_per_item,
                effective_units=resolved.effective_units,
                line_total=resolved.line_total,
            )
        )
        subtotal += resolved.line_total
        item_count += int(line.quantity)

    return CartSnapshot(lines=tuple(lines), subtotal=subtotal, item_count=item_count)
