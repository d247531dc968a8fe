# catalog/services/pricing.py

"""
PRICING RESOLVER

Purpose:
- Turn (product, optional pack variant, quantity) into a priced cart/order line.

Hard rules:
- Integer money only (smallest currency unit); no floats, no Decimals.
- Individual sale uses product.price and consumes 1 base unit per item.
- Pack sale uses variant.price and consumes variant.units base units per item.
- Pure: no database writes.
"""

from __future__ import annotations

from dataclasses import dataclass

from catalog.models import PackVariant, Product
from catalog.services.exceptions import (
    InvalidSelectionError,
    PricingValidationError,
    VariantNotFoundError,
)


@dataclass(frozen=True)
class ResolvedLine:
    unit_price: int
    units_per_item: int
    effective_units: int
    line_total: int
    pack_variant: PackVariant | None = None


def _to_int_qty(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise PricingValidationError("quantity must be a whole number")
    if value < 1:
        raise PricingValidationError("quantity must be at least 1")
    return value


def _find_variant(*, product: Product, pack_variant_id) -> PackVariant:
    # Variants are usually prefetched; avoid a query per line when they are.
    for variant in product.pack_variants.all():
        if str(variant.id) == str(pack_variant_id) and variant.is_active:
            return variant
    raise VariantNotFoundError(
        f"Pack variant {pack_variant_id} is not available for {product.name}"
    )


def resolve_line(*, product: Product, pack_variant_id=None, quantity) -> ResolvedLine:
    qty = _to_int_qty(quantity)

    if not product.is_active:
        raise InvalidSelectionError(f"{product.name} is no longer available")

    if pack_variant_id is None:
        if not product.allow_individual_sale:
            raise InvalidSelectionError(
                f"{product.name} is only sold in packs; choose a pack variant"
            )
        unit_price = int(product.price)
        return ResolvedLine(
            unit_price=unit_price,
            units_per_item=1,
            effective_units=qty,
            line_total=unit_price * qty,
        )

    variant = _find_variant(product=product, pack_variant_id=pack_variant_id)
    unit_price = int(variant.price)
    units = int(variant.units)
    return ResolvedLine(
        unit_price=unit_price,
        units_per_item=units,
        effective_units=units * qty,
        line_total=unit_price * qty,
        pack_variant=variant,
    )


def available_packs(*, stock: int, units: int) -> int:
    """How many whole packs of `units` the current stock can still cover."""
    if units <= 0:
        return 0
    return max(int(stock), 0) // int(units)


def default_variant(product: Product) -> PackVariant | None:
    for variant in product.pack_variants.all():
        if variant.is_default and variant.is_active:
            return variant
    return None
