# catalog/tests/test_pricing.py

from django.test import TestCase

from catalog.models import PackVariant, Product
from catalog.services.exceptions import (
    InvalidSelectionError,
    PricingValidationError,
    VariantNotFoundError,
)
from catalog.services.pricing import available_packs, default_variant, resolve_line


class PricingResolverTests(TestCase):
    """
    GUARANTEES:
    - Individual units use the product price and consume 1 base unit each
    - Packs use the variant price and consume `units` base units each
    - Invalid selections never produce a price
    """

    def setUp(self):
        self.product = Product.objects.create(
            sku="CBD-OIL-10",
            name="Aceite CBD 10%",
            price=289000,
            stock=50,
        )
        self.pack = PackVariant.objects.create(
            product=self.product,
            name="Pack of 3",
            units=3,
            price=750000,
            is_default=True,
        )
        self.other = Product.objects.create(
            sku="FLOR-5G",
            name="Flor 5g",
            price=40000,
            stock=10,
        )
        self.foreign_pack = PackVariant.objects.create(
            product=self.other,
            name="Pack of 2",
            units=2,
            price=75000,
        )

    def test_individual_line(self):
        line = resolve_line(product=self.product, pack_variant_id=None, quantity=2)

        self.assertEqual(line.unit_price, 289000)
        self.assertEqual(line.units_per_item, 1)
        self.assertEqual(line.effective_units, 2)
        self.assertEqual(line.line_total, 578000)
        self.assertIsNone(line.pack_variant)

    def test_pack_line_uses_variant_price_and_units(self):
        line = resolve_line(product=self.product, pack_variant_id=self.pack.id, quantity=2)

        self.assertEqual(line.unit_price, 750000)
        self.assertEqual(line.units_per_item, 3)
        self.assertEqual(line.effective_units, 6)
        self.assertEqual(line.line_total, 1500000)
        self.assertEqual(line.pack_variant, self.pack)

    def test_pack_id_may_be_a_string(self):
        line = resolve_line(product=self.product, pack_variant_id=str(self.pack.id), quantity=1)
        self.assertEqual(line.line_total, 750000)

    def test_quantity_must_be_positive_integer(self):
        for bad in (0, -1, 1.5, "2", None, True):
            with self.subTest(quantity=bad):
                with self.assertRaises(PricingValidationError):
                    resolve_line(product=self.product, pack_variant_id=None, quantity=bad)

    def test_pack_only_product_rejects_individual_sale(self):
        self.product.allow_individual_sale = False
        self.product.save(update_fields=["allow_individual_sale"])

        with self.assertRaises(InvalidSelectionError):
            resolve_line(product=self.product, pack_variant_id=None, quantity=1)

        line = resolve_line(product=self.product, pack_variant_id=self.pack.id, quantity=1)
        self.assertEqual(line.effective_units, 3)

    def test_inactive_product_is_rejected(self):
        self.product.is_active = False
        self.product.save(update_fields=["is_active"])

        with self.assertRaises(InvalidSelectionError):
            resolve_line(product=self.product, pack_variant_id=None, quantity=1)

    def test_variant_of_another_product_is_not_found(self):
        with self.assertRaises(VariantNotFoundError):
            resolve_line(product=self.product, pack_variant_id=self.foreign_pack.id, quantity=1)

    def test_inactive_variant_is_not_found(self):
        self.pack.is_active = False
        self.pack.save(update_fields=["is_active"])

        with self.assertRaises(VariantNotFoundError):
            resolve_line(product=self.product, pack_variant_id=self.pack.id, quantity=1)

    def test_available_packs_floors(self):
        self.assertEqual(available_packs(stock=50, units=3), 16)
        self.assertEqual(available_packs(stock=2, units=3), 0)
        self.assertEqual(available_packs(stock=9, units=3), 3)

    def test_default_variant(self):
        self.assertEqual(default_variant(self.product), self.pack)
        self.assertIsNone(default_variant(self.other))
