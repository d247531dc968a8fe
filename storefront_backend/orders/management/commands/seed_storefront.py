# orders/management/commands/seed_storefront.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from catalog.models import PackVariant, Product
from shipping.models import ShippingZone

# Santiago metropolitan communes served by the store.
SHIPPING_ZONES = [
    ("Las Condes", 3500, 1),
    ("Providencia", 3500, 1),
    ("Vitacura", 3500, 1),
    ("Ñuñoa", 4000, 2),
    ("Santiago Centro", 4500, 2),
    ("La Reina", 4000, 2),
    ("Maipú", 5000, 3),
    ("Puente Alto", 5500, 3),
    ("San Bernardo", 5500, 3),
    ("Quilicura", 5000, 3),
]


@dataclass(frozen=True)
class SeedProductSpec:
    sku: str
    name: str
    price: int
    stock: int
    allow_individual_sale: bool = True
    packs: tuple = ()  # (name, units, price, is_default)


DEMO_PRODUCTS = [
    SeedProductSpec(
        sku="AUD-APP-PRO3",
        name="AirPods Pro (3rd generation)",
        price=289000,
        stock=50,
        packs=(("Pack of 3", 3, 750000, False),),
    ),
    SeedProductSpec(
        sku="PHN-IP15PM-256",
        name="iPhone 15 Pro Max 256GB",
        price=1299000,
        stock=25,
    ),
    SeedProductSpec(
        sku="COF-CAPS-ESP",
        name="Espresso capsules",
        price=450,
        stock=600,
        allow_individual_sale=False,
        packs=(
            ("Box of 10", 10, 4200, True),
            ("Box of 50", 50, 19500, False),
        ),
    ),
]


class Command(BaseCommand):
    help = "Seed shipping zones, demo catalog and (optionally) demo members. Idempotent."

    def add_arguments(self, parser):
        parser.add_argument(
            "--with-users",
            action="store_true",
            help="Also create admin@example.com and member@example.com.",
        )
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        zones_created = 0
        for commune, cost, days in SHIPPING_ZONES:
            _, created = ShippingZone.objects.update_or_create(
                commune_key=ShippingZone.key_for(commune),
                defaults={"commune": commune, "cost": cost, "delivery_days": days, "is_active": True},
            )
            zones_created += int(created)
        self.stdout.write(f"Shipping zones: {zones_created} created, {len(SHIPPING_ZONES)} total")

        for demo in DEMO_PRODUCTS:
            product, created = Product.objects.get_or_create(
                sku=demo.sku,
                defaults={
                    "name": demo.name,
                    "price": demo.price,
                    "stock": demo.stock,
                    "allow_individual_sale": demo.allow_individual_sale,
                },
            )
            for name, units, price, is_default in demo.packs:
                PackVariant.objects.get_or_create(
                    product=product,
                    name=name,
                    defaults={"units": units, "price": price, "is_default": is_default},
                )
            label = "created" if created else "exists "
            self.stdout.write(f"{label}: {demo.sku} ({demo.name})")

        if options.get("with_users"):
            self._seed_users(password=options.get("password") or "")

        self.stdout.write(self.style.SUCCESS("Storefront seed complete."))

    def _seed_users(self, *, password: str):
        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()
        for email, role in (("admin@example.com", User.ROLE_ADMIN), ("member@example.com", User.ROLE_CUSTOMER)):
            if User.objects.filter(email=email).exists():
                self.stdout.write(f"exists : {email}")
                continue
            User.objects.create_user(
                email=email,
                password=password,
                role=role,
                is_staff=role == User.ROLE_ADMIN,
            )
            self.stdout.write(f"created: {email} ({role})")
