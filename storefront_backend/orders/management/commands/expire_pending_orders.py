# orders/management/commands/expire_pending_orders.py

from __future__ import annotations

from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from orders.services.expiry import expire_stale_orders, stale_pending_orders


class Command(BaseCommand):
    help = "Cancel PENDING orders whose payment window expired (releases their stock)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--older-than-minutes",
            type=int,
            default=None,
            help=(
                "Age threshold in minutes "
                "(default: settings.ORDER_PAYMENT_TIMEOUT_MINUTES)"
            ),
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List the orders that would expire without changing anything.",
        )

    def handle(self, *args, **options):
        minutes = options.get("older_than_minutes")
        if minutes is None:
            minutes = int(settings.ORDER_PAYMENT_TIMEOUT_MINUTES)
        if minutes < 1:
            raise CommandError("--older-than-minutes must be at least 1.")

        older_than = timedelta(minutes=minutes)

        if options.get("dry_run"):
            stale = list(stale_pending_orders(older_than=older_than))
            for order in stale:
                self.stdout.write(f"would expire: {order.order_no} ({order.created_at:%Y-%m-%d %H:%M})")
            self.stdout.write(self.style.WARNING(f"Dry run: {len(stale)} order(s) would expire."))
            return

        expired = expire_stale_orders(older_than=older_than)
        self.stdout.write(self.style.SUCCESS(f"Expired {expired} pending order(s)."))
