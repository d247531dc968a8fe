# orders/apps.py

"""
ORDERS APP CONFIG

Commerce transaction core:
- checkout orchestration (reserve stock -> pending order -> payment intent)
- payment webhook reconciliation (idempotent)
- order lifecycle state machine + audit trail
- refund obligations (signalled, never executed here)
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "orders"
    verbose_name = "Orders"
