# payments/apps.py

"""
PAYMENTS APP CONFIG

Payment gateway integration:
- outbound payment intents (HTTPS JSON, order id as idempotency key)
- inbound status notifications (HMAC-SHA256 signed webhook)

Reconciliation logic lives in orders.services.payment_webhook.
"""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payment Gateway"
