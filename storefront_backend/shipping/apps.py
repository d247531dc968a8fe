# shipping/apps.py

"""
SHIPPING APP CONFIG

- Commune shipping rate table (flat cost + delivery days per commune)
- Member delivery addresses (commune source for checkout)
"""

from django.apps import AppConfig


class ShippingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "shipping"
    verbose_name = "Shipping"
