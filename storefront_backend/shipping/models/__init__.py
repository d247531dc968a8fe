# shipping/models/__init__.py

from .address import Address
from .shipping_zone import ShippingZone, normalize_commune

__all__ = [
    "Address",
    "ShippingZone",
    "normalize_commune",
]
