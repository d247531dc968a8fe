# shipping/services/exceptions.py

"""
SHIPPING SERVICE ERRORS
"""


class ShippingError(Exception):
    """Base exception for shipping failures."""


class UnknownShippingZoneError(ShippingError):
    """Raised when no active rate exists for a commune (no silent default cost)."""

    def __init__(self, commune: str):
        self.commune = commune
        super().__init__(f"No shipping rate configured for commune '{commune}'")


class AddressNotFoundError(ShippingError):
    """Raised when an address does not exist or belongs to another member."""
