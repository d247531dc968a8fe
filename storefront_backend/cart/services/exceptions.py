# cart/services/exceptions.py

"""
CART SERVICE ERRORS
"""


class CartError(Exception):
    """Base exception for cart failures."""


class CartValidationError(CartError):
    """Raised on a non-integer or out-of-range quantity."""
