# catalog/models/__init__.py

"""
CATALOG MODELS PACKAGE EXPORTS
"""

from .pack_variant import PackVariant
from .product import Product
from .stock_reservation import StockReservation

__all__ = [
    "Product",
    "PackVariant",
    "StockReservation",
]
