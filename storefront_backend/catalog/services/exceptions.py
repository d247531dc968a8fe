# catalog/services/exceptions.py

"""
CATALOG SERVICE ERRORS

Centralized domain errors for pricing resolution and the stock ledger.
"""


class CatalogError(Exception):
    """Base exception for all catalog service failures."""


class PricingValidationError(CatalogError):
    """Raised when a requested quantity is not a whole number >= 1."""


class InvalidSelectionError(CatalogError):
    """Raised when a product cannot be bought the way it was selected."""


class VariantNotFoundError(CatalogError):
    """Raised when a pack variant does not belong to the product or is inactive."""


class InsufficientStockError(CatalogError):
    """Raised when available base units cannot cover a demand."""

    def __init__(self, *, product_id, requested: int, available: int, product_name: str = ""):
        self.product_id = product_id
        self.requested = int(requested)
        self.available = int(available)
        self.product_name = product_name

        label = product_name or str(product_id)
        super().__init__(
            f"Insufficient stock for {label}. "
            f"Available: {self.available}, Requested: {self.requested}"
        )


class ProductNotFoundError(InvalidSelectionError):
    """Raised when a product id does not exist."""
