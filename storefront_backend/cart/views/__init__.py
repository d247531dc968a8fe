from .api import (
    AddCartItemView,
    CartView,
    ClearCartView,
    RemoveCartItemView,
    SetCartItemQuantityView,
)

__all__ = [
    "CartView",
    "AddCartItemView",
    "SetCartItemQuantityView",
    "RemoveCartItemView",
    "ClearCartView",
]
