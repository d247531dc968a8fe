from .cart import (
    AddCartItemInputSerializer,
    CartLineSerializer,
    CartSnapshotSerializer,
    RemoveCartItemInputSerializer,
    SetCartItemQuantityInputSerializer,
)

__all__ = [
    "AddCartItemInputSerializer",
    "SetCartItemQuantityInputSerializer",
    "RemoveCartItemInputSerializer",
    "CartLineSerializer",
    "CartSnapshotSerializer",
]
