# cart/models/__init__.py

from .cart_line import CartLine

__all__ = ["CartLine"]
