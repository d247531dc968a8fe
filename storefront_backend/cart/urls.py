"""
PATH: cart/urls.py

CART URLS

Mounted at /api/cart/:
- GET    ""              priced snapshot
- POST   items/          add product / pack
- PATCH  items/set/      set quantity (0 removes)
- DELETE items/remove/   remove line
- DELETE clear/          empty the cart
"""

from django.urls import path

from cart.views import (
    AddCartItemView,
    CartView,
    ClearCartView,
    RemoveCartItemView,
    SetCartItemQuantityView,
)

app_name = "cart"

urlpatterns = [
    path("", CartView.as_view(), name="cart"),
    path("items/", AddCartItemView.as_view(), name="add-item"),
    path("items/set/", SetCartItemQuantityView.as_view(), name="set-item"),
    path("items/remove/", RemoveCartItemView.as_view(), name="remove-item"),
    path("clear/", ClearCartView.as_view(), name="clear"),
]
