from .checkout import CheckoutView, RetryPaymentView
from .member import OrderDetailView, OrderListView

__all__ = [
    "CheckoutView",
    "RetryPaymentView",
    "OrderListView",
    "OrderDetailView",
]
