# orders/models/__init__.py

"""
ORDERS MODELS PACKAGE EXPORTS

Purpose:
- Central export surface for orders app models.
"""

from .order import Order, OrderStatus
from .order_item import OrderItem
from .order_status_event import OrderStatusEvent, TransitionActor
from .payment_record import PaymentRecord, PaymentStatus
from .refund_obligation import RefundObligation

__all__ = [
    "Order",
    "OrderStatus",
    "OrderItem",
    "OrderStatusEvent",
    "TransitionActor",
    "PaymentRecord",
    "PaymentStatus",
    "RefundObligation",
]
