from .order import (
    AdminAdvanceInputSerializer,
    AdminCancelInputSerializer,
    CheckoutInputSerializer,
    CheckoutResultSerializer,
    OrderItemSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatusEventSerializer,
    PaymentRecordSerializer,
)

__all__ = [
    "CheckoutInputSerializer",
    "CheckoutResultSerializer",
    "OrderItemSerializer",
    "OrderStatusEventSerializer",
    "PaymentRecordSerializer",
    "OrderListSerializer",
    "OrderSerializer",
    "AdminAdvanceInputSerializer",
    "AdminCancelInputSerializer",
]
