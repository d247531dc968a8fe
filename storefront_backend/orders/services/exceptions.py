# orders/services/exceptions.py

"""
ORDER SERVICE ERRORS

Centralized domain errors for checkout, lifecycle and payment reconciliation.
"""


class OrderError(Exception):
    """Base exception for all order service failures."""


# ============================================================
# CHECKOUT
# ============================================================


class EmptyCartError(OrderError):
    """Raised when checkout is attempted with no cart lines."""


class OrderNotPayableError(OrderError):
    """Raised when a payment intent is requested for a non-PENDING order."""


class PaymentGatewayError(OrderError):
    """
    Raised when the payment intent could not be created.

    The order (PENDING, stock still reserved) is carried so the caller can
    offer a retry for the same order.
    """

    def __init__(self, message: str, *, order=None):
        self.order = order
        super().__init__(message)


# ============================================================
# LIFECYCLE
# ============================================================


class InvalidTransitionError(OrderError):
    def __init__(self, *, order_id, from_status: str, to_status: str, actor: str):
        self.order_id = order_id
        self.from_status = from_status
        self.to_status = to_status
        self.actor = actor
        super().__init__(
            f"Order {order_id} cannot transition from '{from_status}' "
            f"to '{to_status}' (actor: {actor})"
        )


# ============================================================
# WEBHOOK
# ============================================================


class WebhookError(OrderError):
    """Base exception for payment notification failures."""


class InvalidSignatureError(WebhookError):
    """Raised when the notification signature does not verify (no side effects)."""


class MalformedNotificationError(WebhookError):
    """Raised when the payload is not valid JSON or misses required fields."""


class UnknownOrderError(WebhookError):
    """Raised when the external reference does not match any order."""


class RetryableWebhookError(WebhookError):
    """Transient failure (database); the gateway should redeliver."""
