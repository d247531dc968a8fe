from .webhook import PaymentWebhookView

__all__ = ["PaymentWebhookView"]
