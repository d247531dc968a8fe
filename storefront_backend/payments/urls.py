"""
PATH: payments/urls.py

Mounted at /api/payments/:
- POST webhook/   signed gateway notifications
"""

from django.urls import path

from payments.views import PaymentWebhookView

app_name = "payments"

urlpatterns = [
    path("webhook/", PaymentWebhookView.as_view(), name="webhook"),
]
