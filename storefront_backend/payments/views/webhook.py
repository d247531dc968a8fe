# payments/views/webhook.py

"""
======================================================
PATH: payments/views/webhook.py
======================================================
PAYMENT GATEWAY WEBHOOK (PUBLIC, SIGNED)

POST /api/payments/webhook/
Header: X-Gateway-Signature = hex(HMAC-SHA256(secret, raw body))

Responses:
- 200  processed / duplicate / recorded  (gateway stops redelivering)
- 400  MALFORMED_NOTIFICATION
- 401  INVALID_SIGNATURE  (nothing read beyond the signature)
- 404  UNKNOWN_ORDER
- 503  RETRY_LATER        (transient; gateway redelivers)

Reconciliation lives in orders.services.payment_webhook.
======================================================
"""

from __future__ import annotations

import logging

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework.views import APIView

from backend.responses import error_response
from orders.services.exceptions import (
    InvalidSignatureError,
    MalformedNotificationError,
    RetryableWebhookError,
    UnknownOrderError,
)
from orders.services.payment_webhook import ingest
from payments.services.gateway import SIGNATURE_HEADER

logger = logging.getLogger(__name__)


class WebhookThrottle(AnonRateThrottle):
    scope = "webhook"


WEBHOOK_ERRORS = (
    (InvalidSignatureError, "INVALID_SIGNATURE", status.HTTP_401_UNAUTHORIZED),
    (MalformedNotificationError, "MALFORMED_NOTIFICATION", status.HTTP_400_BAD_REQUEST),
    (UnknownOrderError, "UNKNOWN_ORDER", status.HTTP_404_NOT_FOUND),
    (RetryableWebhookError, "RETRY_LATER", status.HTTP_503_SERVICE_UNAVAILABLE),
)

HANDLED = tuple(exc_class for exc_class, _, _ in WEBHOOK_ERRORS)


class PaymentWebhookView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [WebhookThrottle]

    @extend_schema(
        request=None,
        responses={
            200: OpenApiResponse(description="Notification acknowledged"),
            400: OpenApiResponse(description="MALFORMED_NOTIFICATION"),
            401: OpenApiResponse(description="INVALID_SIGNATURE"),
            404: OpenApiResponse(description="UNKNOWN_ORDER"),
            503: OpenApiResponse(description="RETRY_LATER"),
        },
        description="Signed payment status notification from the gateway",
    )
    def post(self, request, *args, **kwargs):
        raw_body = request.body or b""
        signature = request.headers.get(SIGNATURE_HEADER)

        logger.info("Payment webhook received")

        try:
            ack = ingest(raw_body=raw_body, signature=signature)
        except HANDLED as exc:
            for exc_class, code, http_status in WEBHOOK_ERRORS:
                if isinstance(exc, exc_class):
                    return error_response(code=code, message=str(exc), http_status=http_status)
            raise

        return Response(
            {
                "ok": True,
                "detail": ack.outcome,
                "order_id": str(ack.order_id),
                "order_status": ack.order_status,
            },
            status=status.HTTP_200_OK,
        )
