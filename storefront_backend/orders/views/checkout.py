# orders/views/checkout.py

"""
======================================================
PATH: orders/views/checkout.py
======================================================
MEMBER CHECKOUT

POST /api/orders/checkout/
- Cart (server-owned) -> PENDING order with stock reserved -> payment intent.
- Response carries the redirect URL the member is sent to.

POST /api/orders/<uuid>/payment/retry/
- Re-request the intent for a PENDING order whose gateway call failed.

Error contract ({"error": {"code", "message"}}):
- EMPTY_CART              400
- INVALID_SELECTION       400   (product inactive / pack-only)
- UNKNOWN_SHIPPING_ZONE   400
- ADDRESS_NOT_FOUND       404
- VARIANT_NOT_FOUND       404
- INSUFFICIENT_STOCK      409   (nothing reserved, cart untouched)
- ORDER_NOT_PAYABLE       409
- PAYMENT_PROVIDER_ERROR  502   (order stays PENDING; order_id included)
======================================================
"""

from __future__ import annotations

from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from backend.responses import error_response
from catalog.services.exceptions import (
    InsufficientStockError,
    InvalidSelectionError,
    VariantNotFoundError,
)
from orders.models import Order
from orders.serializers import CheckoutInputSerializer, CheckoutResultSerializer
from orders.services.checkout_orchestrator import checkout, retry_payment_intent
from orders.services.exceptions import EmptyCartError, OrderNotPayableError, PaymentGatewayError
from shipping.services.exceptions import AddressNotFoundError, UnknownShippingZoneError
from users.permissions import IsMember


class CheckoutThrottle(UserRateThrottle):
    scope = "checkout"


# First match wins; ProductNotFoundError (an InvalidSelectionError) maps to INVALID_SELECTION.
CHECKOUT_ERRORS = (
    (EmptyCartError, "EMPTY_CART", status.HTTP_400_BAD_REQUEST),
    (AddressNotFoundError, "ADDRESS_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (UnknownShippingZoneError, "UNKNOWN_SHIPPING_ZONE", status.HTTP_400_BAD_REQUEST),
    (InsufficientStockError, "INSUFFICIENT_STOCK", status.HTTP_409_CONFLICT),
    (VariantNotFoundError, "VARIANT_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (InvalidSelectionError, "INVALID_SELECTION", status.HTTP_400_BAD_REQUEST),
    (OrderNotPayableError, "ORDER_NOT_PAYABLE", status.HTTP_409_CONFLICT),
)

HANDLED = tuple(exc_class for exc_class, _, _ in CHECKOUT_ERRORS)


def checkout_error_response(exc: Exception):
    if isinstance(exc, PaymentGatewayError):
        order = exc.order
        return error_response(
            code="PAYMENT_PROVIDER_ERROR",
            message=str(exc),
            http_status=status.HTTP_502_BAD_GATEWAY,
            order_id=str(order.id) if order else None,
            order_no=order.order_no if order else None,
        )
    for exc_class, code, http_status in CHECKOUT_ERRORS:
        if isinstance(exc, exc_class):
            return error_response(code=code, message=str(exc), http_status=http_status)
    raise exc


CHECKOUT_ERROR_RESPONSES = {
    400: OpenApiResponse(description="EMPTY_CART / INVALID_SELECTION / UNKNOWN_SHIPPING_ZONE"),
    404: OpenApiResponse(description="ADDRESS_NOT_FOUND / VARIANT_NOT_FOUND"),
    409: OpenApiResponse(description="INSUFFICIENT_STOCK / ORDER_NOT_PAYABLE"),
    502: OpenApiResponse(description="PAYMENT_PROVIDER_ERROR (order stays pending)"),
}


class CheckoutView(APIView):
    permission_classes = [IsMember]
    throttle_classes = [CheckoutThrottle]
    serializer_class = CheckoutResultSerializer

    @extend_schema(
        request=CheckoutInputSerializer,
        responses={201: CheckoutResultSerializer, **CHECKOUT_ERROR_RESPONSES},
        description="Convert the member's cart into a pending order and start payment",
    )
    def post(self, request):
        serializer = CheckoutInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = checkout(
                user=request.user,
                address_id=serializer.validated_data["address_id"],
            )
        except HANDLED + (PaymentGatewayError,) as exc:
            return checkout_error_response(exc)

        return Response(CheckoutResultSerializer(result).data, status=status.HTTP_201_CREATED)


class RetryPaymentView(APIView):
    permission_classes = [IsMember]
    throttle_classes = [CheckoutThrottle]
    serializer_class = CheckoutResultSerializer

    @extend_schema(
        request=None,
        responses={200: CheckoutResultSerializer, **CHECKOUT_ERROR_RESPONSES},
        description="Request the payment intent again for a pending order",
    )
    def post(self, request, order_id):
        order = get_object_or_404(Order, pk=order_id, user=request.user)

        try:
            result = retry_payment_intent(order=order)
        except HANDLED + (PaymentGatewayError,) as exc:
            return checkout_error_response(exc)

        return Response(CheckoutResultSerializer(result).data, status=status.HTTP_200_OK)
