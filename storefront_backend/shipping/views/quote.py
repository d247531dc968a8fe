# shipping/views/quote.py
"""
SHIPPING QUOTE (PUBLIC)

- GET /api/shipping/zones/               active communes + costs (checkout picker)
- GET /api/shipping/quote/?commune=...   cost for one commune

Unknown communes return UNKNOWN_SHIPPING_ZONE (400); there is no default rate.
"""

from __future__ import annotations

from django.conf import settings
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.responses import error_response
from shipping.models import ShippingZone
from shipping.serializers import (
    ShippingQuoteQuerySerializer,
    ShippingQuoteSerializer,
    ShippingZoneSerializer,
)
from shipping.services.exceptions import UnknownShippingZoneError
from shipping.services.rates import quote_for_commune


class ShippingZoneListView(ListAPIView):
    permission_classes = [AllowAny]
    serializer_class = ShippingZoneSerializer
    pagination_class = None

    def get_queryset(self):
        return ShippingZone.objects.filter(is_active=True).order_by("cost", "commune")


class ShippingQuoteView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(
        parameters=[ShippingQuoteQuerySerializer],
        responses={
            200: ShippingQuoteSerializer,
            400: OpenApiResponse(description="UNKNOWN_SHIPPING_ZONE"),
        },
        description="Shipping cost for a commune (case-insensitive).",
    )
    def get(self, request):
        query = ShippingQuoteQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        try:
            quote = quote_for_commune(commune=query.validated_data["commune"])
        except UnknownShippingZoneError as exc:
            return error_response(
                code="UNKNOWN_SHIPPING_ZONE",
                message=str(exc),
                http_status=status.HTTP_400_BAD_REQUEST,
            )

        data = {
            "commune": quote.commune,
            "cost": quote.cost,
            "delivery_days": quote.delivery_days,
            "currency": settings.STORE_CURRENCY,
        }
        return Response(ShippingQuoteSerializer(data).data, status=status.HTTP_200_OK)
