# orders/api/viewsets/admin_order.py

"""
======================================================
PATH: orders/api/viewsets/admin_order.py
======================================================
ADMIN ORDER BOARD

Purpose:
- List every order with filters (status, commune, order number, dates)
  plus per-status counts for the dashboard badges.
- Retrieve an order with items, status trail and payment records.
- Drive fulfilment: advance (PAID -> PREPARING -> SHIPPED -> DELIVERED).
- Cancel (PENDING or PAID; PAID raises a refund obligation).

Security:
- IsAdmin (role == admin)

Illegal moves return INVALID_TRANSITION (409) and change nothing.
======================================================
"""

from __future__ import annotations

from django.db.models import Count
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from backend.responses import error_response
from orders.filters import AdminOrderFilter
from orders.models import Order, OrderStatus
from orders.serializers import (
    AdminAdvanceInputSerializer,
    AdminCancelInputSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from orders.services.exceptions import InvalidTransitionError
from orders.services.order_lifecycle import admin_cancel_order, advance_order
from users.permissions import IsAdmin


class AdminOrderViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAdmin]
    filterset_class = AdminOrderFilter
    lookup_url_kwarg = "order_id"

    def get_serializer_class(self):
        if self.action == "list":
            return OrderListSerializer
        return OrderSerializer

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["include_payments"] = True
        return context

    def get_queryset(self):
        return (
            Order.objects.all()
            .select_related("user")
            .prefetch_related("items", "status_events", "payment_records")
            .order_by("-created_at")
        )

    # ======================================================
    # LIST (+ status counts)
    # ======================================================

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)

        rows = Order.objects.values("status").annotate(n=Count("id"))
        counts = {value: 0 for value in OrderStatus.values}
        for row in rows:
            counts[row["status"]] = row["n"]

        response.data["counts"] = counts
        return response

    # ======================================================
    # LIFECYCLE ACTIONS
    # ======================================================

    @extend_schema(
        request=AdminAdvanceInputSerializer,
        responses={200: OrderSerializer, 409: OpenApiResponse(description="INVALID_TRANSITION")},
        description="Advance an order one fulfilment step",
    )
    @action(detail=True, methods=["post"], url_path="advance")
    def advance(self, request, order_id=None):
        order = self.get_object()

        ser = AdminAdvanceInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            advance_order(
                order=order,
                to_status=ser.validated_data["status"],
                performed_by=request.user,
                reason=ser.validated_data.get("reason", ""),
            )
        except InvalidTransitionError as exc:
            return error_response(
                code="INVALID_TRANSITION",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )

        return Response(self.get_serializer(self.get_object()).data, status=status.HTTP_200_OK)

    @extend_schema(
        request=AdminCancelInputSerializer,
        responses={200: OrderSerializer, 409: OpenApiResponse(description="INVALID_TRANSITION")},
        description="Cancel an order (stock released; refund owed if it was paid)",
    )
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, order_id=None):
        order = self.get_object()

        ser = AdminCancelInputSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        try:
            admin_cancel_order(
                order=order,
                reason=ser.validated_data.get("reason", ""),
                performed_by=request.user,
            )
        except InvalidTransitionError as exc:
            return error_response(
                code="INVALID_TRANSITION",
                message=str(exc),
                http_status=status.HTTP_409_CONFLICT,
            )

        return Response(self.get_serializer(self.get_object()).data, status=status.HTTP_200_OK)
