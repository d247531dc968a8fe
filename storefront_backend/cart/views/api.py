# cart/views/api.py

"""
CART API VIEWS

Purpose:
- Member cart lifecycle (server-owned, keyed by the authenticated user)
- Add / set / remove / clear lines
- Every response is the freshly priced cart snapshot

Hard rules:
- Prices are never accepted from the client.
- Stock checks here are advisory; checkout reserves stock authoritatively.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from backend.responses import error_response
from cart.serializers import (
    AddCartItemInputSerializer,
    CartSnapshotSerializer,
    RemoveCartItemInputSerializer,
    SetCartItemQuantityInputSerializer,
)
from cart.services import cart as cart_service
from cart.services.exceptions import CartValidationError
from catalog.services.exceptions import (
    InsufficientStockError,
    InvalidSelectionError,
    PricingValidationError,
    ProductNotFoundError,
    VariantNotFoundError,
)


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

# Most specific first (ProductNotFoundError is an InvalidSelectionError).
CART_ERRORS = (
    (CartValidationError, "INVALID_QUANTITY", status.HTTP_400_BAD_REQUEST),
    (PricingValidationError, "INVALID_QUANTITY", status.HTTP_400_BAD_REQUEST),
    (ProductNotFoundError, "PRODUCT_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (VariantNotFoundError, "VARIANT_NOT_FOUND", status.HTTP_404_NOT_FOUND),
    (InvalidSelectionError, "INVALID_SELECTION", status.HTTP_400_BAD_REQUEST),
    (InsufficientStockError, "INSUFFICIENT_STOCK", status.HTTP_409_CONFLICT),
)

HANDLED = tuple(exc_class for exc_class, _, _ in CART_ERRORS)


def cart_error_response(exc: Exception):
    for exc_class, code, http_status in CART_ERRORS:
        if isinstance(exc, exc_class):
            return error_response(code=code, message=str(exc), http_status=http_status)
    raise exc


def snapshot_response(snapshot, *, http_status=status.HTTP_200_OK):
    return Response(CartSnapshotSerializer(snapshot).data, status=http_status)


CART_ERROR_RESPONSES = {
    400: OpenApiResponse(description="INVALID_QUANTITY / INVALID_SELECTION"),
    404: OpenApiResponse(description="PRODUCT_NOT_FOUND / VARIANT_NOT_FOUND"),
    409: OpenApiResponse(description="INSUFFICIENT_STOCK"),
}


# =====================================================
# CART API VIEWS
# =====================================================

class CartView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSnapshotSerializer

    @extend_schema(
        responses={200: CartSnapshotSerializer, **CART_ERROR_RESPONSES},
        description="Priced snapshot of the authenticated member's cart",
    )
    def get(self, request):
        try:
            snapshot = cart_service.cart_snapshot(user=request.user)
        except HANDLED as exc:
            return cart_error_response(exc)
        return snapshot_response(snapshot)


class AddCartItemView(APIView):
    """
    Add a product (individual units or a pack variant) to the cart.
    Same product + variant increments the existing line.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = CartSnapshotSerializer

    @extend_schema(
        request=AddCartItemInputSerializer,
        responses={200: CartSnapshotSerializer, **CART_ERROR_RESPONSES},
        description="Add a product or pack variant to the cart",
    )
    def post(self, request):
        serializer = AddCartItemInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            snapshot = cart_service.add_to_cart(
                user=request.user,
                product_id=data["product_id"],
                pack_variant_id=data.get("pack_variant_id"),
                quantity=int(data["quantity"]),
            )
        except HANDLED as exc:
            return cart_error_response(exc)
        return snapshot_response(snapshot)


class SetCartItemQuantityView(APIView):
    """
    Set the quantity of a line (last write wins). Quantity 0 removes it.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = CartSnapshotSerializer

    @extend_schema(
        request=SetCartItemQuantityInputSerializer,
        responses={200: CartSnapshotSerializer, **CART_ERROR_RESPONSES},
        description="Set a cart line quantity (0 removes the line)",
    )
    def patch(self, request):
        serializer = SetCartItemQuantityInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            snapshot = cart_service.set_quantity(
                user=request.user,
                product_id=data["product_id"],
                pack_variant_id=data.get("pack_variant_id"),
                quantity=int(data["quantity"]),
            )
        except HANDLED as exc:
            return cart_error_response(exc)
        return snapshot_response(snapshot)


class RemoveCartItemView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSnapshotSerializer

    @extend_schema(
        request=RemoveCartItemInputSerializer,
        responses={200: CartSnapshotSerializer},
        description="Remove a cart line (no-op if absent)",
    )
    def delete(self, request):
        payload = request.data if request.data else request.query_params
        serializer = RemoveCartItemInputSerializer(data=payload)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            snapshot = cart_service.remove_from_cart(
                user=request.user,
                product_id=data["product_id"],
                pack_variant_id=data.get("pack_variant_id"),
            )
        except HANDLED as exc:
            return cart_error_response(exc)
        return snapshot_response(snapshot)


class ClearCartView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = CartSnapshotSerializer

    @extend_schema(
        request=None,
        responses={200: CartSnapshotSerializer},
        description="Remove every line from the cart",
    )
    def delete(self, request):
        cart_service.clear_cart(user=request.user)
        return snapshot_response(cart_service.cart_snapshot(user=request.user))
