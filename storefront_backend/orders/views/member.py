# orders/views/member.py

"""
MEMBER ORDER HISTORY

- GET /api/orders/             own orders, newest first (paginated)
- GET /api/orders/<uuid>/      own order with items + status trail

Other members' orders are 404, never 403.
"""

from rest_framework.generics import ListAPIView, RetrieveAPIView

from orders.models import Order
from orders.serializers import OrderListSerializer, OrderSerializer
from users.permissions import IsMember


class OrderListView(ListAPIView):
    permission_classes = [IsMember]
    serializer_class = OrderListSerializer

    def get_queryset(self):
        return (
            Order.objects.filter(user=self.request.user)
            .prefetch_related("items")
            .order_by("-created_at")
        )


class OrderDetailView(RetrieveAPIView):
    permission_classes = [IsMember]
    serializer_class = OrderSerializer
    lookup_url_kwarg = "order_id"

    def get_queryset(self):
        return (
            Order.objects.filter(user=self.request.user)
            .select_related("user")
            .prefetch_related("items", "status_events")
        )
