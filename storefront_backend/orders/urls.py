"""
PATH: orders/urls.py

ORDERS URLS

Mounted at /api/orders/:
- POST  checkout/                         member checkout
- GET   ""                                own orders
- GET   <uuid>/                           own order detail
- POST  <uuid>/payment/retry/             retry payment intent
- GET   admin/                            admin board (+ counts)
- GET   admin/<uuid>/                     admin detail
- POST  admin/<uuid>/advance/             fulfilment step
- POST  admin/<uuid>/cancel/              admin cancel

Explicit routes are registered BEFORE router URLs.
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from orders.api.viewsets.admin_order import AdminOrderViewSet
from orders.views import CheckoutView, OrderDetailView, OrderListView, RetryPaymentView

app_name = "orders"

router = SimpleRouter()
router.register(r"admin", AdminOrderViewSet, basename="admin-orders")

urlpatterns = [
    path("checkout/", CheckoutView.as_view(), name="checkout"),
    path("", OrderListView.as_view(), name="order-list"),
    path("<uuid:order_id>/", OrderDetailView.as_view(), name="order-detail"),
    path("<uuid:order_id>/payment/retry/", RetryPaymentView.as_view(), name="payment-retry"),
    path("", include(router.urls)),
]
