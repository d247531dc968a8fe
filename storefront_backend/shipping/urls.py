# shipping/urls.py

from django.urls import path

from shipping.views import ShippingQuoteView, ShippingZoneListView

app_name = "shipping"

urlpatterns = [
    path("zones/", ShippingZoneListView.as_view(), name="zones"),
    path("quote/", ShippingQuoteView.as_view(), name="quote"),
]
