from .quote import ShippingQuoteView, ShippingZoneListView

__all__ = [
    "ShippingQuoteView",
    "ShippingZoneListView",
]
