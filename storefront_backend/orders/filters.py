# orders/filters.py

import django_filters

from orders.models import Order, OrderStatus


class AdminOrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    commune = django_filters.CharFilter(field_name="shipping_commune", lookup_expr="iexact")
    q = django_filters.CharFilter(field_name="order_no", lookup_expr="icontains")
    date_from = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")

    class Meta:
        model = Order
        fields = ["status", "commune", "q", "date_from", "date_to"]
