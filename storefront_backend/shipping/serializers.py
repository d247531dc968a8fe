# shipping/serializers.py

from rest_framework import serializers

from shipping.models import ShippingZone


class ShippingZoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = ShippingZone
        fields = ["commune", "cost", "delivery_days"]


class ShippingQuoteQuerySerializer(serializers.Serializer):
    commune = serializers.CharField(max_length=120)


class ShippingQuoteSerializer(serializers.Serializer):
    commune = serializers.CharField()
    cost = serializers.IntegerField()
    delivery_days = serializers.IntegerField()
    currency = serializers.CharField()
