"""
DRF serializers for request validation.
"""
from rest_framework import serializers

from apps.api.orchestrator import DEFAULT_HISTORY_HOURS, MAX_HISTORY_HOURS, MIN_HISTORY_HOURS
from apps.core.constants import MAX_AQI


class AQIQuerySerializer(serializers.Serializer):
    """Query parameters for the current AQI endpoint: a city or a lat/lon pair."""
    city = serializers.CharField(required=False, trim_whitespace=True, max_length=255)
    lat = serializers.FloatField(required=False, min_value=-90, max_value=90)
    lon = serializers.FloatField(required=False, min_value=-180, max_value=180)

    def validate(self, attrs):
        has_city = bool(attrs.get('city'))
        has_lat = attrs.get('lat') is not None
        has_lon = attrs.get('lon') is not None

        if has_lat != has_lon:
            raise serializers.ValidationError('Both lat and lon are required for a coordinate query')

        if not has_city and not has_lat:
            raise serializers.ValidationError('Either city name or lat/lon coordinates are required')

        return attrs


class HistoryQuerySerializer(serializers.Serializer):
    """Query parameters for the history endpoint."""
    city = serializers.CharField(trim_whitespace=True, max_length=255)
    hours = serializers.IntegerField(
        required=False,
        default=DEFAULT_HISTORY_HOURS,
        min_value=MIN_HISTORY_HOURS,
        max_value=MAX_HISTORY_HOURS,
    )


class HealthAdviceRequestSerializer(serializers.Serializer):
    """Body of a health-advice request."""
    aqi = serializers.FloatField(min_value=0, max_value=MAX_AQI)
    temperature = serializers.FloatField(required=False, allow_null=True)


class CitySearchQuerySerializer(serializers.Serializer):
    """Query parameters for city search."""
    q = serializers.CharField(min_length=2, max_length=100, trim_whitespace=True)


class CitySearchResultSerializer(serializers.Serializer):
    """A geocoded place."""
    name = serializers.CharField()
    country = serializers.CharField()
    latitude = serializers.FloatField()
    longitude = serializers.FloatField()
