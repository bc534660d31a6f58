"""
History store and trend analysis.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from django.db import Error, transaction

from apps.core.exceptions import StorageDegraded
from apps.core.utils import round_half_up

from .models import AQIRecord, City

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 5

POLLUTANT_FIELDS = ('pm25', 'pm10', 'o3', 'no2', 'so2', 'co')


class HistoryStore:
    """
    Persistent store of fresh AQI measurements, backed by the Django ORM.

    Database failures (any django.db.Error) are raised as StorageDegraded.
    """

    def upsert_city(self, name: str, country: str = '', lat: float = None, lon: float = None) -> int:
        """
        Find or create a city by case-insensitive name and country.

        Returns:
            int: the city id
        """
        try:
            with transaction.atomic():
                city = City.objects.filter(name__iexact=name, country=country).first()

                if city is None:
                    city = City.objects.create(
                        name=name,
                        country=country,
                        lat=_to_decimal(lat),
                        lon=_to_decimal(lon),
                    )
                elif lat is not None and lon is not None and city.lat is None:
                    city.lat = _to_decimal(lat)
                    city.lon = _to_decimal(lon)
                    city.save(update_fields=['lat', 'lon', 'updated_at'])

                return city.id
        except Error as e:
            raise StorageDegraded('city upsert', e) from e

    def append(self, city_id: int, measurement, payload: Dict) -> AQIRecord:
        """
        Append one record for a measurement and its derived payload fields.

        Args:
            city_id: id returned by upsert_city
            measurement: the provider Measurement
            payload: the enriched response (categoryCode, healthImpact, recommendation)
        """
        pollutants = measurement.pollutants or {}

        try:
            return AQIRecord.objects.create(
                city_id=city_id,
                aqi=measurement.aqi,
                category=payload['categoryCode'],
                dominant_pollutant=measurement.dominant_pollutant or '',
                temperature=measurement.temperature,
                humidity=measurement.humidity,
                pressure=measurement.pressure,
                health_impact=payload.get('healthImpact', ''),
                recommendation=payload.get('recommendation', ''),
                source=measurement.source or '',
                timestamp=measurement.timestamp,
                **{key: pollutants.get(key) for key in POLLUTANT_FIELDS},
            )
        except Error as e:
            raise StorageDegraded('record append', e) from e

    def query_history(self, city_name: str, since: datetime, until: Optional[datetime] = None) -> List[Dict]:
        """
        Records for a city name within [since, until], oldest first.

        Returns:
            list of {'timestamp', 'aqi', 'category'} dicts
        """
        try:
            records = AQIRecord.objects.filter(
                city__name__iexact=city_name,
                timestamp__gte=since,
            )
            if until is not None:
                records = records.filter(timestamp__lte=until)

            return list(
                records.order_by('timestamp').values('timestamp', 'aqi', 'category')
            )
        except Error as e:
            raise StorageDegraded('history query', e) from e


def _to_decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    return round(Decimal(str(value)), 6)


def _mean(values: Sequence[float]) -> Optional[float]:
    if not values:
        return None
    return sum(values) / len(values)


def calculate_trend(aqi_values: Sequence[float]) -> str:
    """
    Compare the mean of the second half of a series against the first half.

    The series is split at floor(n/2). A drop of more than 5 is 'improving',
    a rise of more than 5 is 'worsening'; otherwise, or when either half is
    empty, 'stable'.
    """
    midpoint = len(aqi_values) // 2
    first_half_avg = _mean(aqi_values[:midpoint])
    second_half_avg = _mean(aqi_values[midpoint:])

    if first_half_avg is None or second_half_avg is None:
        return 'stable'

    difference = second_half_avg - first_half_avg

    if difference < -TREND_THRESHOLD:
        return 'improving'
    if difference > TREND_THRESHOLD:
        return 'worsening'
    return 'stable'


def summarize_history(aqi_values: Sequence[float]) -> Optional[Dict]:
    """
    Average, min, max and trend of an AQI series.

    Returns:
        dict, or None when the series is empty (no data)
    """
    if not aqi_values:
        return None

    return {
        'average': round_half_up(_mean(aqi_values)),
        'min': min(aqi_values),
        'max': max(aqi_values),
        'trend': calculate_trend(aqi_values),
    }
