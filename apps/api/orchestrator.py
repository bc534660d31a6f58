"""
Main orchestrator that coordinates provider, cache and history store to
answer AQI queries.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict, List, Optional

from django.conf import settings
from django.utils import timezone

from apps.adapters import get_provider
from apps.adapters.base import BaseAdapter, Measurement
from apps.cache.services import CacheService
from apps.core.exceptions import InvalidParameterError, StorageDegraded
from apps.core.utils import convert_aqi_to_category, is_valid_aqi, round_coordinate, validate_coordinates
from apps.health.services import interpret, preventive_actions
from apps.history.services import HistoryStore, summarize_history

logger = logging.getLogger(__name__)

MIN_HISTORY_HOURS = 1
MAX_HISTORY_HOURS = 720
DEFAULT_HISTORY_HOURS = 24


@dataclass(frozen=True)
class SideEffectResult:
    """Outcome of a best-effort step (history persist, cache write)."""
    stage: str
    ok: bool
    error: Optional[Exception] = None


def run_side_effect(stage: str, action: Callable[[], object]) -> SideEffectResult:
    """Run a best-effort action; storage failures are captured, not raised."""
    try:
        action()
    except StorageDegraded as e:
        return SideEffectResult(stage=stage, ok=False, error=e)
    return SideEffectResult(stage=stage, ok=True)


class AirQualityOrchestrator:
    """
    Main orchestrator service. Each query runs one linear pipeline:

    1. Cache lookup
    2. Provider fetch
    3. Enrichment (category + health interpretation)
    4. History persist (best-effort)
    5. Cache write (best-effort)

    Collaborators are injected; defaults come from settings. Use as a context
    manager to release the provider's HTTP session.
    """

    def __init__(
        self,
        provider: Optional[BaseAdapter] = None,
        cache_service: Optional[CacheService] = None,
        history_store: Optional[HistoryStore] = None,
        cache_ttl: Optional[int] = None,
        cache_enabled: Optional[bool] = None,
    ):
        air_quality_settings = settings.AIR_QUALITY_SETTINGS

        self.provider = provider or get_provider()
        self.cache_service = cache_service or CacheService()
        self.history_store = history_store or HistoryStore()
        self.cache_ttl = (
            air_quality_settings.get('CACHE_DEFAULT_TTL', 3600) if cache_ttl is None else cache_ttl
        )
        self.cache_enabled = (
            air_quality_settings.get('CACHE_ENABLED', True) if cache_enabled is None else cache_enabled
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        self.provider.close()

    # ------------------------------------------------------------------
    # Current AQI
    # ------------------------------------------------------------------

    def get_aqi_for_city(self, city: str) -> Dict:
        """
        Current AQI payload for a city name.

        Raises:
            InvalidParameterError: if the city name is blank
            LocationNotFound, ProviderNotConfigured, UpstreamError: from the provider
        """
        city_name = (city or '').strip()
        if not city_name:
            raise InvalidParameterError('City name is required')

        logger.info(f"Starting AQI fetch for city: {city_name}")

        cache_key = self.cache_service.city_key(city_name)
        cached = self._cache_lookup(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for city: {city_name}")
            return cached

        logger.info(f"Fetching from provider {self.provider.SOURCE_CODE} for: {city_name}")
        measurement = self.provider.fetch_by_city(city_name)

        payload = self._build_payload(measurement, city_name=city_name)

        location = measurement.location
        self._complete(
            cache_key,
            payload,
            persist=lambda: self._persist(
                city_name,
                location.country if location else '',
                location.lat if location else None,
                location.lon if location else None,
                measurement,
                payload,
            ),
        )

        logger.info(f"Successfully retrieved AQI data for {city_name}: AQI {payload['aqi']}")
        return payload

    def get_aqi_by_coordinates(self, lat: float, lon: float) -> Dict:
        """
        Current AQI payload for a coordinate pair.

        History rows are filed under a city named by the rounded "lat,lon".
        """
        is_valid, error_msg = validate_coordinates(lat, lon)
        if not is_valid:
            raise InvalidParameterError(error_msg)

        lat, lon = float(lat), float(lon)
        logger.info(f"Starting AQI fetch for coordinates: ({lat}, {lon})")

        cache_key = self.cache_service.coords_key(lat, lon)
        cached = self._cache_lookup(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for coordinates: ({lat}, {lon})")
            return cached

        measurement = self.provider.fetch_by_coordinates(lat, lon)

        city_name = measurement.location.name if measurement.location else None
        payload = self._build_payload(measurement, city_name=city_name)

        location_name = f"{round_coordinate(lat)},{round_coordinate(lon)}"
        self._complete(
            cache_key,
            payload,
            persist=lambda: self._persist(location_name, '', lat, lon, measurement, payload),
        )

        return payload

    def get_health_interpretation(self, aqi, temperature: Optional[float] = None) -> Dict:
        """Category and health advice for an arbitrary AQI value in [0, 500]."""
        if not is_valid_aqi(aqi):
            raise InvalidParameterError('Invalid AQI value. Must be between 0 and 500')

        aqi = float(aqi)
        category_info = convert_aqi_to_category(aqi)
        code = category_info['code'].value
        health = interpret(aqi, code, temperature)

        return {
            'aqi': aqi,
            'category': category_info['category'],
            'categoryCode': code,
            'color': category_info['color_hex'],
            'textColor': category_info['text_color'],
            'healthImpact': health.impact,
            'recommendation': health.recommendation,
            'sensitiveGroups': health.sensitive_groups,
            'activities': health.activities,
            'preventiveActions': preventive_actions(code, temperature),
        }

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def get_historical_aqi(self, city: str, hours: int = DEFAULT_HISTORY_HOURS) -> Dict:
        """
        Records for a city over the last `hours` hours with a summary.

        `summary` is None when there are no records.
        """
        city_name = (city or '').strip()
        if not city_name:
            raise InvalidParameterError('City name is required')

        if isinstance(hours, bool) or not isinstance(hours, int) or not (
            MIN_HISTORY_HOURS <= hours <= MAX_HISTORY_HOURS
        ):
            raise InvalidParameterError(
                f'Hours must be between {MIN_HISTORY_HOURS} and {MAX_HISTORY_HOURS}'
            )

        end = timezone.now()
        start = end - timedelta(hours=hours)

        try:
            records = self.history_store.query_history(city_name, start, end)
        except StorageDegraded as e:
            logger.error(f"Failed to fetch historical AQI data for {city_name}: {e}")
            records = []

        logger.info(f"Retrieved {len(records)} historical records for {city_name}")

        return {
            'cityName': city_name,
            'period': {
                'start': start.isoformat(),
                'end': end.isoformat(),
                'hours': hours,
            },
            'data': [
                {
                    'timestamp': record['timestamp'].isoformat(),
                    'aqi': record['aqi'],
                    'category': record['category'],
                }
                for record in records
            ],
            'summary': summarize_history([record['aqi'] for record in records]),
        }

    # ------------------------------------------------------------------
    # Search and administration
    # ------------------------------------------------------------------

    def search_cities(self, query: str) -> List[Dict]:
        """Matching places in provider relevance order."""
        limit = settings.AIR_QUALITY_SETTINGS.get('CITY_SEARCH_LIMIT', 5)
        results = self.provider.search_cities(query.strip(), limit=limit)
        return [result.to_dict() for result in results[:limit]]

    def invalidate_city(self, city: str) -> bool:
        """Drop the cached payload for one city."""
        removed = self.cache_service.invalidate_city(city)
        logger.info(f"Cache invalidated for city: {city}")
        return removed

    def clear_cache(self) -> int:
        """Drop every cached AQI payload. Returns the number of keys removed."""
        removed = self.cache_service.clear_all()
        logger.info(f"Cleared {removed} cached AQI entries")
        return removed

    # ------------------------------------------------------------------
    # Pipeline steps
    # ------------------------------------------------------------------

    def _cache_lookup(self, key: str) -> Optional[Dict]:
        if not self.cache_enabled:
            return None

        try:
            cached = self.cache_service.get(key)
        except StorageDegraded as e:
            logger.warning(f"Cache read failed for {key}, treating as miss: {e}")
            return None

        if cached is None:
            logger.debug(f"Cache miss: {key}")
        return cached

    def _build_payload(self, measurement: Measurement, city_name: Optional[str] = None) -> Dict:
        """Enrich a measurement with its category and health interpretation."""
        category_info = convert_aqi_to_category(measurement.aqi)
        code = category_info['code'].value
        health = interpret(measurement.aqi, code, measurement.temperature)

        payload = {
            'aqi': measurement.aqi,
            'category': category_info['category'],
            'categoryCode': code,
            'color': category_info['color_hex'],
            'dominantPollutant': measurement.dominant_pollutant,
            'pollutants': {
                key: value for key, value in measurement.pollutants.items() if value is not None
            },
            'healthImpact': health.impact,
            'recommendation': health.recommendation,
            'sensitiveGroups': health.sensitive_groups,
            'activities': health.activities,
            'preventiveActions': preventive_actions(code, measurement.temperature),
            'timestamp': measurement.timestamp.isoformat(),
        }

        # Optional fields are omitted rather than sent as null
        if measurement.temperature is not None:
            payload['temperature'] = measurement.temperature
        if measurement.humidity is not None:
            payload['humidity'] = measurement.humidity
        if city_name:
            payload['cityName'] = city_name

        return payload

    def _persist(self, name: str, country: str, lat, lon, measurement: Measurement, payload: Dict):
        city_id = self.history_store.upsert_city(name, country=country, lat=lat, lon=lon)
        self.history_store.append(city_id, measurement, payload)

    def _complete(self, cache_key: str, payload: Dict, persist: Callable[[], object]) -> List[SideEffectResult]:
        """Run the best-effort persist and cache-write steps and log any failure."""
        results = [run_side_effect('persist', persist)]

        if self.cache_enabled:
            results.append(run_side_effect(
                'cache_write',
                lambda: self.cache_service.set(cache_key, payload, ttl=self.cache_ttl),
            ))

        for result in results:
            if not result.ok:
                logger.warning(f"{result.stage} failed for {cache_key}: {result.error}")

        return results
