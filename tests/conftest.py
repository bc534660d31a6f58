"""
Pytest configuration for AQI dashboard tests.

Provides shared fixtures: a clean in-memory cache, a measurement factory and a
fake provider that never touches the network.
"""
from datetime import datetime, timezone as dt_timezone
from unittest import mock

import pytest
from django.core.cache import caches

from apps.adapters.base import BaseAdapter, CitySearchResult, Measurement
from apps.cache.services import CacheService


@pytest.fixture(autouse=True)
def clear_cache():
    """Every test starts with an empty cache."""
    caches['default'].clear()
    yield
    caches['default'].clear()


@pytest.fixture
def paris():
    return CitySearchResult(name='Paris', country='FR', lat=48.8566, lon=2.3522)


@pytest.fixture
def make_measurement(paris):
    """Factory for provider measurements; defaults describe a moderate day in Paris."""
    def _make(**overrides):
        values = {
            'aqi': 85,
            'dominant_pollutant': 'pm25',
            'timestamp': datetime(2026, 10, 18, 12, 0, tzinfo=dt_timezone.utc),
            'pollutants': {'pm25': 28.4, 'pm10': 41.0, 'no2': 12.5},
            'temperature': 18.0,
            'humidity': 62.0,
            'pressure': 1015.0,
            'location': paris,
            'source': 'OPENMETEO',
        }
        values.update(overrides)
        return Measurement(**values)

    return _make


@pytest.fixture
def fake_provider(make_measurement):
    """Provider double returning the default measurement for any query."""
    provider = mock.Mock(spec=BaseAdapter)
    provider.SOURCE_CODE = 'FAKE'
    provider.fetch_by_city.return_value = make_measurement()
    provider.fetch_by_coordinates.return_value = make_measurement(location=None)
    provider.search_cities.return_value = []
    return provider


@pytest.fixture
def cache_service():
    return CacheService(backend=caches['default'], default_ttl=3600)


@pytest.fixture
def json_response():
    """Factory for requests.Response stand-ins returning `data` from .json()."""
    def _response(data, status_code=200):
        response = mock.Mock(status_code=status_code)
        response.json.return_value = data
        response.raise_for_status.return_value = None
        return response

    return _response
