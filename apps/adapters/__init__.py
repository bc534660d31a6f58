"""
Air quality provider adapters.
"""
from typing import Optional

from django.conf import settings

from .base import BaseAdapter, CitySearchResult, Measurement
from .openmeteo import OpenMeteoAirQualityAdapter, OpenMeteoWeatherAdapter
from .openweathermap import OpenWeatherMapAdapter

ADAPTERS = {
    adapter.SOURCE_CODE: adapter
    for adapter in (OpenWeatherMapAdapter, OpenMeteoAirQualityAdapter, OpenMeteoWeatherAdapter)
}


def get_provider(code: Optional[str] = None, **kwargs) -> BaseAdapter:
    """
    Build the configured provider adapter.

    Args:
        code: Provider code; defaults to AIR_QUALITY_SETTINGS['PROVIDER']
        **kwargs: Passed to the adapter constructor (api_key, session)
    """
    code = (code or settings.AIR_QUALITY_SETTINGS.get('PROVIDER', 'OPENMETEO')).upper()

    try:
        adapter_class = ADAPTERS[code]
    except KeyError:
        raise ValueError(f"Unknown AQI provider: {code}. Choose one of {sorted(ADAPTERS)}")

    return adapter_class(**kwargs)


__all__ = [
    'ADAPTERS',
    'BaseAdapter',
    'CitySearchResult',
    'Measurement',
    'OpenMeteoAirQualityAdapter',
    'OpenMeteoWeatherAdapter',
    'OpenWeatherMapAdapter',
    'get_provider',
]
