"""
Open-Meteo adapters (no API key required).

Two estimation strategies share the Open-Meteo geocoder:

- OpenMeteoAirQualityAdapter samples pollutant concentrations from the
  air-quality API and converts them with the EPA breakpoint tables.
- OpenMeteoWeatherAdapter estimates AQI from current weather conditions
  only. It is a heuristic proxy, not a measurement.
"""
import logging
from abc import abstractmethod
from datetime import datetime, timezone as dt_timezone
from typing import Dict, List, Optional

from django.utils import timezone

from apps.core.constants import MAX_AQI
from apps.core.exceptions import LocationNotFound, UpstreamError
from apps.core.utils import (
    calculate_aqi,
    get_dominant_pollutant,
    get_dominant_pollutant_by_concentration,
)

from .base import BaseAdapter, CitySearchResult, Measurement

logger = logging.getLogger(__name__)

WEATHER_FIELDS = 'temperature_2m,relative_humidity_2m,pressure_msl,weather_code'


class OpenMeteoAdapter(BaseAdapter):
    """
    Shared geocoding and weather access for the Open-Meteo family of APIs.
    """

    SOURCE_NAME = "Open-Meteo"
    API_BASE_URL = "https://api.open-meteo.com/v1/"
    GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/"
    REQUIRES_API_KEY = False

    def search_cities(self, query: str, limit: int = 5) -> List[CitySearchResult]:
        """
        Search for cities using the Open-Meteo geocoding API.

        Args:
            query: Free-text place name
            limit: Maximum number of results

        Returns:
            List of CitySearchResult in provider relevance order
        """
        raw_data = self._make_request(
            'search',
            params={'name': query, 'count': limit, 'language': 'en', 'format': 'json'},
            base_url=self.GEOCODING_URL,
        )

        results = (raw_data or {}).get('results') or []
        if not results:
            logger.info(f"No cities found for query: {query}")
            return []

        return [
            CitySearchResult(
                name=city.get('name', query),
                country=city.get('country') or 'Unknown',
                lat=float(city['latitude']),
                lon=float(city['longitude']),
            )
            for city in results[:limit]
        ]

    def fetch_by_city(self, city_name: str) -> Measurement:
        """Geocode a city, then fetch its measurement by coordinates."""
        matches = self.search_cities(city_name, limit=1)
        if not matches:
            logger.error(f"City not found: {city_name}")
            raise LocationNotFound(f'City "{city_name}" not found')

        location = matches[0]
        logger.debug(f"Got coordinates for {city_name}: {location.lat}, {location.lon}")

        return self._measure(location.lat, location.lon, location=location)

    def fetch_by_coordinates(self, lat: float, lon: float) -> Measurement:
        return self._measure(lat, lon)

    @abstractmethod
    def _measure(self, lat: float, lon: float, location: CitySearchResult = None) -> Measurement:
        """Fetch and normalize the current measurement for a coordinate pair."""

    def _fetch_current_weather(self, lat: float, lon: float) -> Dict:
        """
        Fetch current temperature, humidity, pressure and weather code.

        Raises:
            UpstreamError: if the forecast API returns no current block
        """
        raw_data = self._make_request(
            'forecast',
            params={
                'latitude': lat,
                'longitude': lon,
                'current': WEATHER_FIELDS,
                'timezone': 'GMT',
            },
        )

        current = (raw_data or {}).get('current')
        if not current:
            logger.error(f"No weather data received for ({lat}, {lon})")
            raise UpstreamError('No weather data available')

        return current

    @staticmethod
    def _parse_time(value: Optional[str]) -> datetime:
        """Parse Open-Meteo's GMT 'YYYY-MM-DDTHH:MM' timestamps."""
        if value:
            try:
                parsed = datetime.fromisoformat(value)
            except ValueError:
                return timezone.now()
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=dt_timezone.utc)
            return parsed

        return timezone.now()


class OpenMeteoAirQualityAdapter(OpenMeteoAdapter):
    """
    Pollutant-sampling provider.

    AQI is the highest EPA sub-index of PM2.5 and PM10, computed from the
    sampled concentrations; weather fields are added when available.
    """

    SOURCE_NAME = "Open-Meteo Air Quality"
    SOURCE_CODE = "OPENMETEO"
    AIR_QUALITY_URL = "https://air-quality-api.open-meteo.com/v1/"
    QUALITY_LEVEL = "model"

    COMPONENTS = {
        'pm2_5': 'pm25',
        'pm10': 'pm10',
        'ozone': 'o3',
        'nitrogen_dioxide': 'no2',
        'sulphur_dioxide': 'so2',
        'carbon_monoxide': 'co',
    }

    def _measure(self, lat: float, lon: float, location: CitySearchResult = None) -> Measurement:
        raw_data = self._make_request(
            'air-quality',
            params={
                'latitude': lat,
                'longitude': lon,
                'current': ','.join(self.COMPONENTS),
                'timezone': 'GMT',
            },
            base_url=self.AIR_QUALITY_URL,
        )

        current = (raw_data or {}).get('current')
        if not current:
            logger.error(f"No air quality data received for ({lat}, {lon})")
            raise UpstreamError('No air quality data available')

        pollutants = {
            our_key: current[api_key]
            for api_key, our_key in self.COMPONENTS.items()
            if current.get(api_key) is not None
        }

        sub_indices = [
            calculate_aqi(pollutants[key], key)
            for key in ('pm25', 'pm10')
            if key in pollutants
        ]
        if not sub_indices:
            logger.error(f"No particulate readings for ({lat}, {lon})")
            raise UpstreamError('No particulate matter readings available')

        try:
            weather = self._fetch_current_weather(lat, lon)
        except UpstreamError:
            logger.warning(f"Weather unavailable for ({lat}, {lon}), continuing without it")
            weather = {}

        return Measurement(
            aqi=min(max(sub_indices), MAX_AQI),
            dominant_pollutant=get_dominant_pollutant(pollutants),
            pollutants=pollutants,
            temperature=weather.get('temperature_2m'),
            humidity=weather.get('relative_humidity_2m'),
            pressure=weather.get('pressure_msl'),
            timestamp=self._parse_time(current.get('time')),
            location=location,
            source=self.SOURCE_CODE,
        )


class OpenMeteoWeatherAdapter(OpenMeteoAdapter):
    """
    Weather-proxy provider.

    Estimates AQI from temperature, humidity, pressure and weather code, and
    splits it into synthetic pollutant values. Use only where no sampled data
    is available.
    """

    SOURCE_NAME = "Open-Meteo Weather"
    SOURCE_CODE = "OPENMETEO_WEATHER"
    QUALITY_LEVEL = "estimated"

    ACCURACY_DISCLAIMER = (
        "AQI is estimated from weather conditions, not measured pollutant "
        "concentrations; values are indicative only."
    )

    POLLUTANT_FACTORS = {
        'pm25': 0.4,
        'pm10': 0.6,
        'no2': 0.3,
        'o3': 0.2,
        'so2': 0.1,
        'co': 0.15,
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        logger.info(f"{self.SOURCE_NAME}: {self.ACCURACY_DISCLAIMER}")

    def _measure(self, lat: float, lon: float, location: CitySearchResult = None) -> Measurement:
        weather = self._fetch_current_weather(lat, lon)
        aqi = self.estimate_aqi_from_weather(weather)

        logger.debug(f"Estimated AQI {aqi} from weather for ({lat}, {lon})")

        pollutants = {
            key: aqi * factor for key, factor in self.POLLUTANT_FACTORS.items()
        }

        return Measurement(
            aqi=aqi,
            dominant_pollutant=get_dominant_pollutant_by_concentration(pollutants),
            pollutants=pollutants,
            temperature=weather.get('temperature_2m'),
            humidity=weather.get('relative_humidity_2m'),
            pressure=weather.get('pressure_msl'),
            timestamp=timezone.now(),
            location=location,
            source=self.SOURCE_CODE,
        )

    @staticmethod
    def estimate_aqi_from_weather(weather: Dict) -> int:
        """
        Heuristic AQI from current weather.

        Starts at 50 and adds penalties for temperature extremes, high
        humidity, low pressure, and fog or precipitation. Capped at 500.
        """
        # A missing reading falls back to a neutral default; a real 0 (e.g. 0 °C) is kept
        def reading(key, default):
            value = weather.get(key)
            return default if value is None else value

        aqi = 50

        temp = reading('temperature_2m', 20)
        if temp > 30 or temp < 0:
            aqi += 20
        elif temp > 25 or temp < 5:
            aqi += 10

        humidity = reading('relative_humidity_2m', 50)
        if humidity > 80:
            aqi += 30
        elif humidity > 70:
            aqi += 15

        pressure = reading('pressure_msl', 1013)
        if pressure < 1000:
            aqi += 50
        elif pressure < 1010:
            aqi += 25

        weather_code = reading('weather_code', 0)
        if 50 <= weather_code <= 67:  # drizzle, fog/mist, rain
            aqi += 40
        if 70 <= weather_code <= 86:  # snow, showers
            aqi += 30

        return min(aqi, MAX_AQI)
