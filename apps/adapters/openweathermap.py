"""
OpenWeatherMap adapter for global air pollution data.
"""
import logging
from datetime import datetime, timezone as dt_timezone
from typing import List, Dict

from django.utils import timezone

from apps.core.exceptions import LocationNotFound, UpstreamError
from apps.core.utils import get_dominant_pollutant_by_concentration

from .base import BaseAdapter, CitySearchResult, Measurement

logger = logging.getLogger(__name__)


class OpenWeatherMapAdapter(BaseAdapter):
    """
    Adapter for the OpenWeatherMap Air Pollution and Geocoding APIs.

    OpenWeatherMap reports a vendor index on a 1-5 scale rather than pollutant
    sub-indices, so the AQI is an approximate mapping onto the EPA scale and
    the dominant pollutant is ranked by raw concentration.
    """

    SOURCE_NAME = "OpenWeatherMap"
    SOURCE_CODE = "OPENWEATHERMAP"
    API_BASE_URL = "https://api.openweathermap.org/"
    GEO_PATH = "geo/1.0/direct"
    POLLUTION_PATH = "data/2.5/air_pollution"
    REQUIRES_API_KEY = True
    QUALITY_LEVEL = "model"

    # OWM index -> representative EPA AQI
    INDEX_TO_AQI = {
        1: 25,   # Good: 0-50
        2: 75,   # Fair: 51-100
        3: 125,  # Moderate: 101-150
        4: 175,  # Poor: 151-200
        5: 250,  # Very Poor: 201-300
    }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        base_url = self.settings.get('OPENWEATHERMAP_BASE_URL')
        if base_url:
            self.API_BASE_URL = base_url

    def _add_api_key(self, params: Dict, headers: Dict):
        """OpenWeatherMap uses 'appid' parameter."""
        if self.api_key:
            params['appid'] = self.api_key

    def search_cities(self, query: str, limit: int = 5) -> List[CitySearchResult]:
        """
        Search for cities using direct geocoding.

        Args:
            query: Free-text place name
            limit: Maximum number of results

        Returns:
            List of CitySearchResult in provider relevance order
        """
        self.ensure_configured()

        raw_data = self._make_request(self.GEO_PATH, params={'q': query, 'limit': limit})

        if not raw_data:
            logger.info(f"No cities found for query: {query}")
            return []

        return [
            CitySearchResult(
                name=city.get('name', query),
                country=city.get('country') or 'Unknown',
                lat=float(city['lat']),
                lon=float(city['lon']),
            )
            for city in raw_data[:limit]
            if 'lat' in city and 'lon' in city
        ]

    def fetch_by_city(self, city_name: str) -> Measurement:
        """
        Geocode a city and fetch its current air pollution data.
        """
        self.ensure_configured()

        matches = self.search_cities(city_name, limit=1)
        if not matches:
            logger.error(f"City not found: {city_name}")
            raise LocationNotFound(f'City "{city_name}" not found')

        location = matches[0]
        logger.debug(f"Got coordinates for {city_name}: {location.lat}, {location.lon}")

        return self._fetch_pollution(location.lat, location.lon, location=location)

    def fetch_by_coordinates(self, lat: float, lon: float) -> Measurement:
        """
        Fetch current air pollution data for coordinates.
        """
        self.ensure_configured()
        return self._fetch_pollution(lat, lon)

    def _fetch_pollution(self, lat: float, lon: float, location: CitySearchResult = None) -> Measurement:
        raw_data = self._make_request(self.POLLUTION_PATH, params={'lat': lat, 'lon': lon})
        return self.normalize_data(raw_data, location=location)

    def normalize_data(self, raw_data: Dict, location: CitySearchResult = None) -> Measurement:
        """
        Normalize an OpenWeatherMap air_pollution response to a Measurement.

        Raises:
            UpstreamError: if the response carries no readings
        """
        if not raw_data or not raw_data.get('list'):
            logger.error("No air pollution data received from OpenWeatherMap")
            raise UpstreamError('No air pollution data available')

        item = raw_data['list'][0]

        index = (item.get('main') or {}).get('aqi') or 1
        components = item.get('components') or {}

        pollutants = {
            'pm25': components.get('pm2_5'),
            'pm10': components.get('pm10'),
            'o3': components.get('o3'),
            'no2': components.get('no2'),
            'so2': components.get('so2'),
            'co': components.get('co'),
        }

        # Remove None values
        pollutants = {k: v for k, v in pollutants.items() if v is not None}

        dt = item.get('dt')
        if dt:
            timestamp = datetime.fromtimestamp(dt, tz=dt_timezone.utc)
        else:
            timestamp = timezone.now()

        aqi = self._convert_owm_aqi_to_epa(index)
        logger.debug(f"Received OpenWeatherMap index {index} -> AQI {aqi}")

        return Measurement(
            aqi=aqi,
            dominant_pollutant=get_dominant_pollutant_by_concentration(pollutants),
            pollutants=pollutants,
            timestamp=timestamp,
            location=location,
            source=self.SOURCE_CODE,
        )

    def _convert_owm_aqi_to_epa(self, index: int) -> int:
        """
        Convert OpenWeatherMap's 1-5 AQI scale to an approximate EPA 0-500 value.

        OWM Scale:
        1 = Good
        2 = Fair
        3 = Moderate
        4 = Poor
        5 = Very Poor
        """
        return self.INDEX_TO_AQI.get(index, 0)
