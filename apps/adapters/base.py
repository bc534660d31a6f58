"""
Base adapter class for all air quality data providers.
"""
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Optional

import requests
from django.conf import settings
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from apps.core.exceptions import ProviderNotConfigured, UpstreamError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CitySearchResult:
    """A geocoded place as returned by a provider's search endpoint."""
    name: str
    country: str
    lat: float
    lon: float

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'country': self.country,
            'latitude': self.lat,
            'longitude': self.lon,
        }


@dataclass(frozen=True)
class Measurement:
    """
    Point-in-time air quality observation produced by a provider.

    `pollutants` maps 'pm25', 'pm10', 'o3', 'no2', 'so2', 'co' to
    concentrations; absent readings are left out.
    """
    aqi: int
    dominant_pollutant: str
    timestamp: datetime
    pollutants: Dict[str, float] = field(default_factory=dict)
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    location: Optional[CitySearchResult] = None
    source: str = ''


class BaseAdapter(ABC):
    """
    Abstract base class for all provider adapters.
    Provides common functionality for API calls, credentials, timeouts and error handling.
    """

    # Subclasses must define these
    SOURCE_NAME = None
    SOURCE_CODE = None
    API_BASE_URL = None
    REQUIRES_API_KEY = True
    QUALITY_LEVEL = 'model'

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        if not all([self.SOURCE_NAME, self.SOURCE_CODE, self.API_BASE_URL]):
            raise ValueError("Adapter must define SOURCE_NAME, SOURCE_CODE, and API_BASE_URL")

        self.settings = settings.AIR_QUALITY_SETTINGS
        self.api_key = api_key if api_key is not None else self._get_api_key()
        self.session = session or self._create_session()

    def _get_api_key(self) -> Optional[str]:
        """Get API key from settings."""
        if not self.REQUIRES_API_KEY:
            return None

        api_key = settings.API_KEYS.get(self.SOURCE_CODE)
        if not api_key:
            logger.warning(f"No API key found for {self.SOURCE_NAME}")

        return api_key

    def _create_session(self) -> requests.Session:
        """Create requests session. MAX_RETRIES defaults to 0: one attempt per request."""
        session = requests.Session()

        retry_strategy = Retry(
            total=self.settings.get('MAX_RETRIES', 0),
            backoff_factor=self.settings.get('RETRY_BACKOFF_FACTOR', 0),
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)

        return session

    def ensure_configured(self):
        """Raise ProviderNotConfigured when required credentials are missing."""
        if self.REQUIRES_API_KEY and not self.api_key:
            logger.error(f"{self.SOURCE_NAME} API key is not set")
            raise ProviderNotConfigured(
                f"{self.SOURCE_NAME} API key is not configured. "
                f"Please set the environment variable."
            )

    def _make_request(
        self,
        endpoint: str,
        params: Dict = None,
        headers: Dict = None,
        base_url: str = None,
    ) -> Dict:
        """
        Make an HTTP GET request with timeout, logging and error translation.

        Args:
            endpoint: API endpoint path
            params: Query parameters
            headers: HTTP headers
            base_url: Overrides API_BASE_URL for providers with several hosts

        Returns:
            Response data as dict

        Raises:
            UpstreamError: on transport errors, HTTP errors or non-JSON bodies
        """
        url = f"{(base_url or self.API_BASE_URL).rstrip('/')}/{endpoint.lstrip('/')}"
        params = dict(params or {})
        headers = dict(headers or {})

        self._add_api_key(params, headers)

        start_time = time.time()

        try:
            timeout = self.settings.get('REQUEST_TIMEOUT', 10)
            response = self.session.get(url, params=params, headers=headers, timeout=timeout)
            response_time_ms = int((time.time() - start_time) * 1000)

            logger.debug(
                f"{self.SOURCE_NAME} {endpoint} -> {response.status_code} in {response_time_ms}ms"
            )

            response.raise_for_status()
            return response.json()

        except requests.exceptions.RequestException as e:
            # The exception text can echo the query string, which holds the key
            status = getattr(getattr(e, 'response', None), 'status_code', None)
            logger.error(f"{self.SOURCE_NAME} API error on {endpoint} (status={status}): {type(e).__name__}")
            raise UpstreamError(f"{self.SOURCE_NAME} request failed") from e

        except ValueError as e:
            logger.error(f"{self.SOURCE_NAME} returned invalid JSON for {endpoint}")
            raise UpstreamError(f"{self.SOURCE_NAME} returned an invalid response") from e

    def _add_api_key(self, params: Dict, headers: Dict):
        """
        Add API key to request. Override in subclass if needed.
        Default: adds to query params as 'api_key'.
        """
        if self.REQUIRES_API_KEY and self.api_key:
            params['api_key'] = self.api_key

    @abstractmethod
    def fetch_by_city(self, city_name: str) -> Measurement:
        """
        Fetch the current measurement for a city name.

        Raises:
            LocationNotFound: if the city cannot be geocoded
            ProviderNotConfigured: if credentials are missing
            UpstreamError: if the provider fails or returns no data
        """

    @abstractmethod
    def fetch_by_coordinates(self, lat: float, lon: float) -> Measurement:
        """Fetch the current measurement for a coordinate pair."""

    @abstractmethod
    def search_cities(self, query: str, limit: int = 5) -> List[CitySearchResult]:
        """Search places by name, ordered by provider relevance."""

    def is_available(self) -> bool:
        """Check if adapter has the credentials it needs."""
        return not self.REQUIRES_API_KEY or bool(self.api_key)

    def close(self):
        """Release the HTTP session."""
        self.session.close()
