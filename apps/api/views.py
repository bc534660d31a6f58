"""
API views for the AQI dashboard.
"""
import logging

from django.conf import settings
from django.core.cache import caches
from django.db import DatabaseError, connection
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.adapters import ADAPTERS, get_provider

from .exceptions import error_body
from .orchestrator import AirQualityOrchestrator
from .serializers import (
    AQIQuerySerializer,
    CitySearchQuerySerializer,
    CitySearchResultSerializer,
    HealthAdviceRequestSerializer,
    HistoryQuerySerializer,
)

logger = logging.getLogger(__name__)


def success_response(data, status_code=status.HTTP_200_OK) -> Response:
    return Response(
        {'success': True, 'data': data, 'timestamp': timezone.now().isoformat()},
        status=status_code,
    )


class AirQualityView(APIView):
    """
    GET /api/v1/aqi/?city=Paris
    GET /api/v1/aqi/?lat=48.85&lon=2.35

    Current AQI with category and health interpretation.
    """

    def get(self, request):
        serializer = AQIQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        with AirQualityOrchestrator() as orchestrator:
            if params.get('city'):
                data = orchestrator.get_aqi_for_city(params['city'])
            else:
                data = orchestrator.get_aqi_by_coordinates(params['lat'], params['lon'])

        return success_response(data)


class HistoryView(APIView):
    """
    GET /api/v1/aqi/history/?city=Paris&hours=24

    Stored measurements for a city with average/min/max/trend.
    """

    def get(self, request):
        serializer = HistoryQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        with AirQualityOrchestrator() as orchestrator:
            data = orchestrator.get_historical_aqi(params['city'], params['hours'])

        if data['summary'] is None:
            return Response(
                error_body(f"No historical data found for {data['cityName']}", 'NO_DATA'),
                status=status.HTTP_404_NOT_FOUND,
            )

        return success_response(data)


class HealthAdviceView(APIView):
    """
    POST /api/v1/health-advice/ {"aqi": 120, "temperature": 32}

    Health interpretation for an arbitrary AQI value.
    """

    def post(self, request):
        serializer = HealthAdviceRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        with AirQualityOrchestrator() as orchestrator:
            data = orchestrator.get_health_interpretation(
                params['aqi'], params.get('temperature')
            )

        return success_response(data)


class CitySearchView(APIView):
    """
    GET /api/v1/cities/?q=par

    Places matching a name, in provider relevance order.
    """

    def get(self, request):
        serializer = CitySearchQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        with AirQualityOrchestrator() as orchestrator:
            results = orchestrator.search_cities(serializer.validated_data['q'])

        return success_response(CitySearchResultSerializer(results, many=True).data)


class HealthCheckView(APIView):
    """
    GET /api/v1/health/

    Liveness of the database and the cache backend.
    """

    def get(self, request):
        checks = {
            'database': self._check_database(),
            'cache': self._check_cache(),
        }
        healthy = all(check == 'ok' for check in checks.values())

        return Response(
            {
                'success': healthy,
                'data': {
                    'status': 'healthy' if healthy else 'degraded',
                    'checks': checks,
                    'provider': self._provider_info(),
                },
                'timestamp': timezone.now().isoformat(),
            },
            status=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    @staticmethod
    def _provider_info() -> dict:
        code = settings.AIR_QUALITY_SETTINGS.get('PROVIDER', 'OPENMETEO').upper()
        if code not in ADAPTERS:
            return {'code': code, 'name': None, 'qualityLevel': None, 'configured': False}

        provider = get_provider(code)
        try:
            return {
                'code': code,
                'name': provider.SOURCE_NAME,
                'qualityLevel': provider.QUALITY_LEVEL,
                'configured': provider.is_available(),
            }
        finally:
            provider.close()

    @staticmethod
    def _check_database() -> str:
        try:
            with connection.cursor() as cursor:
                cursor.execute('SELECT 1')
            return 'ok'
        except DatabaseError as e:
            logger.error(f"Database health check failed: {e}")
            return 'error'

    @staticmethod
    def _check_cache() -> str:
        cache = caches[settings.AIR_QUALITY_SETTINGS.get('CACHE_ALIAS', 'default')]
        try:
            cache.set('healthcheck', 'ok', timeout=10)
            return 'ok' if cache.get('healthcheck') == 'ok' else 'error'
        except Exception as e:
            logger.error(f"Cache health check failed: {e}")
            return 'error'
