"""
URL routing for API endpoints.
"""
from django.urls import path

from .views import AirQualityView, CitySearchView, HealthAdviceView, HealthCheckView, HistoryView

app_name = 'api'

urlpatterns = [
    path('aqi/', AirQualityView.as_view(), name='aqi'),
    path('aqi/history/', HistoryView.as_view(), name='aqi-history'),
    path('health-advice/', HealthAdviceView.as_view(), name='health-advice'),
    path('cities/', CitySearchView.as_view(), name='cities'),
    path('health/', HealthCheckView.as_view(), name='health'),
]
