"""
Test settings for the AQI dashboard project.
"""
from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'aqi-dashboard-tests',
    }
}

REST_FRAMEWORK = REST_FRAMEWORK.copy()
REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []
REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {}

API_KEYS = {
    'OPENWEATHERMAP': '',
}

AIR_QUALITY_SETTINGS = {
    **AIR_QUALITY_SETTINGS,
    'PROVIDER': 'OPENMETEO',
    'CACHE_ENABLED': True,
    'CACHE_DEFAULT_TTL': 3600,
    'REQUEST_TIMEOUT': 10,
}

LOGGING['root']['level'] = 'WARNING'
LOGGING['loggers']['apps']['level'] = 'WARNING'
