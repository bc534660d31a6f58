"""
Domain exceptions for the AQI dashboard.

Each error carries the HTTP status and short code the API layer renders.
"""


class AirQualityError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code = 500
    default_code = 'INTERNAL_ERROR'
    default_message = 'Failed to fetch AQI data'

    def __init__(self, message=None, code=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class InvalidParameterError(AirQualityError):
    """Bad input: missing city, invalid coordinates, out-of-range hours."""
    status_code = 400
    default_code = 'INVALID_PARAMS'
    default_message = 'Invalid parameters'


class UnsupportedPollutant(InvalidParameterError, ValueError):
    """No breakpoint table exists for the requested pollutant."""
    default_code = 'UNSUPPORTED_POLLUTANT'
    default_message = 'Unsupported pollutant'


class LocationNotFound(AirQualityError):
    """The provider could not resolve the requested city."""
    status_code = 404
    default_code = 'NOT_FOUND'
    default_message = 'Location not found'


class ProviderNotConfigured(AirQualityError):
    """Required provider credentials are missing."""
    status_code = 503
    default_code = 'PROVIDER_NOT_CONFIGURED'
    default_message = 'AQI provider is not configured'


class UpstreamError(AirQualityError):
    """The provider call failed or returned no usable data."""
    status_code = 502
    default_code = 'UPSTREAM_ERROR'
    default_message = 'AQI provider request failed'


class StorageDegraded(Exception):
    """
    Cache or history store failure.

    Never reaches API callers; the orchestrator logs it and carries on.
    """

    def __init__(self, stage, error):
        self.stage = stage
        self.error = error
        super().__init__(f"{stage} failed: {error}")
