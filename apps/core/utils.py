"""
Utility functions for AQI conversion and categorization.
"""
import math
from decimal import Decimal, ROUND_DOWN
from typing import Dict, Optional

from .constants import (
    AQI_BREAKPOINTS,
    BREAKPOINT_POLLUTANT_ORDER,
    BREAKPOINT_PRECISION,
    CONCENTRATION_POLLUTANT_ORDER,
    EPA_AQI_CATEGORIES,
    MAX_AQI,
    POLLUTANT_ALIASES,
)
from .exceptions import InvalidParameterError, UnsupportedPollutant


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def normalize_pollutant(pollutant: str) -> str:
    """
    Map a pollutant identifier ('PM2.5', 'pm2_5', 'PM10', ...) to its table key.

    Raises:
        UnsupportedPollutant: if no breakpoint table exists for it
    """
    key = POLLUTANT_ALIASES.get(str(pollutant).strip().lower())
    if key is None or key not in AQI_BREAKPOINTS:
        raise UnsupportedPollutant(f"Unknown pollutant: {pollutant}")
    return key


def _truncate(concentration: float, places: int) -> Decimal:
    """Truncate a concentration to the precision its breakpoint table uses."""
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(concentration)).quantize(quantum, rounding=ROUND_DOWN)


def _find_band(table, concentration: Decimal):
    for band in table:
        if Decimal(str(band[0])) <= concentration <= Decimal(str(band[1])):
            return band
    return None


def calculate_aqi(concentration: float, pollutant: str) -> int:
    """
    Calculate AQI from a pollutant concentration using EPA breakpoints.

    AQI = (aqi_high - aqi_low) / (c_high - c_low) * (C - c_low) + aqi_low

    Args:
        concentration: non-negative concentration in µg/m³
        pollutant: pollutant identifier, e.g. 'PM2.5' or 'pm10'

    Returns:
        int: AQI in [0, 500]; concentrations above the top band saturate at 500
    """
    key = normalize_pollutant(pollutant)

    if concentration is None or math.isnan(concentration) or concentration < 0:
        raise InvalidParameterError(
            f"Concentration must be a non-negative number, got {concentration}"
        )

    table = AQI_BREAKPOINTS[key]
    if concentration > table[-1][1]:
        return MAX_AQI

    band = _find_band(table, Decimal(str(concentration)))
    if band is None:
        # Between two published bands: truncate into the lower one
        concentration = _truncate(concentration, BREAKPOINT_PRECISION[key])
        band = _find_band(table, concentration)
        if band is None:
            return MAX_AQI

    c_low, c_high, aqi_low, aqi_high = band
    aqi = (aqi_high - aqi_low) / (c_high - c_low) * (float(concentration) - c_low) + aqi_low
    return round_half_up(aqi)


def get_dominant_pollutant(pollutants: Dict[str, Optional[float]]) -> str:
    """
    Pick the pollutant with the highest breakpoint AQI.

    Only PM2.5 and PM10 have breakpoint tables. Missing readings count as 0 and
    ties go to the earlier pollutant in canonical order.

    Args:
        pollutants: concentrations keyed by 'pm25', 'pm10', ...

    Returns:
        str: 'pm25' or 'pm10'
    """
    dominant = BREAKPOINT_POLLUTANT_ORDER[0]
    best = 0

    for key in BREAKPOINT_POLLUTANT_ORDER:
        value = pollutants.get(key)
        aqi = calculate_aqi(value, key) if value else 0
        if aqi > best:
            dominant, best = key, aqi

    return dominant


def get_dominant_pollutant_by_concentration(pollutants: Dict[str, Optional[float]]) -> str:
    """
    Pick the pollutant with the largest raw concentration.

    Used for vendor indices where no per-pollutant AQI is available. Raw values
    are compared directly regardless of unit; ties go to the earlier pollutant
    in canonical order.
    """
    return max(
        CONCENTRATION_POLLUTANT_ORDER,
        key=lambda key: pollutants.get(key) or 0,
    )


def convert_aqi_to_category(aqi: float) -> Dict:
    """
    Convert AQI value to category information.

    Total over [0, inf): values above 500 are reported as hazardous. Negative
    input is the caller's responsibility.

    Args:
        aqi: AQI value

    Returns:
        dict: category information (code, category, color_hex, text_color, ...)
    """
    for category in EPA_AQI_CATEGORIES:
        if aqi <= category['max_value']:
            return category

    return EPA_AQI_CATEGORIES[-1]


def is_valid_aqi(aqi) -> bool:
    """Check that a value is a finite AQI in [0, 500]."""
    try:
        value = float(aqi)
    except (TypeError, ValueError):
        return False
    return not math.isnan(value) and 0 <= value <= MAX_AQI


def validate_coordinates(lat, lon):
    """
    Validate latitude and longitude values.

    Args:
        lat: latitude value
        lon: longitude value

    Returns:
        tuple: (is_valid, error_message)
    """
    try:
        lat = float(lat)
        lon = float(lon)

        if math.isnan(lat) or math.isnan(lon):
            return False, "Invalid coordinate format"

        if not (-90 <= lat <= 90):
            return False, "Latitude must be between -90 and 90"

        if not (-180 <= lon <= 180):
            return False, "Longitude must be between -180 and 180"

        return True, None

    except (TypeError, ValueError):
        return False, "Invalid coordinate format"


def round_coordinate(value: float, places: int = 3) -> float:
    """Round a coordinate for cache keys and history identities (3 places ≈ 100m)."""
    return float(round(Decimal(str(value)), places))
