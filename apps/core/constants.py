"""
Constants and lookup data for the AQI dashboard.
"""
from django.core.exceptions import ImproperlyConfigured
from django.db import models


class AQICategory(models.TextChoices):
    """Six ordered EPA AQI tiers, best to worst."""
    GOOD = 'good', 'Good'
    MODERATE = 'moderate', 'Moderate'
    UNHEALTHY_SENSITIVE = 'unhealthy_sensitive', 'Unhealthy for Sensitive Groups'
    UNHEALTHY = 'unhealthy', 'Unhealthy'
    VERY_UNHEALTHY = 'very_unhealthy', 'Very Unhealthy'
    HAZARDOUS = 'hazardous', 'Hazardous'


def ensure_exhaustive(table, table_name):
    """
    Verify that a per-category lookup table has exactly one entry per AQICategory.

    Raises:
        ImproperlyConfigured: if a category is missing or an unknown key is present
    """
    keys = set(table)
    missing = [c.value for c in AQICategory if c not in keys]
    extra = [str(k) for k in keys if k not in AQICategory.values]
    if missing or extra:
        raise ImproperlyConfigured(
            f"{table_name} must cover every AQI category "
            f"(missing={missing}, unknown={extra})"
        )
    return table


# EPA AQI Categories (US Standard), ordered by min_value
EPA_AQI_CATEGORIES = [
    {
        'code': AQICategory.GOOD,
        'min_value': 0,
        'max_value': 50,
        'category': AQICategory.GOOD.label,
        'color_hex': '#00E400',
        'text_color': '#000000',
        'description': 'Air quality is satisfactory, and air pollution poses little or no risk.',
    },
    {
        'code': AQICategory.MODERATE,
        'min_value': 51,
        'max_value': 100,
        'category': AQICategory.MODERATE.label,
        'color_hex': '#FFFF00',
        'text_color': '#000000',
        'description': 'Air quality is acceptable. However, there may be a risk for some people, particularly those who are unusually sensitive to air pollution.',
    },
    {
        'code': AQICategory.UNHEALTHY_SENSITIVE,
        'min_value': 101,
        'max_value': 150,
        'category': AQICategory.UNHEALTHY_SENSITIVE.label,
        'color_hex': '#FF7E00',
        'text_color': '#FFFFFF',
        'description': 'Members of sensitive groups may experience health effects. The general public is less likely to be affected.',
    },
    {
        'code': AQICategory.UNHEALTHY,
        'min_value': 151,
        'max_value': 200,
        'category': AQICategory.UNHEALTHY.label,
        'color_hex': '#FF0000',
        'text_color': '#FFFFFF',
        'description': 'Some members of the general public may experience health effects; members of sensitive groups may experience more serious health effects.',
    },
    {
        'code': AQICategory.VERY_UNHEALTHY,
        'min_value': 201,
        'max_value': 300,
        'category': AQICategory.VERY_UNHEALTHY.label,
        'color_hex': '#8F3F97',
        'text_color': '#FFFFFF',
        'description': 'Health alert: The risk of health effects is increased for everyone.',
    },
    {
        'code': AQICategory.HAZARDOUS,
        'min_value': 301,
        'max_value': 500,
        'category': AQICategory.HAZARDOUS.label,
        'color_hex': '#7E0023',
        'text_color': '#FFFFFF',
        'description': 'Health warning of emergency conditions: everyone is more likely to be affected.',
    },
]

EPA_AQI_CATEGORY_BY_CODE = ensure_exhaustive(
    {info['code']: info for info in EPA_AQI_CATEGORIES},
    'EPA_AQI_CATEGORIES',
)

MAX_AQI = 500

# EPA breakpoint tables: (c_low, c_high, aqi_low, aqi_high), concentrations in µg/m³
AQI_BREAKPOINTS = {
    'pm25': [
        (0.0, 12.0, 0, 50),
        (12.1, 35.4, 51, 100),
        (35.5, 55.4, 101, 150),
        (55.5, 150.4, 151, 200),
        (150.5, 250.4, 201, 300),
        (250.5, 500.4, 301, 500),
    ],
    'pm10': [
        (0, 54, 0, 50),
        (55, 154, 51, 100),
        (155, 254, 101, 150),
        (255, 354, 151, 200),
        (355, 424, 201, 300),
        (425, 604, 301, 500),
    ],
}

# Decimal places the breakpoint tables are published with
BREAKPOINT_PRECISION = {
    'pm25': 1,
    'pm10': 0,
}

POLLUTANT_ALIASES = {
    'pm25': 'pm25',
    'pm2.5': 'pm25',
    'pm2_5': 'pm25',
    'pm10': 'pm10',
}

# Canonical order for dominant-pollutant selection (first wins ties)
BREAKPOINT_POLLUTANT_ORDER = ['pm25', 'pm10']
CONCENTRATION_POLLUTANT_ORDER = ['pm25', 'pm10', 'no2', 'o3', 'so2', 'co']

CACHE_KEY_PREFIX = 'aqi'
