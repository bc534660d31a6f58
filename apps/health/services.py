"""
Health interpretation of AQI categories.

Translates an AQI category (and optionally the air temperature) into health
impact text, recommendations, sensitive groups, activity guidance and
preventive actions. Every table is keyed by AQICategory and checked for
completeness at import time.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from apps.core.constants import AQICategory, ensure_exhaustive

C = AQICategory

SAFE, LIMITED, AVOID = 'safe', 'limited', 'avoid'
NORMAL, FILTERED, CLOSED = 'normal', 'filtered', 'closed'


@dataclass(frozen=True)
class HealthInterpretation:
    impact: str
    recommendation: str
    sensitive_groups: List[str] = field(default_factory=list)
    activities: Dict[str, str] = field(default_factory=dict)


HEALTH_IMPACTS = ensure_exhaustive({
    C.GOOD: 'Air quality is considered satisfactory, and air pollution poses little or no risk.',
    C.MODERATE: 'Air quality is acceptable for most people. However, sensitive individuals may experience minor respiratory symptoms.',
    C.UNHEALTHY_SENSITIVE: 'Sensitive groups (children, elderly, people with respiratory conditions) may experience health effects.',
    C.UNHEALTHY: 'Everyone may begin to experience health effects. Sensitive groups may experience more serious effects.',
    C.VERY_UNHEALTHY: 'Health alert: Everyone may experience more serious health effects.',
    C.HAZARDOUS: 'Health warnings of emergency conditions. The entire population is likely to be affected.',
}, 'HEALTH_IMPACTS')

RECOMMENDATIONS = ensure_exhaustive({
    C.GOOD: 'Perfect day for outdoor activities. Enjoy your time outside!',
    C.MODERATE: 'Most people can enjoy outdoor activities. Unusually sensitive individuals should consider limiting prolonged outdoor exertion.',
    C.UNHEALTHY_SENSITIVE: 'Sensitive groups should limit prolonged outdoor exertion. Keep windows closed if possible.',
    C.UNHEALTHY: 'Everyone should limit prolonged outdoor exertion. Keep windows closed. Consider wearing a mask if you must go outside.',
    C.VERY_UNHEALTHY: 'Avoid all outdoor activities. Stay indoors with windows closed. Use air purifiers if available.',
    C.HAZARDOUS: 'Emergency conditions. Stay indoors and keep activity levels low. Seal windows and doors. Use air purifiers.',
}, 'RECOMMENDATIONS')

SENSITIVE_GROUPS = ensure_exhaustive({
    C.GOOD: [],
    C.MODERATE: ['Unusually sensitive individuals'],
    C.UNHEALTHY_SENSITIVE: ['Children', 'Elderly', 'People with asthma', 'People with heart disease'],
    C.UNHEALTHY: [
        'Children',
        'Elderly',
        'People with respiratory conditions',
        'People with heart disease',
        'Active individuals',
    ],
    C.VERY_UNHEALTHY: ['Everyone', 'Especially children and elderly'],
    C.HAZARDOUS: ['Entire population'],
}, 'SENSITIVE_GROUPS')

ACTIVITIES = ensure_exhaustive({
    C.GOOD: {'outdoor': SAFE, 'indoor': NORMAL, 'exercise': SAFE},
    C.MODERATE: {'outdoor': SAFE, 'indoor': NORMAL, 'exercise': SAFE},
    C.UNHEALTHY_SENSITIVE: {'outdoor': LIMITED, 'indoor': NORMAL, 'exercise': LIMITED},
    C.UNHEALTHY: {'outdoor': LIMITED, 'indoor': FILTERED, 'exercise': LIMITED},
    C.VERY_UNHEALTHY: {'outdoor': AVOID, 'indoor': CLOSED, 'exercise': AVOID},
    C.HAZARDOUS: {'outdoor': AVOID, 'indoor': CLOSED, 'exercise': AVOID},
}, 'ACTIVITIES')

PREVENTIVE_ACTIONS = ensure_exhaustive({
    C.GOOD: ['Enjoy outdoor activities', 'Keep windows open for fresh air'],
    C.MODERATE: [
        'Outdoor activities are generally safe',
        'Sensitive individuals should monitor symptoms',
    ],
    C.UNHEALTHY_SENSITIVE: [
        'Sensitive groups should limit outdoor exposure',
        'Close windows during peak pollution hours',
        'Reduce physical exertion outdoors',
    ],
    C.UNHEALTHY: [
        'Limit time outdoors',
        'Wear a mask when outside',
        'Keep windows and doors closed',
        'Use air purifiers indoors',
        'Avoid strenuous outdoor activities',
    ],
    C.VERY_UNHEALTHY: [
        'Avoid all outdoor activities',
        'Stay indoors with windows closed',
        'Use air purifiers',
        'Wear N95 masks if you must go outside',
        'Check on vulnerable family members',
    ],
    C.HAZARDOUS: [
        'Stay indoors at all times',
        'Seal windows and doors',
        'Use HEPA air purifiers',
        'Do not exercise',
        'Seek medical attention if experiencing symptoms',
        'Follow emergency guidelines',
    ],
}, 'PREVENTIVE_ACTIONS')

HOT_WEATHER_ACTIONS = ['Stay hydrated', 'Avoid heat exposure']
COLD_WEATHER_ACTIONS = ['Dress warmly', 'Limit cold air exposure']


def adjust_recommendation_for_temperature(recommendation: str, temperature: Optional[float]) -> str:
    """Append heat or cold advice to a recommendation (temperature in °C)."""
    if temperature is None:
        return recommendation

    if temperature > 35:
        adjustment = ' Stay hydrated and avoid heat exposure.'
    elif temperature > 30:
        adjustment = ' Drink plenty of water and seek shade when outdoors.'
    elif temperature < 0:
        adjustment = ' Dress warmly and limit time in cold air.'
    elif temperature < 10:
        adjustment = ' Wear appropriate clothing for cold weather.'
    else:
        adjustment = ''

    return recommendation + adjustment


def interpret(aqi: float, category: str, temperature: Optional[float] = None) -> HealthInterpretation:
    """
    Build the complete health interpretation for a category.

    Args:
        aqi: AQI value the category was derived from
        category: AQICategory code
        temperature: optional air temperature in °C, adjusts the recommendation

    Returns:
        HealthInterpretation
    """
    category = AQICategory(category)

    return HealthInterpretation(
        impact=HEALTH_IMPACTS[category],
        recommendation=adjust_recommendation_for_temperature(RECOMMENDATIONS[category], temperature),
        sensitive_groups=list(SENSITIVE_GROUPS[category]),
        activities=dict(ACTIVITIES[category]),
    )


def preventive_actions(category: str, temperature: Optional[float] = None) -> List[str]:
    """Ordered preventive actions for a category, with hot/cold weather additions."""
    actions = list(PREVENTIVE_ACTIONS[AQICategory(category)])

    if temperature is not None:
        if temperature > 30:
            actions.extend(HOT_WEATHER_ACTIONS)
        elif temperature < 5:
            actions.extend(COLD_WEATHER_ACTIONS)

    return actions
