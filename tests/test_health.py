"""
Tests for the health interpretation tables.
"""
import pytest

from apps.core.constants import AQICategory
from apps.health.services import (
    ACTIVITIES,
    COLD_WEATHER_ACTIONS,
    HEALTH_IMPACTS,
    HOT_WEATHER_ACTIONS,
    PREVENTIVE_ACTIONS,
    RECOMMENDATIONS,
    SENSITIVE_GROUPS,
    HealthInterpretation,
    adjust_recommendation_for_temperature,
    interpret,
    preventive_actions,
)


class TestTables:

    @pytest.mark.parametrize('table', [
        HEALTH_IMPACTS, RECOMMENDATIONS, SENSITIVE_GROUPS, ACTIVITIES, PREVENTIVE_ACTIONS,
    ])
    def test_every_category_covered(self, table):
        assert set(table) == set(AQICategory)

    def test_outdoor_guidance_gets_stricter(self):
        outdoor = [ACTIVITIES[category]['outdoor'] for category in AQICategory]
        assert outdoor == ['safe', 'safe', 'limited', 'limited', 'avoid', 'avoid']

    def test_indoor_guidance(self):
        indoor = [ACTIVITIES[category]['indoor'] for category in AQICategory]
        assert indoor == ['normal', 'normal', 'normal', 'filtered', 'closed', 'closed']

    def test_exercise_mirrors_outdoor(self):
        for category in AQICategory:
            assert ACTIVITIES[category]['exercise'] == ACTIVITIES[category]['outdoor']


class TestInterpret:

    def test_good(self):
        result = interpret(25, 'good')
        assert isinstance(result, HealthInterpretation)
        assert result.sensitive_groups == []
        assert result.activities == {'outdoor': 'safe', 'indoor': 'normal', 'exercise': 'safe'}
        assert result.recommendation == RECOMMENDATIONS[AQICategory.GOOD]

    def test_hazardous(self):
        result = interpret(450, AQICategory.HAZARDOUS)
        assert result.sensitive_groups == ['Entire population']
        assert result.activities['indoor'] == 'closed'

    def test_unknown_category(self):
        with pytest.raises(ValueError):
            interpret(25, 'excellent')

    def test_result_is_a_copy(self):
        first = interpret(120, 'unhealthy_sensitive')
        first.sensitive_groups.append('Everyone')
        assert 'Everyone' not in interpret(120, 'unhealthy_sensitive').sensitive_groups

    def test_temperature_adjusts_recommendation(self):
        result = interpret(25, 'good', temperature=36)
        assert result.recommendation.endswith(' Stay hydrated and avoid heat exposure.')


class TestTemperatureAdjustment:

    @pytest.mark.parametrize('temperature,suffix', [
        (36, ' Stay hydrated and avoid heat exposure.'),
        (31, ' Drink plenty of water and seek shade when outdoors.'),
        (-2, ' Dress warmly and limit time in cold air.'),
        (5, ' Wear appropriate clothing for cold weather.'),
    ])
    def test_suffixes(self, temperature, suffix):
        assert adjust_recommendation_for_temperature('Base.', temperature) == 'Base.' + suffix

    @pytest.mark.parametrize('temperature', [None, 10, 20, 30])
    def test_mild_or_missing_temperature_unchanged(self, temperature):
        assert adjust_recommendation_for_temperature('Base.', temperature) == 'Base.'


class TestPreventiveActions:

    def test_base_actions_in_order(self):
        assert preventive_actions('good') == ['Enjoy outdoor activities', 'Keep windows open for fresh air']

    def test_hot_weather(self):
        actions = preventive_actions('moderate', temperature=31)
        assert actions[-2:] == HOT_WEATHER_ACTIONS

    def test_cold_weather(self):
        actions = preventive_actions('moderate', temperature=4)
        assert actions[-2:] == COLD_WEATHER_ACTIONS

    @pytest.mark.parametrize('temperature', [5, 30, None])
    def test_thresholds_are_exclusive(self, temperature):
        assert preventive_actions('moderate', temperature) == PREVENTIVE_ACTIONS[AQICategory.MODERATE]

    def test_does_not_mutate_table(self):
        preventive_actions('good', temperature=40)
        assert len(PREVENTIVE_ACTIONS[AQICategory.GOOD]) == 2
