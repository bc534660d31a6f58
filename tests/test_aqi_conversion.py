"""
Tests for EPA breakpoint conversion, dominant pollutant selection and
category classification.
"""
import math

import pytest
from django.core.exceptions import ImproperlyConfigured

from apps.core.constants import (
    AQICategory,
    EPA_AQI_CATEGORIES,
    EPA_AQI_CATEGORY_BY_CODE,
    ensure_exhaustive,
)
from apps.core.exceptions import InvalidParameterError, UnsupportedPollutant
from apps.core.utils import (
    calculate_aqi,
    convert_aqi_to_category,
    get_dominant_pollutant,
    get_dominant_pollutant_by_concentration,
    is_valid_aqi,
    round_coordinate,
    round_half_up,
    validate_coordinates,
)


class TestCalculateAQI:

    # ==================== Band boundaries ====================

    def test_pm25_top_of_good_band(self):
        assert calculate_aqi(12.0, 'pm25') == 50

    def test_pm25_bottom_of_moderate_band(self):
        assert calculate_aqi(12.1, 'pm25') == 51

    def test_pm25_top_of_moderate_band(self):
        assert calculate_aqi(35.4, 'pm25') == 100

    def test_pm25_zero(self):
        assert calculate_aqi(0, 'pm25') == 0

    def test_pm25_mid_band(self):
        # (150 - 101) / (55.4 - 35.5) * (40 - 35.5) + 101 = 112.08
        assert calculate_aqi(40, 'PM2.5') == 112

    def test_pm10_mid_band(self):
        # 50 / 54 * 20 = 18.52
        assert calculate_aqi(20, 'PM10') == 19

    def test_pm10_band_edges(self):
        assert calculate_aqi(54, 'pm10') == 50
        assert calculate_aqi(55, 'pm10') == 51
        assert calculate_aqi(604, 'pm10') == 500

    # ==================== Gaps and saturation ====================

    def test_in_band_value_uses_raw_concentration(self):
        # 49 / 99 * (100.9 - 55) + 51 = 73.72
        assert calculate_aqi(100.9, 'pm10') == 74
        # 49 / 23.3 * (12.35 - 12.1) + 51 = 51.53
        assert calculate_aqi(12.35, 'pm25') == 52

    def test_gap_between_bands_resolves_to_lower_band(self):
        assert calculate_aqi(12.05, 'pm25') == 50
        assert calculate_aqi(54.9, 'pm10') == 50

    def test_above_top_band_saturates(self):
        assert calculate_aqi(500.5, 'pm25') == 500
        assert calculate_aqi(10000, 'pm25') == 500
        assert calculate_aqi(605, 'pm10') == 500
        assert calculate_aqi(math.inf, 'pm10') == 500

    def test_monotonic_in_concentration(self):
        values = [calculate_aqi(c / 10, 'pm25') for c in range(0, 5005)]
        assert values == sorted(values)
        assert all(0 <= v <= 500 for v in values)

    # ==================== Aliases and errors ====================

    @pytest.mark.parametrize('alias', ['pm25', 'PM25', 'PM2.5', 'pm2.5', 'pm2_5', ' PM2.5 '])
    def test_pm25_aliases(self, alias):
        assert calculate_aqi(40, alias) == 112

    def test_unsupported_pollutant(self):
        with pytest.raises(UnsupportedPollutant):
            calculate_aqi(40, 'o3')

    def test_unsupported_pollutant_is_value_error(self):
        with pytest.raises(ValueError):
            calculate_aqi(40, 'nox')

    def test_negative_concentration(self):
        with pytest.raises(InvalidParameterError):
            calculate_aqi(-0.1, 'pm25')

    def test_nan_concentration(self):
        with pytest.raises(InvalidParameterError):
            calculate_aqi(float('nan'), 'pm10')

    def test_pure(self):
        assert calculate_aqi(40, 'pm25') == calculate_aqi(40, 'pm25')


class TestDominantPollutant:

    def test_higher_sub_index_wins(self):
        assert get_dominant_pollutant({'pm25': 40, 'pm10': 20}) == 'pm25'

    def test_pm10_can_dominate(self):
        assert get_dominant_pollutant({'pm25': 5, 'pm10': 300}) == 'pm10'

    def test_tie_goes_to_pm25(self):
        # Both sub-indices are 50
        assert get_dominant_pollutant({'pm25': 12.0, 'pm10': 54}) == 'pm25'

    def test_missing_readings_count_as_zero(self):
        assert get_dominant_pollutant({}) == 'pm25'
        assert get_dominant_pollutant({'pm10': 30}) == 'pm10'
        assert get_dominant_pollutant({'pm25': None, 'pm10': 30}) == 'pm10'

    def test_other_pollutants_ignored(self):
        assert get_dominant_pollutant({'pm25': 10, 'o3': 500}) == 'pm25'

    def test_by_concentration_picks_largest_raw_value(self):
        assert get_dominant_pollutant_by_concentration({'pm25': 10, 'no2': 45, 'co': 30}) == 'no2'

    def test_by_concentration_tie_uses_canonical_order(self):
        assert get_dominant_pollutant_by_concentration({'o3': 20, 'no2': 20}) == 'no2'
        assert get_dominant_pollutant_by_concentration({}) == 'pm25'


class TestCategoryClassifier:

    @pytest.mark.parametrize('aqi,code', [
        (0, 'good'),
        (50, 'good'),
        (51, 'moderate'),
        (100, 'moderate'),
        (101, 'unhealthy_sensitive'),
        (150, 'unhealthy_sensitive'),
        (151, 'unhealthy'),
        (200, 'unhealthy'),
        (201, 'very_unhealthy'),
        (300, 'very_unhealthy'),
        (301, 'hazardous'),
        (500, 'hazardous'),
    ])
    def test_band_edges(self, aqi, code):
        assert convert_aqi_to_category(aqi)['code'] == code

    def test_partition_of_valid_range(self):
        for aqi in range(0, 501):
            matches = [c for c in EPA_AQI_CATEGORIES if c['min_value'] <= aqi <= c['max_value']]
            assert len(matches) == 1
            assert convert_aqi_to_category(aqi) is matches[0]

    def test_above_500_is_hazardous(self):
        assert convert_aqi_to_category(501)['code'] == AQICategory.HAZARDOUS
        assert convert_aqi_to_category(10000)['code'] == AQICategory.HAZARDOUS

    def test_fractional_values_between_bands(self):
        assert convert_aqi_to_category(50.5)['code'] == AQICategory.MODERATE

    def test_category_colors(self):
        colors = {info['code']: info['color_hex'] for info in EPA_AQI_CATEGORIES}
        assert colors == {
            'good': '#00E400',
            'moderate': '#FFFF00',
            'unhealthy_sensitive': '#FF7E00',
            'unhealthy': '#FF0000',
            'very_unhealthy': '#8F3F97',
            'hazardous': '#7E0023',
        }

    def test_labels(self):
        assert convert_aqi_to_category(120)['category'] == 'Unhealthy for Sensitive Groups'

    def test_lookup_by_code_covers_all_categories(self):
        assert set(EPA_AQI_CATEGORY_BY_CODE) == set(AQICategory.values)


class TestEnsureExhaustive:

    def test_complete_table_passes(self):
        table = {category: category.label for category in AQICategory}
        assert ensure_exhaustive(table, 'labels') is table

    def test_missing_category_raises(self):
        with pytest.raises(ImproperlyConfigured, match='hazardous'):
            ensure_exhaustive({AQICategory.GOOD: 'x'}, 'partial')

    def test_unknown_key_raises(self):
        table = {category: 1 for category in AQICategory}
        table['extreme'] = 1
        with pytest.raises(ImproperlyConfigured, match='extreme'):
            ensure_exhaustive(table, 'extra')


class TestHelpers:

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2

    @pytest.mark.parametrize('value,expected', [
        (0, True), (500, True), ('85', True), (-1, False), (501, False), ('abc', False), (None, False),
    ])
    def test_is_valid_aqi(self, value, expected):
        assert is_valid_aqi(value) is expected

    def test_validate_coordinates(self):
        assert validate_coordinates(48.85, 2.35) == (True, None)
        assert validate_coordinates(91, 0)[0] is False
        assert validate_coordinates(0, -181)[0] is False
        assert validate_coordinates('x', 0) == (False, 'Invalid coordinate format')

    def test_round_coordinate(self):
        assert round_coordinate(48.85661) == 48.857
        assert round_coordinate(2.35222) == 2.352
