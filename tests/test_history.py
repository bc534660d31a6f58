"""
Tests for the history store and trend analysis.
"""
from datetime import timedelta
from unittest import mock

import pytest
from django.db import DatabaseError, InterfaceError
from django.utils import timezone

from apps.core.exceptions import StorageDegraded
from apps.history.models import AQIRecord, City
from apps.history.services import HistoryStore, calculate_trend, summarize_history


PAYLOAD = {
    'categoryCode': 'moderate',
    'healthImpact': 'Air quality is acceptable for most people.',
    'recommendation': 'Most people can enjoy outdoor activities.',
}


class TestTrend:

    def test_worsening(self):
        assert calculate_trend([40, 40, 40, 80, 80, 80]) == 'worsening'

    def test_improving(self):
        assert calculate_trend([80, 80, 80, 40, 40, 40]) == 'improving'

    def test_stable_within_threshold(self):
        assert calculate_trend([50, 52, 49, 51]) == 'stable'

    def test_threshold_is_exclusive(self):
        assert calculate_trend([50, 55]) == 'stable'
        assert calculate_trend([50, 56]) == 'worsening'

    def test_single_value_is_stable(self):
        assert calculate_trend([70]) == 'stable'

    def test_odd_length_split(self):
        # floor(5/2) = 2: first half [40, 40], second half [40, 80, 80]
        assert calculate_trend([40, 40, 40, 80, 80]) == 'worsening'


class TestSummary:

    def test_summary(self):
        assert summarize_history([40, 40, 40, 80, 80, 80]) == {
            'average': 60,
            'min': 40,
            'max': 80,
            'trend': 'worsening',
        }

    def test_average_rounds_half_up(self):
        assert summarize_history([50, 51])['average'] == 51

    def test_empty_series_is_no_data(self):
        assert summarize_history([]) is None


@pytest.mark.django_db
class TestHistoryStore:

    @pytest.fixture
    def store(self):
        return HistoryStore()

    def test_upsert_city_is_case_insensitive(self, store):
        first = store.upsert_city('Paris', country='FR', lat=48.8566, lon=2.3522)
        second = store.upsert_city('paris', country='FR')
        assert first == second
        assert City.objects.count() == 1

    def test_upsert_city_fills_missing_coordinates(self, store):
        city_id = store.upsert_city('Lyon')
        store.upsert_city('Lyon', lat=45.764, lon=4.8357)
        city = City.objects.get(pk=city_id)
        assert float(city.lat) == pytest.approx(45.764)

    def test_same_name_different_country(self, store):
        assert store.upsert_city('Paris', country='FR') != store.upsert_city('Paris', country='US')

    def test_append_stores_measurement(self, store, make_measurement):
        city_id = store.upsert_city('Paris', country='FR')
        record = store.append(city_id, make_measurement(), PAYLOAD)

        record.refresh_from_db()
        assert record.aqi == 85
        assert record.category == 'moderate'
        assert record.pm25 == pytest.approx(28.4)
        assert record.o3 is None
        assert record.temperature == pytest.approx(18.0)
        assert record.source == 'OPENMETEO'
        assert record.health_impact == PAYLOAD['healthImpact']

    def test_query_history_window_and_order(self, store, make_measurement):
        city_id = store.upsert_city('Paris', country='FR')
        now = timezone.now()
        for hours_ago, aqi in [(1, 60), (30, 90), (3, 40), (2, 50)]:
            store.append(
                city_id,
                make_measurement(aqi=aqi, timestamp=now - timedelta(hours=hours_ago)),
                PAYLOAD,
            )

        records = store.query_history('PARIS', since=now - timedelta(hours=24), until=now)

        assert [record['aqi'] for record in records] == [40, 50, 60]
        assert set(records[0]) == {'timestamp', 'aqi', 'category'}

    def test_query_unknown_city(self, store):
        assert store.query_history('Atlantis', since=timezone.now() - timedelta(hours=24)) == []

    def test_append_failure_raises_storage_degraded(self, store, make_measurement):
        city_id = store.upsert_city('Paris')
        with mock.patch.object(AQIRecord.objects, 'create', side_effect=DatabaseError('disk full')):
            with pytest.raises(StorageDegraded) as excinfo:
                store.append(city_id, make_measurement(), PAYLOAD)

        assert excinfo.value.stage == 'record append'

    def test_connection_loss_raises_storage_degraded(self, store):
        with mock.patch.object(City.objects, 'filter', side_effect=InterfaceError('connection already closed')):
            with pytest.raises(StorageDegraded) as excinfo:
                store.upsert_city('Paris')

        assert excinfo.value.stage == 'city upsert'

    def test_records_are_append_only(self, store, make_measurement):
        city_id = store.upsert_city('Paris')
        store.append(city_id, make_measurement(), PAYLOAD)
        store.append(city_id, make_measurement(), PAYLOAD)
        assert AQIRecord.objects.filter(city_id=city_id).count() == 2
