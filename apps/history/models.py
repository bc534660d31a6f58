"""
Models for persisted AQI history.
"""
from django.db import models

from apps.core.constants import AQICategory
from apps.core.models import TimeStampedModel


class City(TimeStampedModel):
    """
    A queried location. Coordinate queries are stored under their rounded
    "lat,lon" pair as the name.
    """
    name = models.CharField(max_length=255, db_index=True)
    country = models.CharField(max_length=100, blank=True, default='')
    lat = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    lon = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)

    class Meta:
        verbose_name = 'City'
        verbose_name_plural = 'Cities'
        ordering = ['name']
        unique_together = [['name', 'country']]

    def __str__(self):
        return f"{self.name}, {self.country}" if self.country else self.name


class AQIRecord(TimeStampedModel):
    """
    One fresh measurement for a city. Append-only.
    """
    city = models.ForeignKey(City, on_delete=models.CASCADE, related_name='records')

    # Air Quality Index
    aqi = models.IntegerField()
    category = models.CharField(max_length=30, choices=AQICategory.choices)
    dominant_pollutant = models.CharField(max_length=10, blank=True)

    # Pollutant concentrations
    pm25 = models.FloatField(null=True, blank=True)
    pm10 = models.FloatField(null=True, blank=True)
    o3 = models.FloatField(null=True, blank=True)
    no2 = models.FloatField(null=True, blank=True)
    so2 = models.FloatField(null=True, blank=True)
    co = models.FloatField(null=True, blank=True)

    # Conditions
    temperature = models.FloatField(null=True, blank=True)
    humidity = models.FloatField(null=True, blank=True)
    pressure = models.FloatField(null=True, blank=True)

    # Derived at fetch time
    health_impact = models.TextField(blank=True)
    recommendation = models.TextField(blank=True)

    source = models.CharField(max_length=50, blank=True)

    # When the measurement was taken
    timestamp = models.DateTimeField(db_index=True)

    class Meta:
        verbose_name = 'AQI Record'
        verbose_name_plural = 'AQI Records'
        ordering = ['-timestamp']
        indexes = [
            models.Index(fields=['city', 'timestamp'], name='history_city_ts_idx'),
        ]

    def __str__(self):
        return f"{self.city} - AQI:{self.aqi} ({self.category}) - {self.timestamp}"
