"""
Admin configuration for history models.
"""
from django.contrib import admin
from .models import City, AQIRecord


@admin.register(City)
class CityAdmin(admin.ModelAdmin):
    list_display = ['name', 'country', 'lat', 'lon', 'created_at']
    list_filter = ['country']
    search_fields = ['name', 'country']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['name']


@admin.register(AQIRecord)
class AQIRecordAdmin(admin.ModelAdmin):
    list_display = ['city', 'aqi', 'category', 'dominant_pollutant', 'source', 'timestamp']
    list_filter = ['category', 'source', 'timestamp']
    search_fields = ['city__name']
    readonly_fields = ['created_at', 'updated_at']
    ordering = ['-timestamp']
    date_hierarchy = 'timestamp'
