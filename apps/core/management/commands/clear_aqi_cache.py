"""
Management command to clear cached AQI payloads.
"""
from django.core.management.base import BaseCommand, CommandError

from apps.cache.services import CacheService
from apps.core.exceptions import StorageDegraded


class Command(BaseCommand):
    help = 'Delete the cached AQI payload for one city, or every cached AQI payload'

    def add_arguments(self, parser):
        parser.add_argument(
            '--city',
            help='Only drop the cached payload for this city name',
        )

    def handle(self, *args, **options):
        cache_service = CacheService()
        city = options.get('city')

        try:
            if city:
                self.stdout.write(f'Clearing cached AQI for {city}...')
                removed = 1 if cache_service.invalidate_city(city) else 0
            else:
                self.stdout.write('Clearing all cached AQI payloads...')
                removed = cache_service.clear_all()
        except NotImplementedError as e:
            raise CommandError(f'{e}. Use --city or a Redis cache backend.')
        except StorageDegraded as e:
            raise CommandError(f'Cache is unavailable: {e}')

        self.stdout.write(self.style.SUCCESS(f'Removed {removed} cache entries'))
