"""
Cache service for AQI responses.

Wraps a Django cache backend (Redis via django-redis in production) with
deterministic AQI keys and JSON serialization. Payloads are stored as JSON
strings so a cache hit returns exactly what was written.
"""
import json
import logging
from typing import Dict, Optional

from django.conf import settings
from django.core.cache import caches
from django.core.serializers.json import DjangoJSONEncoder

from apps.core.constants import CACHE_KEY_PREFIX
from apps.core.exceptions import StorageDegraded
from apps.core.utils import round_coordinate

logger = logging.getLogger(__name__)


class CacheService:
    """
    Key-value cache with TTL for AQI payloads.

    Backend errors are raised as StorageDegraded so callers can decide how to
    degrade; the orchestrator treats them as misses / skipped writes.
    """

    def __init__(self, backend=None, default_ttl: Optional[int] = None):
        air_quality_settings = getattr(settings, 'AIR_QUALITY_SETTINGS', {})
        self.backend = backend if backend is not None else caches[
            air_quality_settings.get('CACHE_ALIAS', 'default')
        ]
        self.default_ttl = (
            air_quality_settings.get('CACHE_DEFAULT_TTL', 3600) if default_ttl is None else default_ttl
        )

    @staticmethod
    def city_key(city_name: str) -> str:
        """Cache key for a city query: lowercase, whitespace collapsed."""
        normalized = '_'.join(city_name.split()).lower()
        return f"{CACHE_KEY_PREFIX}:city:{normalized}"

    @staticmethod
    def coords_key(lat: float, lon: float) -> str:
        """Cache key for a coordinate query, rounded to 3 decimal places."""
        return f"{CACHE_KEY_PREFIX}:coords:{round_coordinate(lat)},{round_coordinate(lon)}"

    def get_raw(self, key: str) -> Optional[str]:
        """Return the stored JSON string, or None when absent or expired."""
        try:
            return self.backend.get(key)
        except Exception as e:
            raise StorageDegraded('cache read', e) from e

    def get(self, key: str) -> Optional[Dict]:
        """Return the cached payload for a key, or None."""
        raw = self.get_raw(key)
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning(f"Discarding unreadable cache entry {key}: {e}")
            return None

    def set(self, key: str, payload: Dict, ttl: Optional[int] = None) -> str:
        """
        Serialize and store a payload with a TTL in seconds.

        Returns:
            str: the JSON string that was written
        """
        raw = json.dumps(payload, cls=DjangoJSONEncoder)
        timeout = ttl if ttl is not None else self.default_ttl

        try:
            self.backend.set(key, raw, timeout=timeout)
        except Exception as e:
            raise StorageDegraded('cache write', e) from e

        return raw

    def delete(self, key: str) -> bool:
        """Remove one key. Returns True when the backend reports a deletion."""
        try:
            return bool(self.backend.delete(key))
        except Exception as e:
            raise StorageDegraded('cache delete', e) from e

    def delete_by_prefix(self, prefix: str) -> int:
        """
        Remove every key starting with prefix.

        Uses django-redis' delete_pattern; other backends fall back to
        scanning their key list when they expose one.

        Returns:
            int: number of keys removed
        """
        try:
            if hasattr(self.backend, 'delete_pattern'):
                return int(self.backend.delete_pattern(f"{prefix}*") or 0)

            if hasattr(self.backend, 'keys'):
                keys = list(self.backend.keys(f"{prefix}*"))
                if keys:
                    self.backend.delete_many(keys)
                return len(keys)
        except Exception as e:
            raise StorageDegraded('cache prefix delete', e) from e

        raise NotImplementedError(
            f"{type(self.backend).__name__} does not support prefix deletes"
        )

    def invalidate_city(self, city_name: str) -> bool:
        """Drop the cached payload for one city."""
        return self.delete(self.city_key(city_name))

    def clear_all(self) -> int:
        """Drop every cached AQI payload."""
        return self.delete_by_prefix(f"{CACHE_KEY_PREFIX}:")
