"""
Counter Store
=============
Expiring integer counters kept in a Django cache.

Increments go through the backend's native incr, so concurrent workers
adding to the same key never lose an update on locmem, Redis or Memcached.
The database cache has no atomic incr and must not back quotas.
"""

import logging

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)


def get_quota_cache_alias() -> str:
    return getattr(settings, 'UPLOAD_QUOTA_CACHE', 'default')


class CacheCounterStore:
    """
    Counters with a time-to-live, backed by a cache alias.

    A counter is created with its timeout on first write; later increments
    keep that expiry.
    """

    def __init__(self, cache=None):
        self.cache = cache if cache is not None else caches[get_quota_cache_alias()]

    def get(self, key: str) -> int:
        """Current value, 0 when absent or expired."""
        return self.cache.get(key, 0)

    def add_and_get(self, key: str, delta: int, timeout: int) -> int:
        """
        Atomically add delta to a counter and return the new value.

        Args:
            key: Counter key
            delta: Amount to add
            timeout: Seconds to live when the counter is created

        Returns:
            int: Value after the increment
        """
        self.cache.add(key, 0, timeout)
        try:
            return self.cache.incr(key, delta)
        except ValueError:
            # Expired between add and incr: start a fresh counter
            logger.debug(f"Counter {key} expired during increment, recreating")
            self.cache.add(key, 0, timeout)
            return self.cache.incr(key, delta)
