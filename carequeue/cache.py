"""
Redis caching for derived views (dashboard stats).
Fails open: when Redis is unavailable every read is recomputed.
"""
import json
import logging
import time
from datetime import date
from typing import Any, Optional

from .config import CACHE_ENABLED, DASHBOARD_CACHE_TTL
from .redis_client import get_redis_client

logger = logging.getLogger(__name__)

# Seconds to wait before retrying a failed Redis connection
RECONNECT_BACKOFF = 30


class Cache:
    """Redis cache wrapper with automatic serialization"""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.redis_client = None
        self._last_failure: Optional[float] = None

    def _get_client(self):
        """Lazy load Redis client"""
        if not self.enabled:
            return None
        if self.redis_client is None:
            if (
                self._last_failure is not None
                and time.monotonic() - self._last_failure < RECONNECT_BACKOFF
            ):
                return None
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                self._last_failure = time.monotonic()
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 3600) -> bool:
        """Set value in cache with TTL (default 1 hour)"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.setex(key, ttl, json.dumps(value))
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False

    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching pattern (e.g., 'dashboard:stats:*')"""
        client = self._get_client()
        if not client:
            return 0

        try:
            keys = list(client.scan_iter(match=pattern))
            if keys:
                deleted = client.delete(*keys)
                logger.debug(f"✅ Cache DELETE pattern: {pattern} ({deleted} keys)")
                return deleted
            return 0
        except Exception as e:
            logger.error(f"❌ Cache delete pattern error for {pattern}: {e}")
            return 0


# Global cache instance
cache = Cache(enabled=CACHE_ENABLED)


def build_dashboard_stats_key(day: date) -> str:
    return f"dashboard:stats:{day.isoformat()}"


def get_dashboard_stats_cached(day: date) -> Optional[dict]:
    """Get dashboard stats for a day from cache"""
    return cache.get(build_dashboard_stats_key(day))


def set_dashboard_stats_cached(day: date, stats: dict, ttl: int = DASHBOARD_CACHE_TTL) -> bool:
    """Set dashboard stats for a day in cache"""
    return cache.set(build_dashboard_stats_key(day), stats, ttl)


def invalidate_dashboard_cache() -> int:
    """Invalidate cached dashboard stats after any write"""
    return cache.delete_pattern("dashboard:stats:*")
