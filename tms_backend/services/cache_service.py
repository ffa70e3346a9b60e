"""Role-id cache: in-process memory by default, Redis when configured."""

import logging
import threading
from typing import Callable, Optional

import redis

from tms_backend.core.config import settings

logger = logging.getLogger("tms")

Loader = Callable[[], Optional[str]]


class RoleIdCache:
    """Caches seed-role ids by role name.

    Values can go stale if a seed role is recreated; call ``invalidate``
    from whatever changes roles.
    """

    def __init__(self):
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get_or_populate(self, key: str, loader: Loader) -> Optional[str]:
        with self._lock:
            if key in self._values:
                return self._values[key]
        value = loader()
        if value is not None:
            with self._lock:
                self._values[key] = value
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._values.clear()
            else:
                self._values.pop(key, None)


class RedisRoleIdCache(RoleIdCache):
    """Redis-backed variant shared between workers; falls back to the loader."""

    KEY_PREFIX = "tms:role-id:"

    def __init__(self, url: str, ttl_seconds: int = 3600):
        super().__init__()
        self.url = url
        self.ttl_seconds = ttl_seconds
        self._client: Optional[redis.Redis] = None

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.from_url(self.url, decode_responses=True)
        return self._client

    def get_or_populate(self, key: str, loader: Loader) -> Optional[str]:
        try:
            cached = self.client.get(self.KEY_PREFIX + key)
        except redis.ConnectionError:
            logger.warning("Redis unavailable, loading role id %s directly", key)
            return loader()
        if cached:
            return cached
        value = loader()
        if value is not None:
            try:
                self.client.setex(self.KEY_PREFIX + key, self.ttl_seconds, value)
            except redis.ConnectionError:
                logger.warning("Redis unavailable, role id %s not cached", key)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        try:
            if key is not None:
                self.client.delete(self.KEY_PREFIX + key)
                return
            keys = self.client.keys(self.KEY_PREFIX + "*")
            if keys:
                self.client.delete(*keys)
        except redis.ConnectionError:
            logger.warning("Redis unavailable, role id cache not invalidated")

    def health_check(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.ConnectionError:
            return False


def build_role_cache() -> RoleIdCache:
    if settings.ROLE_CACHE_BACKEND == "redis":
        return RedisRoleIdCache(settings.REDIS_URL)
    return RoleIdCache()


role_id_cache = build_role_cache()
