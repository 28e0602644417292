import json
import threading
import time
from typing import Any, Callable, Protocol

import redis
from redis.exceptions import RedisError

from biopeak.core.logger import get_logger

logger = get_logger(__name__)


class CacheStore(Protocol):
    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def invalidate(self, key: str | None = None) -> None: ...


class MemoryCacheStore:
    """In-process key/value cache with a fixed time-to-live.

    Entries older than `ttl_seconds` read as missing. `clock` is injectable
    so tests can move time forward. Each worker process holds its own copy,
    so this is meant for local runs and tests; deployments point
    `redis_url` at a shared Redis instead.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, value = entry
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), value)

    def invalidate(self, key: str | None = None) -> None:
        """Drop one key, or everything when `key` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheStore:
    """Shared cache in Redis; values are stored as JSON with a TTL.

    Redis being unreachable degrades to cache misses so reads fall back to
    the database.
    """

    def __init__(self, client: "redis.Redis", ttl_seconds: int, prefix: str = "biopeak:"):
        self.client = client
        self.ttl_seconds = int(ttl_seconds)
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, ttl_seconds: int, prefix: str = "biopeak:") -> "RedisCacheStore":
        client = redis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            retry_on_timeout=True,
        )
        return cls(client, ttl_seconds, prefix)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get(self, key: str) -> Any | None:
        try:
            raw = self.client.get(self._key(key))
        except RedisError as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Dropping unreadable cache entry {key}")
            self.invalidate(key)
            return None

    def set(self, key: str, value: Any) -> None:
        try:
            self.client.setex(self._key(key), self.ttl_seconds, json.dumps(value, default=str))
        except RedisError as e:
            logger.warning(f"Cache set failed for {key}: {e}")

    def invalidate(self, key: str | None = None) -> None:
        """Drop one key, or every key under this store's prefix."""
        try:
            if key is not None:
                self.client.delete(self._key(key))
                return
            keys = list(self.client.scan_iter(match=f"{self.prefix}*"))
            if keys:
                self.client.delete(*keys)
        except RedisError as e:
            logger.warning(f"Cache invalidate failed for {key or self.prefix + '*'}: {e}")


def build_cache_store(redis_url: str | None, ttl_seconds: int) -> CacheStore:
    """Redis when a URL is configured, otherwise a per-process memory cache."""
    if redis_url:
        logger.info("Pace cache backed by Redis")
        return RedisCacheStore.from_url(redis_url, ttl_seconds)
    logger.info("Pace cache is per-process (no redis_url set)")
    return MemoryCacheStore(ttl_seconds=ttl_seconds)
