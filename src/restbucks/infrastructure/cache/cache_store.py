from __future__ import annotations

from restbucks.application.ports.cache import CacheStore
from restbucks.infrastructure.cache.redis_client import get_redis_client

KEY_PREFIX = "restbucks:"


class RedisCacheStore(CacheStore):
    """Cache entries live under the ``restbucks:`` key prefix."""

    def __init__(self, timeout_seconds: float = 1.0) -> None:
        self._timeout_seconds = timeout_seconds

    def get(self, key: str) -> str | None:
        return get_redis_client(timeout_seconds=self._timeout_seconds).get(KEY_PREFIX + key)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        get_redis_client(timeout_seconds=self._timeout_seconds).set(
            name=KEY_PREFIX + key,
            value=value,
            ex=ttl_seconds,
        )

    def delete(self, key: str) -> None:
        get_redis_client(timeout_seconds=self._timeout_seconds).delete(KEY_PREFIX + key)
