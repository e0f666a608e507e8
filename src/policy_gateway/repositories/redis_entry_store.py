"""Redis implementation of EntryStore.

Settled entries are stored as JSON strings under ``{prefix}:{key}``
with a Redis expiry matching the entry TTL, so expired entries also
disappear server-side. Entries are written with a single SET, which
keeps them whole for every reader.
"""

import json
import logging
import math
from typing import Iterator

import redis

from policy_gateway.config import get_redis_client, get_settings
from policy_gateway.entities import CacheEntryEntity

logger = logging.getLogger(__name__)


class RedisEntryStore:
    """Redis implementation of the EntryStore protocol.

    This class satisfies the EntryStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        prefix: str | None = None,
    ) -> None:
        """Initialize the Redis entry store.

        Args:
            redis_client: Redis client instance (decode_responses=True).
                If None, creates default.
            prefix: Key prefix for every entry. Defaults to settings.
        """
        self._client = redis_client or get_redis_client()
        self._prefix = prefix or get_settings().cache_key_prefix

    @classmethod
    def create(cls, prefix: str | None = None) -> "RedisEntryStore":
        """Factory method to create RedisEntryStore with defaults.

        Args:
            prefix: Key prefix. If None, uses settings.

        Returns:
            Configured RedisEntryStore
        """
        return cls(prefix=prefix)

    def _name(self, key: str) -> str:
        return f"{self._prefix}:{key}"

    def _decode(self, raw: str | None) -> CacheEntryEntity | None:
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return CacheEntryEntity(
                value=data["value"],
                stored_at=float(data["stored_at"]),
                ttl=float(data["ttl"]),
            )
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.warning("Discarding undecodable cache entry")
            return None

    def get(self, key: str) -> CacheEntryEntity | None:
        raw: str | None = self._client.get(self._name(key))  # type: ignore[assignment]
        return self._decode(raw)

    def put(self, key: str, entry: CacheEntryEntity) -> None:
        payload = json.dumps(
            {"value": entry.value, "stored_at": entry.stored_at, "ttl": entry.ttl}
        )
        # Redis keeps the entry one second past its TTL; freshness is
        # still decided by the cache from stored_at.
        self._client.set(self._name(key), payload, ex=max(1, math.ceil(entry.ttl) + 1))

    def delete(self, key: str) -> bool:
        result: int = self._client.delete(self._name(key))  # type: ignore[assignment]
        return result > 0

    def items(self) -> Iterator[tuple[str, CacheEntryEntity]]:
        offset = len(self._prefix) + 1
        for name in self._client.scan_iter(match=f"{self._prefix}:*"):
            entry = self._decode(self._client.get(name))  # type: ignore[arg-type]
            if entry is not None:
                yield name[offset:], entry

    def clear(self) -> int:
        names = list(self._client.scan_iter(match=f"{self._prefix}:*"))
        if not names:
            return 0
        result: int = self._client.delete(*names)  # type: ignore[assignment]
        return result

    def count(self) -> int:
        return sum(1 for _ in self._client.scan_iter(match=f"{self._prefix}:*"))

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @property
    def client(self) -> redis.Redis:
        """Get the Redis client."""
        return self._client
