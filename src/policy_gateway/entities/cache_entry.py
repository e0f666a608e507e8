"""Cache entry domain entity."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntryEntity:
    """Domain entity for a settled cache value.

    Entries are never mutated. A refresh replaces the whole entry.

    Attributes:
        value: The decoded JSON (object or array of objects)
        stored_at: Unix timestamp of when the entry was stored
        ttl: Time-to-live in seconds
    """

    value: Any
    stored_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        """An entry is still fresh at exactly stored_at + ttl."""
        return now - self.stored_at > self.ttl

    def age(self, now: float) -> float:
        return now - self.stored_at
