"""Entry storage protocol.

Defines where the TTL cache keeps settled entries. In-flight
computations never reach the store; they stay in the cache's own map.

Implementations:
- In-process dictionary (default)
- Redis, for sharing settled entries between worker processes
"""

from typing import Iterator, Protocol, runtime_checkable

from policy_gateway.entities import CacheEntryEntity


@runtime_checkable
class EntryStore(Protocol):
    """Protocol for settled cache entry storage.

    Any type that implements these methods satisfies the protocol,
    no explicit inheritance needed. Implementations must hand out
    whole entries: a reader never sees a partially written one.
    """

    def get(self, key: str) -> CacheEntryEntity | None:
        """Return the stored entry for a key, expired or not."""
        ...

    def put(self, key: str, entry: CacheEntryEntity) -> None:
        """Store an entry, replacing any previous one wholesale."""
        ...

    def delete(self, key: str) -> bool:
        """Delete an entry.

        Returns:
            True if an entry was removed, False otherwise
        """
        ...

    def items(self) -> Iterator[tuple[str, CacheEntryEntity]]:
        """Iterate over a snapshot of (key, entry) pairs."""
        ...

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries deleted
        """
        ...

    def count(self) -> int:
        """Count stored entries, including not yet evicted expired ones."""
        ...

    def health_check(self) -> bool:
        """Check if the store is reachable."""
        ...
