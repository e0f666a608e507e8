"""In-process implementation of EntryStore."""

from typing import Iterator

from policy_gateway.entities import CacheEntryEntity


class InMemoryEntryStore:
    """Dictionary-backed entry store, owned by a single event loop.

    Entries are immutable, so handing one out is a snapshot: a later
    put or sweep replaces the dictionary slot, never the entry itself.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntryEntity] = {}

    def get(self, key: str) -> CacheEntryEntity | None:
        return self._entries.get(key)

    def put(self, key: str, entry: CacheEntryEntity) -> None:
        self._entries[key] = entry

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def items(self) -> Iterator[tuple[str, CacheEntryEntity]]:
        return iter(list(self._entries.items()))

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def count(self) -> int:
        return len(self._entries)

    def health_check(self) -> bool:
        return True
