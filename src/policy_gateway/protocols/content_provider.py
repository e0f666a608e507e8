"""Source content provider protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SourceContentProvider(Protocol):
    """Protocol for reading raw policy content by key.

    The content may be free text or an IBM fixed-width payload; the
    provider does not interpret it.
    """

    async def fetch(self, key: str) -> str | None:
        """Return the raw content for a key, or None when it does not exist."""
        ...
