"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Swapping the upstream model, the content source or the cache store
- Unit testing with stub implementations
- Clear separation of concerns
"""

from .content_provider import SourceContentProvider
from .entry_store import EntryStore
from .upstream_transformer import UpstreamResponse, UpstreamTransformer

__all__ = [
    "EntryStore",
    "SourceContentProvider",
    "UpstreamResponse",
    "UpstreamTransformer",
]
