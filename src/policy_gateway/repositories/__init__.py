"""Repository layer for data access.

This layer holds the implementations behind the protocol interfaces:
- Entry stores for the TTL cache (in-memory, Redis)
- The upstream transformer (Azure OpenAI)
- The source content provider (filesystem)

The repositories are protocol-based (structural typing), not inheritance-based.
"""

from .azure_openai_transformer import AzureOpenAITransformer
from .file_source_provider import FileSourceProvider
from .memory_entry_store import InMemoryEntryStore
from .redis_entry_store import RedisEntryStore

__all__ = [
    "AzureOpenAITransformer",
    "FileSourceProvider",
    "InMemoryEntryStore",
    "RedisEntryStore",
]
