"""Policy Gateway - cached LLM extraction of insurance policy records.

This package turns free-text and IBM fixed-width policy files into
normalized JSON through a chat-completion model, behind a single-flight
TTL cache.

Layers:
    - protocols: Interface contracts (UpstreamTransformer, SourceContentProvider, EntryStore)
    - repositories: Implementations (Azure OpenAI, filesystem, in-memory/Redis stores)
    - services: Business logic (ExtractionGateway, TTLCache, sanitizer, payload builder)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from policy_gateway.services import ExtractionGateway, TTLCache

    gateway = ExtractionGateway(provider=..., transformer=..., template=..., cache=TTLCache(ttl=1800))
    result = await gateway.fetch_extraction("INS-2024-001")
    ```

For HTTP API:
    ```python
    from policy_gateway.api.app import app
    ```
"""

__version__ = "0.1.0"

from policy_gateway.config import Settings, get_settings
from policy_gateway.entities import (
    NotFound,
    ParseError,
    PromptTemplate,
    Success,
    TransformResult,
    UpstreamError,
)
from policy_gateway.protocols import EntryStore, SourceContentProvider, UpstreamTransformer
from policy_gateway.services import ExtractionGateway, PromptPayloadBuilder, ResponseSanitizer, TTLCache

__all__ = [
    "__version__",
    # Configuration
    "Settings",
    "get_settings",
    # Protocols (interfaces)
    "EntryStore",
    "SourceContentProvider",
    "UpstreamTransformer",
    # Services (business logic)
    "ExtractionGateway",
    "PromptPayloadBuilder",
    "ResponseSanitizer",
    "TTLCache",
    # Entities (domain models)
    "PromptTemplate",
    "TransformResult",
    "Success",
    "NotFound",
    "UpstreamError",
    "ParseError",
]
