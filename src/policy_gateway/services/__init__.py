"""Service layer for business logic.

This layer contains the core extraction pipeline and its cache.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access / Upstream)

Usage:
    ```python
    from policy_gateway.services import ExtractionGateway, TTLCache

    gateway = ExtractionGateway(
        provider=provider,
        transformer=transformer,
        template=template,
        cache=TTLCache(ttl=1800),
    )
    ```
"""

from .gateway import ExtractionGateway
from .payload_builder import PromptPayloadBuilder
from .sanitizer import ResponseSanitizer
from .ttl_cache import TTLCache

__all__ = [
    "ExtractionGateway",
    "PromptPayloadBuilder",
    "ResponseSanitizer",
    "TTLCache",
]
