"""Extraction gateway: the service that turns policy content into JSON.

This service orchestrates one extraction by coordinating the content
provider, the payload builder, the upstream transformer, the response
sanitizer and the TTL cache. It is the error boundary of the core:
every per-request failure comes back as a tagged TransformResult.
"""

import asyncio
import json
import logging
from typing import Any, Mapping

from policy_gateway.config import get_settings
from policy_gateway.entities import (
    NotFound,
    ParseError,
    PromptTemplate,
    Success,
    TransformResult,
    UpstreamError,
)
from policy_gateway.exceptions import ResponseParseError, SourceNotFoundError, UpstreamCallError
from policy_gateway.protocols import SourceContentProvider, UpstreamTransformer

from .payload_builder import PromptPayloadBuilder
from .sanitizer import ResponseSanitizer
from .ttl_cache import TTLCache

logger = logging.getLogger(__name__)

UPSTREAM_ERROR_BODY_LIMIT = 2000


def truncate(text: str, limit: int = UPSTREAM_ERROR_BODY_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"... [{len(text) - limit} more characters]"


def decode_extraction(cleaned: str, raw_text: str) -> Any:
    """Decode cleaned text into an object or an array of objects.

    Raises:
        ResponseParseError: If the text is not JSON of an accepted shape
    """
    try:
        value = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ResponseParseError(str(e), raw_text) from e

    if isinstance(value, dict):
        return value
    if isinstance(value, list) and all(isinstance(item, dict) for item in value):
        return value
    raise ResponseParseError(
        f"expected a JSON object or an array of objects, got {type(value).__name__}",
        raw_text,
    )


class ExtractionGateway:
    """Cache-fronted extraction service.

    Per request: check cache, read the source content, build the
    payload, call the upstream transformer (once per key for all
    concurrent callers), sanitize, validate, store, return.

    Example:
        ```python
        gateway = ExtractionGateway(
            namespace="ibm",
            provider=FileSourceProvider("samples/policies/ibm"),
            transformer=AzureOpenAITransformer.create(),
            template=ibm_policy_template(schema_text),
        )
        result = await gateway.fetch_extraction("INS-2024-001")
        if isinstance(result, Success):
            print(result.value)
        ```
    """

    def __init__(
        self,
        provider: SourceContentProvider,
        transformer: UpstreamTransformer,
        template: PromptTemplate,
        cache: TTLCache | None = None,
        namespace: str = "policy",
        timeout: float | None = None,
        ttl: float | None = None,
        extra_params: Mapping[str, Any] | None = None,
        builder: PromptPayloadBuilder | None = None,
        sanitizer: ResponseSanitizer | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            provider: Source of raw policy content (required).
            transformer: Upstream model client (required).
            template: Default prompt template for this gateway (required).
            cache: TTL cache owned by this gateway. Defaults to a new in-memory cache.
            namespace: Prefix of the cache keys (e.g. "policy", "ibm").
            timeout: Upstream call timeout in seconds. Defaults to settings.
            ttl: TTL for stored results. Defaults to the cache TTL.
            extra_params: Request parameters overriding the template's.
            builder: Payload builder. Defaults to PromptPayloadBuilder().
            sanitizer: Response sanitizer. Defaults to ResponseSanitizer().
        """
        self._provider = provider
        self._transformer = transformer
        self._template = template
        self._cache = cache if cache is not None else TTLCache(ttl=ttl)
        self._namespace = namespace
        self._timeout = timeout if timeout is not None else get_settings().upstream_timeout
        self._ttl = ttl
        self._extra_params = dict(extra_params or {})
        self._builder = builder or PromptPayloadBuilder()
        self._sanitizer = sanitizer or ResponseSanitizer()

    def cache_key(self, key: str, template: PromptTemplate | None = None) -> str:
        """Cache key for a source key under a given template."""
        template = template or self._template
        return f"{self._namespace}:{key}:{template.fingerprint}"

    async def fetch_extraction(self, key: str, template: PromptTemplate | None = None) -> TransformResult:
        """Extract JSON for a source key, using the cache.

        Args:
            key: Source key (e.g. a policy number)
            template: Prompt template. Defaults to the gateway's template.

        Returns:
            Success, NotFound, UpstreamError or ParseError. Nothing but
            cancellation propagates out of this method.
        """
        template = template or self._template
        cache_key = self.cache_key(key, template)

        async def compute() -> Any:
            content = await self._provider.fetch(key)
            if content is None or not content.strip():
                raise SourceNotFoundError(key)
            return await self._transform(content, template)

        try:
            # Store failures (e.g. Redis down) are reported like any other fault
            cached = self._cache.lookup(cache_key)
            if cached is not None:
                logger.info("Cache hit for %s", cache_key)
                return Success(value=cached.value, cached=True)
            value = await self._cache.get_or_compute(cache_key, compute, ttl=self._ttl)
        except Exception as e:
            return self._to_result(key, e)

        return Success(value=value, cached=False)

    async def transform_content(
        self, content: str, template: PromptTemplate | None = None
    ) -> TransformResult:
        """Run the build/call/sanitize/validate pipeline without the cache.

        Used for content that has no stable key, such as files picked
        up by the inbound watcher.
        """
        try:
            value = await self._transform(content, template or self._template)
        except Exception as e:
            return self._to_result("<content>", e)
        return Success(value=value, cached=False)

    async def _transform(self, content: str, template: PromptTemplate) -> Any:
        body = self._builder.build(template, content, self._extra_params)

        try:
            response = await asyncio.wait_for(self._transformer.send(body), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            raise UpstreamCallError(
                "timeout",
                message=f"Upstream call timed out after {self._timeout}s",
                original_error=e,
            ) from e

        if not response.ok:
            logger.warning("Upstream call failed with status %s", response.status_code)
            raise UpstreamCallError(
                response.status_code,
                body=response.raw_body,
                message=f"API call failed with code {response.status_code}",
            )

        cleaned = self._sanitizer.clean(response.raw_body)
        return decode_extraction(cleaned, response.raw_body)

    def _to_result(self, key: str, error: Exception) -> TransformResult:
        if isinstance(error, SourceNotFoundError):
            logger.info("Policy not found: %s", key)
            return NotFound(key=key, message=error.message)

        if isinstance(error, UpstreamCallError):
            logger.warning("Upstream error for %s: %s", key, error.message)
            return UpstreamError(code=error.code, body=truncate(error.body), message=error.message)

        if isinstance(error, ResponseParseError):
            logger.warning(
                "Unparsable AI response for %s (%s): %s",
                key,
                error.reason,
                truncate(error.raw_text, 200),
            )
            return ParseError(reason=error.reason, raw_text=error.raw_text, message=error.message)

        logger.exception("Unexpected failure while extracting %s", key, exc_info=error)
        return UpstreamError(code="internal", body="", message=f"Unexpected error: {error}")

    def invalidate(self, key: str, template: PromptTemplate | None = None) -> bool:
        """Drop the cached result for a source key."""
        return self._cache.invalidate(self.cache_key(key, template))

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def template(self) -> PromptTemplate:
        return self._template

    @property
    def cache(self) -> TTLCache:
        """Get the underlying cache (for testing)."""
        return self._cache

    @property
    def transformer(self) -> UpstreamTransformer:
        """Get the underlying transformer (for testing)."""
        return self._transformer
