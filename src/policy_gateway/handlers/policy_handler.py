"""HTTP handlers for policy extraction.

Handlers convert gateway results into HTTP responses. They handle
HTTP concerns like status codes and error bodies; the gateway never
raises for per-request failures, so there is nothing to catch here.
"""

import logging
from typing import Any

from fastapi import HTTPException, status

from policy_gateway.dto import (
    CacheClearResponse,
    CacheStatsItem,
    CacheStatsResponse,
    HealthCheckResponse,
    ParseErrorResponse,
    PolicyNotFoundResponse,
    UpstreamErrorResponse,
)
from policy_gateway.entities import NotFound, ParseError, Success, TransformResult, UpstreamError
from policy_gateway.services import ExtractionGateway

logger = logging.getLogger(__name__)


def result_to_response(policy_number: str, result: TransformResult) -> Any:
    """Map a TransformResult to a JSON body or an HTTPException.

    Raises:
        HTTPException: 404 for NotFound, 502/504 for UpstreamError, 500 for ParseError
    """
    if isinstance(result, Success):
        return result.value

    if isinstance(result, NotFound):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=PolicyNotFoundResponse(policy_number=policy_number).model_dump(by_alias=True),
        )

    if isinstance(result, UpstreamError):
        status_code = (
            status.HTTP_504_GATEWAY_TIMEOUT
            if result.code == "timeout"
            else status.HTTP_502_BAD_GATEWAY
        )
        raise HTTPException(
            status_code=status_code,
            detail=UpstreamErrorResponse(
                error=result.message, code=result.code, details=result.body
            ).model_dump(),
        )

    if isinstance(result, ParseError):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ParseErrorResponse(
                parse_error=result.reason, raw_ai_response=result.raw_text
            ).model_dump(by_alias=True),
        )

    raise TypeError(f"Unknown result type: {type(result).__name__}")


class PolicyHandler:
    """HTTP handlers for policy lookups and cache administration.

    Example:
        ```python
        handler = PolicyHandler(gateways={"policy": policy_gateway, "ibm": ibm_gateway})

        @app.get("/policy/{policy_number}")
        async def get_policy(policy_number: str):
            return await handler.get_policy("policy", policy_number)
        ```
    """

    def __init__(self, gateways: dict[str, ExtractionGateway]) -> None:
        """Initialize the handler.

        Args:
            gateways: Extraction gateways keyed by namespace (required).
        """
        self._gateways = gateways

    async def get_policy(self, namespace: str, policy_number: str) -> Any:
        """Handle GET /policy/{policy_number} and GET /ibm/policy/{policy_number}.

        Returns:
            The extracted policy JSON (object or array)

        Raises:
            HTTPException: If the extraction did not succeed
        """
        logger.info("Received request for policy number: %s (%s)", policy_number, namespace)
        gateway = self._gateways[namespace]
        result = await gateway.fetch_extraction(policy_number)
        return result_to_response(policy_number, result)

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /cache/stats requests."""
        return CacheStatsResponse(
            caches={
                namespace: CacheStatsItem(**gateway.cache.stats())
                for namespace, gateway in self._gateways.items()
            }
        )

    async def clear_cache(self) -> CacheClearResponse:
        """Handle DELETE /cache requests."""
        count = 0
        cleared = set()
        for gateway in self._gateways.values():
            # Gateways may share one cache
            if id(gateway.cache) in cleared:
                continue
            cleared.add(id(gateway.cache))
            count += gateway.cache.clear()

        return CacheClearResponse(
            success=True,
            deleted_count=count,
            message="Cache cleared successfully",
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        is_healthy = all(gateway.cache.is_healthy() for gateway in self._gateways.values())
        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_healthy=is_healthy,
            gateways=list(self._gateways),
        )
