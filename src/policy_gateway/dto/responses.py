"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PolicyNotFoundResponse(BaseModel):
    """Error body when no source file exists for a policy number."""

    model_config = ConfigDict(populate_by_name=True)

    error: str = Field("Policy not found", description="Error summary")
    policy_number: str = Field(..., alias="policyNumber", description="The requested policy number")


class UpstreamErrorResponse(BaseModel):
    """Error body when the model endpoint failed or timed out."""

    error: str = Field(..., description="Error summary")
    code: int | str = Field(..., description="Upstream HTTP status, or 'timeout' / 'transport' / 'internal'")
    details: str = Field("", description="Truncated upstream response body")


class ParseErrorResponse(BaseModel):
    """Error body when the model reply could not be decoded."""

    model_config = ConfigDict(populate_by_name=True)

    error: str = Field("Failed to parse AI response", description="Error summary")
    parse_error: str = Field(..., alias="parseError", description="Why decoding failed")
    raw_ai_response: str = Field(..., alias="rawAIResponse", description="The raw model reply")


class CacheStatsItem(BaseModel):
    """Statistics for one gateway cache."""

    entries: int = Field(..., ge=0, description="Settled entries, including expired ones not yet evicted")
    expired_entries: int = Field(..., ge=0, description="Entries past their TTL")
    in_flight: int = Field(..., ge=0, description="Upstream computations currently running")
    ttl_seconds: float = Field(..., gt=0, description="Time-to-live for cache entries in seconds")
    hits: int = Field(..., ge=0)
    misses: int = Field(..., ge=0)
    coalesced: int = Field(..., ge=0, description="Requests that joined an in-flight computation")
    computations: int = Field(..., ge=0)
    failures: int = Field(..., ge=0)


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics, keyed by gateway namespace."""

    caches: dict[str, CacheStatsItem] = Field(default_factory=dict)


class CacheClearResponse(BaseModel):
    """Response DTO for clearing the caches."""

    success: bool = Field(..., description="Whether the operation succeeded")
    deleted_count: int = Field(..., ge=0, description="Number of entries removed")
    message: str = Field(..., description="Human-readable status message")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether every cache backend is reachable")
    gateways: list[str] = Field(default_factory=list, description="Configured gateway namespaces")


class ServiceInfoResponse(BaseModel):
    """Response DTO for the root endpoint."""

    name: str
    version: str
    description: str
    endpoints: dict[str, Any]
