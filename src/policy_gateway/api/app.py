from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from policy_gateway import __version__
from policy_gateway.api.dependencies import IBM_NAMESPACE, POLICY_NAMESPACE, HandlerDep, lifespan
from policy_gateway.config import get_settings
from policy_gateway.dto import (
    CacheClearResponse,
    CacheStatsResponse,
    HealthCheckResponse,
    ServiceInfoResponse,
)

app = FastAPI(
    title="Policy Extraction Gateway",
    description="Normalizes insurance policy files into JSON through a cached LLM gateway",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Send structured error details as the top-level response body."""
    content = exc.detail if isinstance(exc.detail, dict) else {"detail": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.get("/", response_model=ServiceInfoResponse)
async def root() -> ServiceInfoResponse:
    """Root endpoint with API information."""
    return ServiceInfoResponse(
        name="Policy Extraction Gateway",
        version=__version__,
        description="Normalizes insurance policy files into JSON through a cached LLM gateway",
        endpoints={
            "policy": "/policy/{policy_number}",
            "ibm_policy": "/ibm/policy/{policy_number}",
            "cache_stats": "/cache/stats",
            "health": "/health",
            "docs": "/docs",
        },
    )


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> HealthCheckResponse:
    """Health check endpoint."""
    return await handler.health_check()


@app.get("/policy/{policy_number}", response_model=None)
async def get_policy(policy_number: str, handler: HandlerDep) -> Any:
    """
    Get policy details by policy number from the free-text source.

    Returns 404 when no policy file exists, 502/504 when the model
    endpoint fails and 500 when its reply cannot be parsed.
    """
    return await handler.get_policy(POLICY_NAMESPACE, policy_number)


@app.get("/ibm/policy/{policy_number}", response_model=None)
async def get_ibm_policy(policy_number: str, handler: HandlerDep) -> Any:
    """Get IBM fixed-width policy details by policy number."""
    return await handler.get_policy(IBM_NAMESPACE, policy_number)


@app.get("/cache/stats", response_model=CacheStatsResponse)
async def get_cache_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get cache statistics per gateway."""
    return await handler.get_stats()


@app.delete("/cache", response_model=CacheClearResponse)
async def clear_cache(handler: HandlerDep) -> CacheClearResponse:
    """Clear all cached extractions."""
    return await handler.clear_cache()


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "policy_gateway.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )


if __name__ == "__main__":
    main()
