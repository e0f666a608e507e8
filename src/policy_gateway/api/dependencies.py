"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Gateways, handler and watcher built once during lifespan
    - Dependency functions retrieve from request.app.state
    - Each gateway owns an explicitly constructed cache, no global state
"""

import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from policy_gateway.config import Settings, configure_logging, get_redis_client, get_settings
from policy_gateway.handlers import PolicyHandler
from policy_gateway.prompts import (
    LIFE_INSURANCE_POLICY_JSON_OUTPUT_EXAMPLE,
    ibm_policy_template,
    read_reference_text,
    unstructured_policy_template,
)
from policy_gateway.protocols import EntryStore, UpstreamTransformer
from policy_gateway.repositories import (
    AzureOpenAITransformer,
    FileSourceProvider,
    InMemoryEntryStore,
    RedisEntryStore,
)
from policy_gateway.services import ExtractionGateway, TTLCache
from policy_gateway.watcher import PolicyFileWatcher

logger = logging.getLogger(__name__)

POLICY_NAMESPACE = "policy"
IBM_NAMESPACE = "ibm"


def build_cache(settings: Settings, namespace: str) -> TTLCache:
    """Create a TTL cache on the configured backend.

    Redis-backed caches get one key prefix per namespace: stats, clear
    and sweeps of one gateway never touch another gateway's entries.
    """
    store: EntryStore
    if settings.cache_backend == "redis":
        store = RedisEntryStore(
            get_redis_client(settings),
            prefix=f"{settings.cache_key_prefix}:{namespace}",
        )
    else:
        store = InMemoryEntryStore()
    return TTLCache(ttl=settings.cache_ttl, store=store)


def build_unstructured_gateway(
    settings: Settings, transformer: UpstreamTransformer | None = None
) -> ExtractionGateway:
    """Gateway for free-text policy files."""
    return ExtractionGateway(
        provider=FileSourceProvider(settings.policy_source_dir),
        transformer=transformer or AzureOpenAITransformer.create(settings),
        template=unstructured_policy_template(settings.profile),
        cache=build_cache(settings, POLICY_NAMESPACE),
        namespace=POLICY_NAMESPACE,
        timeout=settings.upstream_timeout,
    )


def build_ibm_gateway(
    settings: Settings, transformer: UpstreamTransformer | None = None
) -> ExtractionGateway:
    """Gateway for IBM fixed-width policy files.

    Raises:
        ConfigurationError: If the schema or example output file cannot be read
    """
    schema_text = read_reference_text(settings.ibm_schema_file, "IBM fixed-width schema")
    example_output = LIFE_INSURANCE_POLICY_JSON_OUTPUT_EXAMPLE
    if settings.ibm_example_output_file:
        example_output = read_reference_text(settings.ibm_example_output_file, "IBM example output")

    return ExtractionGateway(
        provider=FileSourceProvider(settings.ibm_policy_source_dir),
        transformer=transformer or AzureOpenAITransformer.create(settings),
        template=ibm_policy_template(schema_text, example_output, settings.profile),
        cache=build_cache(settings, IBM_NAMESPACE),
        namespace=IBM_NAMESPACE,
        timeout=settings.upstream_timeout,
    )


def get_handler(request: Request) -> PolicyHandler:
    """Dependency injection for PolicyHandler from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The PolicyHandler instance from app.state

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "policy_handler", None)
    if handler is None:
        raise RuntimeError("PolicyHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Transformer (shared HTTP connection pool)
    2. Gateways with their caches - app.state.gateways
    3. Handler (HTTP endpoints) - app.state.policy_handler
    4. Optional inbound file watcher - app.state.watcher

    Configuration errors raised here abort startup.
    """
    configure_logging()
    settings = get_settings()

    transformer = AzureOpenAITransformer.create(settings)
    gateways = {
        POLICY_NAMESPACE: build_unstructured_gateway(settings, transformer),
        IBM_NAMESPACE: build_ibm_gateway(settings, transformer),
    }
    for gateway in gateways.values():
        gateway.cache.start_sweeper(settings.cache_sweep_interval)

    watcher = None
    if settings.watcher_enabled:
        watcher = PolicyFileWatcher(
            gateway=gateways[POLICY_NAMESPACE],
            inbound_dir=settings.inbound_dir,
            outbound_dir=settings.outbound_dir,
            poll_interval=settings.watcher_poll_interval,
        )
        watcher.start()

    app.state.gateways = gateways
    app.state.policy_handler = PolicyHandler(gateways=gateways)
    app.state.watcher = watcher

    logger.info("Model profile: %s", settings.model_profile)
    logger.info("Upstream URL: %s", transformer.url)
    logger.info("Cache backend: %s, TTL %ss", settings.cache_backend, settings.cache_ttl)

    yield

    if watcher is not None:
        await watcher.stop()
    for gateway in gateways.values():
        await gateway.cache.stop_sweeper()
    await transformer.close()

    del app.state.policy_handler
    del app.state.gateways
    del app.state.watcher
    logger.info("Policy gateway shut down")


# Type alias for cleaner dependency injection
HandlerDep = Annotated[PolicyHandler, Depends(get_handler)]
