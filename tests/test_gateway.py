"""
Tests for the extraction gateway.
"""

import asyncio

import httpx
import pytest
import redis
from conftest import POLICY_JSON, POLICY_TEXT, StubProvider, StubTransformer

from policy_gateway.entities import NotFound, ParseError, Success, UpstreamError
from policy_gateway.exceptions import UpstreamCallError
from policy_gateway.services import ExtractionGateway, TTLCache
from policy_gateway.services.gateway import UPSTREAM_ERROR_BODY_LIMIT, truncate


@pytest.mark.asyncio
async def test_extracts_and_caches_policy(gateway, transformer, provider, template):
    first = await gateway.fetch_extraction("INS-2024-001")
    second = await gateway.fetch_extraction("INS-2024-001")

    assert first == Success(value=POLICY_JSON, cached=False)
    assert second == Success(value=POLICY_JSON, cached=True)
    assert len(transformer.calls) == 1
    assert provider.calls == ["INS-2024-001"]

    body = transformer.calls[0]
    assert body["model"] == "gpt-4.1-myagent"
    assert body["messages"][0] == {"role": "system", "content": template.system_messages[0]}
    assert body["messages"][-1] == {"role": "user", "content": POLICY_TEXT}


@pytest.mark.asyncio
async def test_unknown_policy_is_not_found_without_upstream_call(gateway, transformer):
    result = await gateway.fetch_extraction("UNKNOWN-1")

    assert isinstance(result, NotFound)
    assert result.key == "UNKNOWN-1"
    assert not result.ok
    assert transformer.calls == []
    assert gateway.cache.stats()["entries"] == 0


@pytest.mark.asyncio
async def test_blank_content_counts_as_not_found(template, transformer, cache):
    gateway = ExtractionGateway(
        provider=StubProvider({"EMPTY": "  \n"}),
        transformer=transformer,
        template=template,
        cache=cache,
        timeout=5.0,
    )

    assert isinstance(await gateway.fetch_extraction("EMPTY"), NotFound)
    assert transformer.calls == []


@pytest.mark.asyncio
async def test_malformed_reply_is_parse_error_and_not_cached(gateway, transformer):
    transformer.raw_body = "Sorry, I cannot process this."

    first = await gateway.fetch_extraction("INS-2024-001")
    second = await gateway.fetch_extraction("INS-2024-001")

    assert isinstance(first, ParseError)
    assert first.raw_text == "Sorry, I cannot process this."
    assert first.reason
    assert isinstance(second, ParseError)
    assert len(transformer.calls) == 2
    assert gateway.cache.stats()["entries"] == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ['"just a string"', "42", "[1, 2]", '[{"a": 1}, "b"]', "null"])
async def test_scalar_replies_are_rejected(gateway, transformer, reply):
    transformer.raw_body = reply

    result = await gateway.fetch_extraction("INS-2024-001")

    assert isinstance(result, ParseError)
    assert result.raw_text == reply


@pytest.mark.asyncio
async def test_array_of_objects_is_accepted(gateway, transformer):
    transformer.raw_body = '```json\n[{"coverage": "A"}, {"coverage": "B"}] // two riders\n```'

    result = await gateway.fetch_extraction("INS-2024-001")

    assert result == Success(value=[{"coverage": "A"}, {"coverage": "B"}], cached=False)


@pytest.mark.asyncio
async def test_non_200_reply_is_upstream_error(gateway, transformer):
    transformer.status_code = 429
    transformer.raw_body = '{"error": {"code": "429", "message": "Rate limit exceeded"}}'

    result = await gateway.fetch_extraction("INS-2024-001")

    assert isinstance(result, UpstreamError)
    assert result.code == 429
    assert "Rate limit exceeded" in result.body
    assert result.message == "API call failed with code 429"
    assert gateway.cache.stats()["entries"] == 0

    # nothing was cached, so a recovered upstream is called again
    transformer.status_code = 200
    transformer.raw_body = '{"ok": true}'
    assert await gateway.fetch_extraction("INS-2024-001") == Success(value={"ok": True}, cached=False)


@pytest.mark.asyncio
async def test_long_upstream_body_is_truncated(gateway, transformer):
    transformer.status_code = 500
    transformer.raw_body = "x" * (UPSTREAM_ERROR_BODY_LIMIT + 50)

    result = await gateway.fetch_extraction("INS-2024-001")

    assert result.body.startswith("x" * UPSTREAM_ERROR_BODY_LIMIT)
    assert result.body.endswith("[50 more characters]")


def test_truncate_leaves_short_text_alone():
    assert truncate("short") == "short"


@pytest.mark.asyncio
async def test_timeout_is_upstream_error(provider, transformer, template, cache):
    transformer.delay = 1.0
    gateway = ExtractionGateway(
        provider=provider, transformer=transformer, template=template, cache=cache, timeout=0.05
    )

    result = await gateway.fetch_extraction("INS-2024-001")

    assert isinstance(result, UpstreamError)
    assert result.code == "timeout"
    assert not cache.is_in_flight(gateway.cache_key("INS-2024-001"))


@pytest.mark.asyncio
async def test_transport_failure_is_upstream_error(gateway, transformer):
    transformer.error = UpstreamCallError(
        "transport", message="Connection refused", original_error=httpx.ConnectError("refused")
    )

    result = await gateway.fetch_extraction("INS-2024-001")

    assert result == UpstreamError(code="transport", body="", message="Connection refused")


@pytest.mark.asyncio
async def test_unexpected_failure_becomes_internal_error(gateway, transformer):
    transformer.error = RuntimeError("boom")

    result = await gateway.fetch_extraction("INS-2024-001")

    assert isinstance(result, UpstreamError)
    assert result.code == "internal"
    assert "boom" in result.message


@pytest.mark.asyncio
async def test_concurrent_requests_make_one_upstream_call(gateway, transformer):
    transformer.delay = 0.05

    results = await asyncio.gather(*(gateway.fetch_extraction("INS-2024-001") for _ in range(20)))

    assert all(result == Success(value=POLICY_JSON, cached=False) for result in results)
    assert len(transformer.calls) == 1
    assert gateway.cache.stats()["coalesced"] == 19


@pytest.mark.asyncio
async def test_templates_are_cached_separately(gateway, transformer, template):
    other = template.with_params(temperature=0)

    await gateway.fetch_extraction("INS-2024-001")
    await gateway.fetch_extraction("INS-2024-001", template=other)

    assert len(transformer.calls) == 2
    assert transformer.calls[1]["temperature"] == 0
    assert gateway.cache_key("INS-2024-001") != gateway.cache_key("INS-2024-001", other)


@pytest.mark.asyncio
async def test_gateways_with_separate_caches_are_isolated(provider, template):
    transformer = StubTransformer()
    policy = ExtractionGateway(provider, transformer, template, cache=TTLCache(ttl=60), namespace="policy", timeout=5.0)
    ibm = ExtractionGateway(provider, transformer, template, cache=TTLCache(ttl=60), namespace="ibm", timeout=5.0)

    await policy.fetch_extraction("INS-2024-001")
    result = await ibm.fetch_extraction("INS-2024-001")

    assert result.cached is False
    assert len(transformer.calls) == 2


@pytest.mark.asyncio
async def test_invalidate_forces_recompute(gateway, transformer):
    await gateway.fetch_extraction("INS-2024-001")

    assert gateway.invalidate("INS-2024-001") is True
    result = await gateway.fetch_extraction("INS-2024-001")

    assert result.cached is False
    assert len(transformer.calls) == 2


@pytest.mark.asyncio
async def test_expired_result_is_recomputed(gateway, transformer, clock):
    await gateway.fetch_extraction("INS-2024-001")
    clock.advance(1801)

    result = await gateway.fetch_extraction("INS-2024-001")

    assert result.cached is False
    assert len(transformer.calls) == 2


@pytest.mark.asyncio
async def test_transform_content_bypasses_cache(gateway, transformer):
    first = await gateway.transform_content(POLICY_TEXT)
    second = await gateway.transform_content(POLICY_TEXT)

    assert first == second == Success(value=POLICY_JSON, cached=False)
    assert len(transformer.calls) == 2
    assert gateway.cache.stats()["entries"] == 0


class UnreachableStore:
    """Entry store whose backend is down."""

    def get(self, key):
        raise redis.ConnectionError("redis down")

    def put(self, key, entry):
        raise redis.ConnectionError("redis down")

    def delete(self, key):
        raise redis.ConnectionError("redis down")

    def items(self):
        raise redis.ConnectionError("redis down")

    def clear(self):
        raise redis.ConnectionError("redis down")

    def count(self):
        raise redis.ConnectionError("redis down")

    def health_check(self):
        return False


@pytest.mark.asyncio
async def test_store_failure_becomes_internal_error(provider, transformer, template, clock):
    gateway = ExtractionGateway(
        provider=provider,
        transformer=transformer,
        template=template,
        cache=TTLCache(ttl=1800, store=UnreachableStore(), clock=clock),
        timeout=5.0,
    )

    result = await gateway.fetch_extraction("INS-2024-001")

    assert isinstance(result, UpstreamError)
    assert result.code == "internal"
    assert "redis down" in result.message
    assert transformer.calls == []
