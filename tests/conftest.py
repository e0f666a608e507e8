"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any

import pytest

from policy_gateway.entities import PromptTemplate
from policy_gateway.protocols import UpstreamResponse
from policy_gateway.services import ExtractionGateway, TTLCache

POLICY_TEXT = "Name: John Smith, DOB: 12/25/1985, SSN: 123-45-6789, Policy: INS-2024-001"

POLICY_REPLY = (
    '```json\n{"policyNumber":"INS-2024-001","firstName":"John","lastName":"Smith",'
    '"dob":"12/25/1985","ssn":"123-45-6789"}\n```'
)

POLICY_JSON = {
    "policyNumber": "INS-2024-001",
    "firstName": "John",
    "lastName": "Smith",
    "dob": "12/25/1985",
    "ssn": "123-45-6789",
}


class StubTransformer:
    """Upstream transformer returning a canned reply and recording requests."""

    def __init__(self, raw_body: str = POLICY_REPLY, status_code: int = 200) -> None:
        self.raw_body = raw_body
        self.status_code = status_code
        self.delay = 0.0
        self.error: Exception | None = None
        self.calls: list[dict[str, Any]] = []

    async def send(self, body: dict[str, Any]) -> UpstreamResponse:
        self.calls.append(body)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return UpstreamResponse(status_code=self.status_code, raw_body=self.raw_body)


class StubProvider:
    """Source content provider backed by a dict."""

    def __init__(self, contents: dict[str, str]) -> None:
        self.contents = contents
        self.calls: list[str] = []

    async def fetch(self, key: str) -> str | None:
        self.calls.append(key)
        return self.contents.get(key)


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def template() -> PromptTemplate:
    return PromptTemplate(
        system_messages=("Extract the policy holder as JSON.",),
        model_params={"model": "gpt-4.1-myagent", "max_completion_tokens": 13107, "temperature": 1},
    )


@pytest.fixture
def transformer() -> StubTransformer:
    return StubTransformer()


@pytest.fixture
def provider() -> StubProvider:
    return StubProvider({"INS-2024-001": POLICY_TEXT})


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(ttl=1800, clock=clock)


@pytest.fixture
def gateway(provider, transformer, template, cache) -> ExtractionGateway:
    return ExtractionGateway(
        provider=provider,
        transformer=transformer,
        template=template,
        cache=cache,
        namespace="policy",
        timeout=5.0,
    )
