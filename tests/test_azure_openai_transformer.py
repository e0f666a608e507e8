"""
Tests for the Azure OpenAI transformer.
"""

import json

import httpx
import pytest
import pytest_asyncio
import respx

from policy_gateway.config import Settings
from policy_gateway.entities import ModelProfile, get_model_config
from policy_gateway.exceptions import ConfigurationError, UpstreamCallError
from policy_gateway.repositories import AzureOpenAITransformer

URL = "https://unit-test.cognitiveservices.azure.com/openai/deployments/gpt-4.1-myagent/chat/completions?api-version=2025-01-01-preview"


def completion(content) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


@pytest_asyncio.fixture
async def transformer():
    transformer = AzureOpenAITransformer(url=URL, api_key="test-key", timeout=5.0)
    yield transformer
    await transformer.close()


@pytest.mark.asyncio
@respx.mock
async def test_send_unwraps_message_content(transformer):
    route = respx.post(URL).mock(return_value=httpx.Response(200, json=completion('{"a": 1}')))

    response = await transformer.send({"messages": [{"role": "user", "content": "hi"}], "model": "gpt-4.1-myagent"})

    assert response.ok
    assert response.raw_body == '{"a": 1}'

    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content)["model"] == "gpt-4.1-myagent"


@pytest.mark.asyncio
@respx.mock
async def test_non_200_returns_error_body(transformer):
    respx.post(URL).mock(return_value=httpx.Response(401, text='{"error": "unauthorized"}'))

    response = await transformer.send({"messages": []})

    assert not response.ok
    assert response.status_code == 401
    assert response.raw_body == '{"error": "unauthorized"}'


@pytest.mark.asyncio
@respx.mock
async def test_envelope_without_choices_falls_back_to_raw_text(transformer):
    respx.post(URL).mock(return_value=httpx.Response(200, json={"choices": []}))

    response = await transformer.send({"messages": []})

    assert response.ok
    assert json.loads(response.raw_body) == {"choices": []}


@pytest.mark.asyncio
@respx.mock
async def test_timeout_raises_upstream_call_error(transformer):
    respx.post(URL).mock(side_effect=httpx.ReadTimeout("read timed out"))

    with pytest.raises(UpstreamCallError) as exc_info:
        await transformer.send({"messages": []})

    assert exc_info.value.code == "timeout"


@pytest.mark.asyncio
@respx.mock
async def test_connection_failure_raises_upstream_call_error(transformer):
    respx.post(URL).mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(UpstreamCallError) as exc_info:
        await transformer.send({"messages": []})

    assert exc_info.value.code == "transport"
    assert isinstance(exc_info.value.original_error, httpx.ConnectError)


def test_extract_content_ignores_non_string_content():
    text = json.dumps(completion(None))
    assert AzureOpenAITransformer.extract_content(text) == text
    assert AzureOpenAITransformer.extract_content("not json") == "not json"


def test_create_builds_url_from_profile():
    settings = Settings(
        azure_openai_endpoint="https://unit-test.cognitiveservices.azure.com/",
        azure_openai_api_key="test-key",
        azure_openai_url=None,
        model_profile="gpt-4.1-myagent",
    )

    transformer = AzureOpenAITransformer.create(settings)

    assert transformer.url == URL


def test_create_honors_url_override_and_profile_headers():
    settings = Settings(
        azure_openai_api_key="test-key",
        azure_openai_url="https://override.example/chat",
        model_profile="DeepSeek-R1",
    )

    transformer = AzureOpenAITransformer.create(settings)

    assert transformer.url == "https://override.example/chat"
    assert transformer._headers["azureml-model-deployment"] == "gpt-4"


def test_create_requires_api_key():
    settings = Settings(azure_openai_api_key=None)

    with pytest.raises(ConfigurationError):
        AzureOpenAITransformer.create(settings)


def test_deepseek_uses_inference_route():
    config = get_model_config(ModelProfile.DEEPSEEK_R1)

    assert config.url("https://x.services.ai.azure.com") == (
        "https://x.services.ai.azure.com/models/chat/completions?api-version=2024-05-01-preview"
    )
    assert config.params["max_tokens"] == 2048
