"""Azure OpenAI chat-completions transformer.

Posts a request body to an Azure OpenAI (or Azure AI inference)
chat-completions deployment and returns the model's reply text.

Key features:
- Bearer authentication and model-profile specific headers
- Shared async connection pool (keep-alive)
- Unwraps ``choices[0].message.content`` from successful replies
"""

import json
import logging
from typing import Any

import httpx

from policy_gateway.config import Settings, get_settings
from policy_gateway.entities import ModelConfig, get_model_config
from policy_gateway.exceptions import UpstreamCallError
from policy_gateway.protocols import UpstreamResponse

logger = logging.getLogger(__name__)


class AzureOpenAITransformer:
    """Azure OpenAI implementation of the UpstreamTransformer protocol.

    This class satisfies the UpstreamTransformer protocol through
    structural typing - no explicit inheritance needed.

    Example:
        ```python
        transformer = AzureOpenAITransformer.create()
        response = await transformer.send({"messages": [...], "model": "gpt-4.1-myagent"})
        print(response.status_code, response.raw_body)
        ```
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        extra_headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the transformer.

        Args:
            url: Full chat-completions URL (including api-version).
            api_key: Bearer credential.
            extra_headers: Additional headers for the deployment.
            timeout: Request timeout in seconds.
            client: Optional pre-built httpx client (tests, shared pools).
        """
        self._url = url
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
            **(extra_headers or {}),
        }
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        model_config: ModelConfig | None = None,
    ) -> "AzureOpenAITransformer":
        """Factory method to create the transformer from settings.

        Args:
            settings: Application settings. If None, uses get_settings().
            model_config: Model profile settings. If None, uses the configured profile.

        Returns:
            Configured AzureOpenAITransformer

        Raises:
            ConfigurationError: If the API key is missing
        """
        settings = settings or get_settings()
        model_config = model_config or get_model_config(settings.profile)
        return cls(
            url=settings.azure_openai_url or model_config.url(settings.azure_openai_endpoint),
            api_key=settings.require_api_key(),
            extra_headers=dict(model_config.headers),
            timeout=settings.upstream_timeout,
        )

    @property
    def url(self) -> str:
        return self._url

    async def send(self, body: dict[str, Any]) -> UpstreamResponse:
        """POST a request body and return the reply.

        Args:
            body: The request body (messages plus model parameters)

        Returns:
            UpstreamResponse. On 200 the raw body is the model's message
            content; otherwise it is the error body as received.

        Raises:
            UpstreamCallError: On timeouts and transport failures
        """
        try:
            response = await self.client.post(self._url, json=body, headers=self._headers)
        except httpx.TimeoutException as e:
            raise UpstreamCallError(
                "timeout", message=f"Azure OpenAI request timed out: {e}", original_error=e
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamCallError(
                "transport", message=f"Azure OpenAI request failed: {e}", original_error=e
            ) from e

        logger.debug("Azure OpenAI responded with status %s", response.status_code)
        if response.status_code != 200:
            return UpstreamResponse(status_code=response.status_code, raw_body=response.text)

        return UpstreamResponse(status_code=200, raw_body=self.extract_content(response.text))

    @staticmethod
    def extract_content(response_text: str) -> str:
        """Pull ``choices[0].message.content`` out of a completion envelope.

        Falls back to the full text when the envelope does not have that
        shape, so the caller can report it as unparsable.
        """
        try:
            envelope = json.loads(response_text)
            content = envelope["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("Completion envelope without choices[0].message.content")
            return response_text
        if not isinstance(content, str):
            return response_text
        return content

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None
