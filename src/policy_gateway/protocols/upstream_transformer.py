"""Upstream transformer protocol.

Defines the interface for the remote text-generation service that
turns raw policy text into JSON. The gateway treats it as an
untrusted, fallible black box.

Implementations can include:
- Azure OpenAI chat completions (default)
- Any other chat-completions style endpoint
- Stubs in tests
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class UpstreamResponse:
    """Status and text returned by a transformer.

    Attributes:
        status_code: HTTP status (200 means success)
        raw_body: The model's reply text on success, the error body otherwise
    """

    status_code: int
    raw_body: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200


@runtime_checkable
class UpstreamTransformer(Protocol):
    """Protocol for upstream transformers.

    Example:
        ```python
        transformer: UpstreamTransformer = AzureOpenAITransformer.create(settings)
        response = await transformer.send(body)
        ```
    """

    async def send(self, body: dict[str, Any]) -> UpstreamResponse:
        """Send a request body to the remote model.

        Args:
            body: The request body (messages plus model parameters)

        Returns:
            UpstreamResponse with status code and raw text

        Raises:
            UpstreamCallError: If the request could not be completed
        """
        ...
