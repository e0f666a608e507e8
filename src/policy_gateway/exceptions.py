"""Exception hierarchy for the extraction pipeline.

These are raised inside the pipeline and converted into tagged
TransformResult values at the ExtractionGateway boundary.
ConfigurationError is the exception: it is raised at startup and
is meant to stop the process.
"""


class GatewayError(Exception):
    """Base exception for extraction gateway errors."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class SourceNotFoundError(GatewayError):
    """Raised when no source content exists for a key."""

    def __init__(self, key: str):
        super().__init__(f"No source content found for {key!r}")
        self.key = key


class UpstreamCallError(GatewayError):
    """Raised when the upstream transformer fails or times out."""

    def __init__(
        self,
        code: int | str,
        body: str = "",
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(
            message or f"Upstream call failed with code {code}",
            original_error=original_error,
        )
        self.code = code
        self.body = body


class ResponseParseError(GatewayError):
    """Raised when a cleaned response is not JSON of an accepted shape."""

    def __init__(self, reason: str, raw_text: str):
        super().__init__(f"Failed to parse AI response: {reason}")
        self.reason = reason
        self.raw_text = raw_text


class ConfigurationError(GatewayError):
    """Raised when configuration is invalid or missing."""
