"""Tagged results returned by the extraction gateway.

Exactly one of these comes back from every
ExtractionGateway.fetch_extraction call. Callers distinguish them by
type (or by the ``kind`` attribute).
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Union


@dataclass(frozen=True)
class Success:
    """The upstream reply decoded into an object or an array of objects."""

    kind: ClassVar[str] = "success"

    value: Any
    cached: bool = False

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    """No source content exists for the key. Never retried automatically."""

    kind: ClassVar[str] = "not_found"

    key: str
    message: str

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class UpstreamError:
    """The transformer failed, answered with a non-success status or timed out.

    ``code`` is the HTTP status, or ``"timeout"``, ``"transport"`` or
    ``"internal"``. ``body`` is truncated for diagnostics.
    """

    kind: ClassVar[str] = "upstream_error"

    code: int | str
    body: str
    message: str

    @property
    def ok(self) -> bool:
        return False


@dataclass(frozen=True)
class ParseError:
    """The cleaned reply was not a JSON object or array of objects."""

    kind: ClassVar[str] = "parse_error"

    reason: str
    raw_text: str
    message: str

    @property
    def ok(self) -> bool:
        return False


TransformResult = Union[Success, NotFound, UpstreamError, ParseError]
