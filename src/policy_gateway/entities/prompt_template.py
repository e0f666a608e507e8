"""Prompt template domain entity."""

import hashlib
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

RESERVED_BODY_KEYS = frozenset({"messages"})


@dataclass(frozen=True)
class PromptTemplate:
    """System messages and model parameters for one kind of extraction.

    Templates are built once at startup and shared read-only afterwards.
    Construction fails fast on malformed input.

    Attributes:
        system_messages: System message contents, sent in this order
        model_params: Top-level request parameters (model, max tokens, ...)
    """

    system_messages: tuple[str, ...]
    model_params: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        messages = tuple(self.system_messages)
        if not messages:
            raise ValueError("PromptTemplate needs at least one system message")
        for message in messages:
            if not isinstance(message, str) or not message.strip():
                raise ValueError("System messages must be non-empty strings")

        params = dict(self.model_params)
        reserved = RESERVED_BODY_KEYS.intersection(params)
        if reserved:
            raise ValueError(f"Model parameters may not set {sorted(reserved)}")

        object.__setattr__(self, "system_messages", messages)
        object.__setattr__(self, "model_params", MappingProxyType(params))

    @property
    def fingerprint(self) -> str:
        """Short stable digest of the template contents."""
        encoded = json.dumps(
            {"system": list(self.system_messages), "params": dict(self.model_params)},
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()[:12]

    def with_params(self, **overrides: Any) -> "PromptTemplate":
        """Return a copy with some model parameters replaced."""
        return PromptTemplate(
            system_messages=self.system_messages,
            model_params={**self.model_params, **overrides},
        )
