"""Chat request body construction.

Bodies are built as plain structures and serialized once, so quotes,
backslashes and newlines in policy files can never break the wire
format.
"""

import json
from typing import Any, Mapping

from policy_gateway.entities import PromptTemplate
from policy_gateway.entities.prompt_template import RESERVED_BODY_KEYS


class PromptPayloadBuilder:
    """Composes chat-completion request bodies from a template.

    Pure: no I/O, same inputs give the same body.

    Example:
        ```python
        builder = PromptPayloadBuilder()
        body = builder.build(template, policy_text, {"temperature": 0})
        # {"messages": [{"role": "system", ...}, {"role": "user", ...}], "model": ..., "temperature": 0}
        ```
    """

    def build(
        self,
        template: PromptTemplate,
        user_content: str,
        extra: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Build a request body.

        Args:
            template: System messages and default model parameters
            user_content: The raw source content, sent as the user message
            extra: Parameters overriding the template's on key collision

        Returns:
            The request body as a dict

        Raises:
            ValueError: If extra tries to replace the messages
        """
        if not isinstance(user_content, str):
            raise TypeError("user_content must be a string")

        extra = dict(extra or {})
        reserved = RESERVED_BODY_KEYS.intersection(extra)
        if reserved:
            raise ValueError(f"Extra parameters may not set {sorted(reserved)}")

        messages = [{"role": "system", "content": message} for message in template.system_messages]
        messages.append({"role": "user", "content": user_content})

        return {"messages": messages, **template.model_params, **extra}

    @staticmethod
    def serialize(body: Mapping[str, Any]) -> str:
        """Serialize a body to JSON text."""
        return json.dumps(body, ensure_ascii=False)
