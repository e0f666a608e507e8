"""Response sanitizer for model replies.

Chat models often wrap JSON in markdown fences or sprinkle ``//`` and
``/* */`` comments into it. ResponseSanitizer removes both so the text
can be handed to a strict JSON decoder. Decoding is not done here:
text that still does not parse fails later, at the gateway's
validation step.
"""

import re

FENCE = "```"

# Opening fence plus an optional language tag (```json, ```JSON, ```jsonc, ...)
_OPENING_FENCE = re.compile(r"^```(?:[A-Za-z0-9_+.-]+(?=[\s{\[]))?\s*")
_BLANK_LINES = re.compile(r"\n(?:[ \t\r]*\n)+")


def strip_fences(text: str) -> str:
    """Remove a leading markdown fence and everything from the last fence on."""
    if not text.startswith(FENCE):
        return text
    body = _OPENING_FENCE.sub("", text, count=1)
    closing = body.rfind(FENCE)
    if closing != -1:
        body = body[:closing]
    return body.strip()


def strip_comments(text: str) -> str:
    """Remove // and /* */ comments that lie outside double-quoted strings.

    Backslash escapes inside strings are honored, so ``"a \\" // b"``
    stays intact. An unterminated block comment is left as is.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        ch = text[i]
        if in_string:
            if ch == "\\" and i + 1 < n:
                out.append(text[i : i + 2])
                i += 2
                continue
            if ch == '"':
                in_string = False
            out.append(ch)
            i += 1
            continue

        if ch == '"':
            in_string = True
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
            continue
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end != -1:
                i = end + 2
                continue
        out.append(ch)
        i += 1

    return "".join(out)


class ResponseSanitizer:
    """Turns a free-form model reply into JSON text.

    Steps: trim, strip a surrounding code fence, remove comments outside
    quoted strings, collapse the blank lines that leaves behind.

    Text without fences or comments comes back trimmed and otherwise
    untouched, and cleaning is idempotent for unfenced input.

    Example:
        ```python
        sanitizer = ResponseSanitizer()
        sanitizer.clean('```json\\n{"a":1}\\n```')  # '{"a":1}'
        ```
    """

    def __init__(self, remove_comments: bool = True) -> None:
        self._remove_comments = remove_comments

    def clean(self, raw: str | None) -> str:
        """Clean a raw reply. Never raises."""
        if not raw:
            return ""

        unfenced = strip_fences(raw.strip())
        if not self._remove_comments:
            return unfenced

        # Removing one comment can join two slashes into a new one
        cleaned = unfenced
        stripped = strip_comments(cleaned)
        while stripped != cleaned:
            cleaned = stripped
            stripped = strip_comments(cleaned)
        if cleaned == unfenced:
            return unfenced

        lines = [line.rstrip() for line in cleaned.split("\n")]
        return _BLANK_LINES.sub("\n", "\n".join(lines)).strip()

    __call__ = clean
