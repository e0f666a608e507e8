"""
Tests for the response sanitizer.
"""

import json

import pytest

from policy_gateway.services import ResponseSanitizer
from policy_gateway.services.sanitizer import strip_comments


@pytest.fixture
def sanitizer():
    return ResponseSanitizer()


def test_strips_json_fence(sanitizer):
    assert sanitizer.clean('```json\n{"a":1}\n```') == '{"a":1}'


@pytest.mark.parametrize("tag", ["json", "JSON", "Json", ""])
def test_strips_fence_with_any_tag_case(sanitizer, tag):
    raw = f'```{tag}\n[{{"a": 1}}]\n```'
    assert sanitizer.clean(raw) == '[{"a": 1}]'


def test_strips_surrounding_whitespace_and_trailing_prose(sanitizer):
    raw = '\n\n  ```json\n{"a": 1}\n```\nLet me know if you need anything else.  '
    assert sanitizer.clean(raw) == '{"a": 1}'


def test_clean_json_is_returned_trimmed_only(sanitizer):
    raw = '  {\n  "a": 1,\n\n  "b": [1, 2]\n}\n'
    assert sanitizer.clean(raw) == raw.strip()


def test_preserves_slashes_inside_strings(sanitizer):
    assert sanitizer.clean('{"url":"http://x"}') == '{"url":"http://x"}'
    assert sanitizer.clean('{"glob":"/* not a comment */"}') == '{"glob":"/* not a comment */"}'


def test_removes_line_and_block_comments(sanitizer):
    raw = (
        "```json\n"
        "{\n"
        '  "policyNumber": "TL6534868", // the policy id\n'
        "  /* beneficiary block\n"
        "     spans lines */\n"
        '  "site": "https://umbrella.com"\n'
        "}\n"
        "```"
    )
    cleaned = sanitizer.clean(raw)
    assert json.loads(cleaned) == {"policyNumber": "TL6534868", "site": "https://umbrella.com"}
    assert "//" not in cleaned.replace("https://", "")
    assert "\n\n" not in cleaned


def test_escaped_quotes_do_not_end_strings():
    text = '{"quote": "say \\"hi\\" // still text"} // gone'
    assert strip_comments(text) == '{"quote": "say \\"hi\\" // still text"} '


def test_unterminated_block_comment_is_kept():
    assert strip_comments('{"a": 1} /* open') == '{"a": 1} /* open'


@pytest.mark.parametrize(
    "raw",
    [
        '{"a": 1}',
        '{"a": 1} // note',
        '{\n  "a": 1, /* x */\n\n  "b": "http://y"\n}',
        "Sorry, I cannot process this.",
        "/// triple",
        "/*/ tricky */ {}",
        "/ /* x */ / {}",
    ],
)
def test_clean_is_idempotent_without_fences(sanitizer, raw):
    once = sanitizer.clean(raw)
    assert sanitizer.clean(once) == once


def test_empty_input_never_raises(sanitizer):
    assert sanitizer.clean("") == ""
    assert sanitizer.clean(None) == ""
    assert sanitizer.clean("```") == ""


def test_comment_removal_can_be_disabled():
    sanitizer = ResponseSanitizer(remove_comments=False)
    assert sanitizer.clean('```json\n{"a": 1} // keep\n```') == '{"a": 1} // keep'


@pytest.mark.parametrize("raw", ['```json{"a":1}```', '```JSON[{"a":1}]```', '```{"a":1}```'])
def test_strips_tag_glued_to_single_line_json(sanitizer, raw):
    assert json.loads(sanitizer.clean(raw)) in ({"a": 1}, [{"a": 1}])
