"""
Value stringification for table cells and message lines.

Converts normalized values into display strings:
- None and booleans become the JSON literals null/true/false
- other scalars use their plain text form, unquoted
- everything else is serialized as JSON

The newline policy is applied afterwards, then cell values are truncated.
"""

import json as _json
import typing as _typing

import streamformatter.constants as _constants


def convert_to_string(value: _typing.Any, *, pretty_print: bool = False) -> str:
    """Convert a normalized value to text, before the newline policy."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return str(value)
    return to_json(value, pretty_print=pretty_print)


def to_json(value: _typing.Any, *, pretty_print: bool = False) -> str:
    """
    Serialize a value as JSON.

    Non-ASCII characters are kept as-is. Values json cannot encode
    (circular structures, exotic objects) fall back to str().
    """
    try:
        if pretty_print:
            return _json.dumps(value, ensure_ascii=False, indent=4, default=str)
        return _json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        return str(value)


def replace_newlines(text: str, *, allow_inline_line_breaks: bool = False) -> str:
    """
    Apply the newline policy.

    With inline line breaks disallowed, every \\r\\n, \\r and \\n becomes a
    single space. With them allowed, a JSON object string gets its escaped
    \\r and \\n sequences turned back into real line breaks; any other string
    is returned unchanged.
    """
    if allow_inline_line_breaks:
        if text.startswith("{"):
            return text.replace("\\r", "\r").replace("\\n", "\n")
        return text

    return text.replace("\r\n", " ").replace("\r", " ").replace("\n", " ")


def stringify(
    value: _typing.Any,
    *,
    allow_inline_line_breaks: bool = False,
    pretty_print: bool = False,
) -> str:
    """Convert a value to text and apply the newline policy."""
    return replace_newlines(
        convert_to_string(value, pretty_print=pretty_print),
        allow_inline_line_breaks=allow_inline_line_breaks,
    )


def truncate(text: str, max_length: int = _constants.DEFAULT_MAX_VALUE_LENGTH) -> str:
    """Cut text down to at most max_length characters."""
    return text[:max_length]
