"""Helpers for bot data values stored as escaped JSON strings."""

import html
import json
from typing import Any


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, dict | list):
        return json.dumps(value)
    return str(value)


def escape_and_stringify(obj: dict[str, Any]) -> str:
    """HTML-escape every top-level value, then JSON-encode the mapping.

    Values are turned into text first, so the decoded result always
    holds strings.

    Args:
        obj: Mapping to encode; it is not modified

    Returns:
        JSON text
    """
    escaped = {key: html.escape(_to_text(value)) for key, value in obj.items()}
    return json.dumps(escaped)


def parse_and_unescape(text: str) -> Any:
    """Decode JSON text and unescape every top-level string value.

    Raises:
        json.JSONDecodeError: If the text is not valid JSON
    """
    obj = json.loads(text)
    if not isinstance(obj, dict):
        return obj
    return {
        key: html.unescape(value) if isinstance(value, str) else value
        for key, value in obj.items()
    }
