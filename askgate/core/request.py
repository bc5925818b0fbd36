from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, BinaryIO, TextIO

DEFAULT_TOOL_NAME = "Unknown"


@dataclass(frozen=True)
class Request:
    """The pending action the human is asked to decide on."""

    tool_name: str = DEFAULT_TOOL_NAME
    action_text: str = ""
    detail_text: str = ""
    working_directory: str = ""
    raw_input_text: str = ""


# wire key -> (Request field, default)
REQUEST_FIELDS: dict[str, tuple[str, str]] = {
    "tool_name": ("tool_name", DEFAULT_TOOL_NAME),
    "action": ("action_text", ""),
    "detail": ("detail_text", ""),
    "cwd": ("working_directory", ""),
    "raw_input": ("raw_input_text", ""),
}


def parse_request(raw: str | bytes | None) -> Request:
    """Build a Request from raw stdin content.

    Anything that is not a JSON object is treated as an empty object, and every
    field falls back to its default independently when missing or not a string.
    """
    payload = _load_object(raw)
    values: dict[str, str] = {}
    for key, (field_name, default) in REQUEST_FIELDS.items():
        value = payload.get(key)
        values[field_name] = value if isinstance(value, str) else default
    return Request(**values)


def read_request(stream: TextIO | BinaryIO | None) -> Request:
    """Read the whole stream once and parse it."""
    if stream is None:
        return Request()
    source = getattr(stream, "buffer", stream)
    try:
        raw = source.read()
    except (OSError, ValueError):
        return Request()
    return parse_request(raw)


def _load_object(raw: str | bytes | None) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            return {}
    text = raw.strip()
    if not text:
        return {}
    try:
        # numbers are never read as fields; floats skip the int digit limit
        payload = json.loads(text, parse_int=float)
    except (ValueError, RecursionError):
        return {}
    return payload if isinstance(payload, dict) else {}
