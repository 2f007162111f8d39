"""Scalar coercion and small text helpers shared by the engine."""

from __future__ import annotations

import json
import re
from decimal import Decimal
from typing import Any

ZERO_DATE_SENTINEL = "0001-01-01T00:00:00Z"
TAG_SEPARATOR = ", "

_ANSI_CSI = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")
_ANSI_OSC = re.compile(r"\x1b\]\d+;.*?\x07")
_C1_CSI = re.compile(r"\x9b[0-9;:]*[a-zA-Z]?")
_URL_PATTERN = re.compile(r"https?://[^\s<>\"{}|\\^`\[\]]+")
_URL_TRAILING_PUNCTUATION = ".,;:!?)"


def to_text(value: Any) -> str:
    """Render an opaque decoded value as display text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, Decimal)):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (list, tuple)):
        return TAG_SEPARATOR.join(to_text(item) for item in value)
    if isinstance(value, dict):
        return json.dumps(value, sort_keys=True, default=str)
    return str(value)


def join_tags(value: Any) -> str:
    """Join list-valued tags; already-joined strings pass through unchanged."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return TAG_SEPARATOR.join(to_text(item) for item in value)
    return to_text(value)


def trim_quotes(value: str) -> str:
    """Strip surrounding whitespace and one pair of wrapping double quotes."""
    stripped = value.strip()
    if len(stripped) >= 2 and stripped[0] == '"' and stripped[-1] == '"':
        return stripped[1:-1]
    return stripped


def quote_if_needed(value: str) -> str:
    """Wrap a value in double quotes when it contains whitespace."""
    if any(char.isspace() for char in value):
        escaped = value.replace('"', '\\"')
        return f'"{escaped}"'
    return value


def sanitize_due_value(value: str) -> str:
    """Drop the upstream zero-date marker used for "no due date"."""
    stripped = value.strip()
    if stripped.upper() == ZERO_DATE_SENTINEL:
        return ""
    return stripped


def normalize_tag(tag: str) -> str:
    """Tags are single tokens upstream; inner spaces become dashes."""
    return tag.strip().replace(" ", "-")


def strip_ansi(text: str) -> str:
    """Remove terminal escape sequences from captured command output."""
    cleaned = _ANSI_CSI.sub("", text)
    cleaned = _ANSI_OSC.sub("", cleaned)
    return _C1_CSI.sub("", cleaned)


def extract_urls(text: str) -> list[str]:
    """Return unique http(s) URLs in order of first appearance."""
    urls: list[str] = []
    seen: set[str] = set()
    for match in _URL_PATTERN.findall(text):
        url = match.rstrip(_URL_TRAILING_PUNCTUATION)
        if url and url not in seen:
            seen.add(url)
            urls.append(url)
    return urls


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
