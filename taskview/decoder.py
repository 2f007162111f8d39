"""Multi-strategy decoding of task tool output.

The upstream tool emits JSON arrays, single objects, near-JSON with stray
text and plaintext tables depending on version and subcommand. Each
strategy is a pure ``text -> records | None`` function; ``decode`` walks
them in priority order and the first one yielding a record wins.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable

from taskview.coercion import trim_quotes
from taskview.records import DecodedRecord

logger = logging.getLogger(__name__)

RawRecords = list[dict[str, Any]]
DecodeStrategy = Callable[[str], RawRecords | None]

_TRAILING_COMMA = re.compile(r",\s*\]")
_LOOSE_BOUNDARY = "\n  {"
_LOOSE_FIELDS = {
    "id": re.compile(r'"id"\s*:\s*([0-9]+)'),
    "summary": re.compile(r'"summary"\s*:\s*"([^"]*)"'),
    "project": re.compile(r'"project"\s*:\s*"([^"]*)"'),
    "priority": re.compile(r'"priority"\s*:\s*"([^"]*)"'),
    "due": re.compile(r'"due"\s*:\s*"([^"]*)"'),
    "notes": re.compile(r'"notes"\s*:\s*"([^"]*)"'),
    "status": re.compile(r'"status"\s*:\s*"([^"]*)"'),
    "created": re.compile(r'"created"\s*:\s*"([^"]*)"'),
    "resolved": re.compile(r'"resolved"\s*:\s*"([^"]*)"'),
}
_PLAIN_ROW = re.compile(r"^\s*(\d+)\s+(P[0-3])\s+(\S+)\s+(.*\S)\s*$")


@dataclass(frozen=True)
class DecodeResult:
    records: list[DecodedRecord] = field(default_factory=list)
    ok: bool = False
    strategy: str | None = None


def _load_json(text: str) -> Any:
    return json.loads(text, parse_float=Decimal)


def _objects_only(items: list[Any]) -> RawRecords:
    return [item for item in items if isinstance(item, dict)]


def _array_span(text: str) -> str | None:
    start = text.find("[")
    end = text.rfind("]")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def _object_span(text: str) -> str | None:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


def decode_strict_array(text: str) -> RawRecords | None:
    try:
        parsed = _load_json(text)
    except ValueError:
        return None
    if not isinstance(parsed, list):
        return None
    return _objects_only(parsed)


def decode_trimmed_array(text: str) -> RawRecords | None:
    span = _array_span(text.strip())
    if span is None:
        return None
    return decode_strict_array(_TRAILING_COMMA.sub("]", span))


def decode_single_object(text: str) -> RawRecords | None:
    try:
        parsed = _load_json(text)
    except ValueError:
        return None
    if not isinstance(parsed, dict) or not parsed:
        return None
    return [parsed]


def decode_trimmed_object(text: str) -> RawRecords | None:
    span = _object_span(text.strip())
    if span is None:
        return None
    return decode_single_object(span)


def decode_loose_fields(text: str) -> RawRecords | None:
    """Recover individual fields with regexes from broken JSON-ish text."""
    normalized = text.replace("\r\n", "\n")
    normalized = _array_span(normalized) or normalized
    records: RawRecords = []
    for fragment in normalized.split(_LOOSE_BOUNDARY):
        id_match = _LOOSE_FIELDS["id"].search(fragment)
        if id_match is None:
            continue
        record: dict[str, Any] = {"id": id_match.group(1)}
        for name, pattern in _LOOSE_FIELDS.items():
            if name == "id":
                continue
            match = pattern.search(fragment)
            if match is not None:
                record[name] = trim_quotes(match.group(1))
        records.append(record)
    return records or None


def decode_plain_table(text: str) -> RawRecords | None:
    """Parse the ``ID  P  Project  Summary`` table of show-open style output."""
    records: RawRecords = []
    for line in text.replace("\r\n", "\n").split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        if stripped.startswith("ID") and "Summary" in stripped:
            continue
        match = _PLAIN_ROW.match(stripped)
        if match is None:
            continue
        records.append(
            {
                "id": match.group(1),
                "priority": match.group(2),
                "project": trim_quotes(match.group(3)),
                "summary": trim_quotes(match.group(4)),
            }
        )
    return records or None


STRATEGIES: tuple[tuple[str, DecodeStrategy], ...] = (
    ("strict_array", decode_strict_array),
    ("trimmed_array", decode_trimmed_array),
    ("single_object", decode_single_object),
    ("trimmed_object", decode_trimmed_object),
    ("loose_fields", decode_loose_fields),
    ("plain_table", decode_plain_table),
)

JSON_STRATEGIES = STRATEGIES[:4]


def first_success(
    text: str, strategies: tuple[tuple[str, DecodeStrategy], ...]
) -> DecodeResult:
    """Return the records of the first strategy yielding at least one."""
    for name, strategy in strategies:
        raw_records = strategy(text)
        if not raw_records:
            continue
        records = [DecodedRecord(fields=item, strategy=name) for item in raw_records]
        logger.debug("Decoded %d record(s) with strategy %s", len(records), name)
        return DecodeResult(records=records, ok=True, strategy=name)
    logger.debug("No decode strategy recovered records (%d chars)", len(text))
    return DecodeResult()


def decode(raw: str | None) -> DecodeResult:
    """Decode task tool output with every strategy in priority order."""
    if not raw or not raw.strip():
        return DecodeResult()
    return first_success(raw, STRATEGIES)


def decode_json(raw: str | None) -> DecodeResult:
    """Decode using the JSON strategies only (array or object)."""
    if not raw or not raw.strip():
        return DecodeResult()
    return first_success(raw, JSON_STRATEGIES)
