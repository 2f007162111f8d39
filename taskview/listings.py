"""Parsers for the project, tag and template listings of the task tool."""

from __future__ import annotations

import re

from taskview.coercion import join_tags, normalize_tag, sanitize_due_value, trim_quotes
from taskview.decoder import decode_json
from taskview.records import (
    DUE_ALIASES,
    ID_ALIASES,
    PROJECT_ALIASES,
    SUMMARY_ALIASES,
    TAGS_ALIASES,
    DecodedRecord,
)

_TEMPLATE_LINE = re.compile(r"^\s*(\d+)\s+(.+)$")
_JSON_LINE_PREFIXES = ("[", "{", "}", "]")


def _lines(raw: str) -> list[str]:
    return [line.strip() for line in raw.replace("\r\n", "\n").split("\n")]


def _record_tags(record: DecodedRecord) -> str:
    found = record.find(*TAGS_ALIASES)
    if found is None:
        return ""
    return join_tags(found.value)


def parse_projects(raw: str) -> list[str]:
    """Project names from JSON records, else one name per plaintext line."""
    decoded = decode_json(raw)
    if decoded.ok:
        decoded_names = (
            trim_quotes(record.text("name", "project")) for record in decoded.records
        )
        return [name for name in decoded_names if name]

    names: list[str] = []
    for line in _lines(raw):
        if not line or line.startswith(_JSON_LINE_PREFIXES):
            continue
        marker = line.lower().find("name:")
        if marker >= 0:
            name = trim_quotes(line[marker + len("name:") :])
            if name:
                names.append(name)
            continue
        names.append(trim_quotes(line))
    return names


def project_rows(raw: str) -> list[dict[str, str]]:
    """Sortable project summary rows; empty when the output is not JSON."""
    decoded = decode_json(raw)
    rows: list[dict[str, str]] = []
    for record in decoded.records:
        name = trim_quotes(record.text("name", "project"))
        if not name:
            continue
        rows.append(
            {
                "name": name,
                "taskCount": record.text("taskCount"),
                "resolvedCount": record.text("resolvedCount"),
                "active": record.text("active"),
                "priority": record.text("priority"),
            }
        )
    return rows


def parse_tags(raw: str) -> list[str]:
    tags: list[str] = []
    for line in _lines(raw):
        if not line or line.startswith(("[", "{")):
            continue
        tag = normalize_tag(line.lstrip("+-* "))
        if tag:
            tags.append(tag)
    return tags


def parse_templates(raw: str) -> list[dict[str, str]]:
    """Templates from JSON records or ``<id> <summary>`` plaintext lines."""
    decoded = decode_json(raw)
    if decoded.ok:
        templates: list[dict[str, str]] = []
        for record in decoded.records:
            template_id = record.text(*ID_ALIASES)
            if not template_id:
                continue
            templates.append(
                {
                    "id": template_id,
                    "summary": trim_quotes(record.text(*SUMMARY_ALIASES)),
                    "project": trim_quotes(record.text(*PROJECT_ALIASES)),
                    "tags": _record_tags(record),
                    "due": sanitize_due_value(trim_quotes(record.text(*DUE_ALIASES))),
                }
            )
        return templates

    templates = []
    for line in _lines(raw):
        if not line or line.startswith(("ID", "[", "{")):
            continue
        match = _TEMPLATE_LINE.match(line)
        if match is None:
            continue
        templates.append(
            {
                "id": match.group(1),
                "summary": trim_quotes(match.group(2)),
                "project": "",
                "tags": "",
                "due": "",
            }
        )
    return templates
