"""Mapping of decoded records onto canonical task rows."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, Mapping

from taskview.coercion import join_tags, sanitize_due_value, trim_quotes
from taskview.dates import age_in_days, is_overdue, local_now, parse_absolute, parse_due
from taskview.records import (
    CREATED_ALIASES,
    DUE_ALIASES,
    ID_ALIASES,
    NOTES_ALIASES,
    PRIORITY_ALIASES,
    PROJECT_ALIASES,
    RESOLVED_ALIASES,
    RESOLVED_FLAG_ALIASES,
    STATUS_ALIASES,
    SUMMARY_ALIASES,
    TAGS_ALIASES,
    DecodedRecord,
)

logger = logging.getLogger(__name__)

CanonicalRow = dict[str, str]

ROW_FIELDS = (
    "id",
    "status",
    "summary",
    "project",
    "priority",
    "due",
    "tags",
    "created",
    "resolved",
    "notes",
    "age",
    "overdue",
)
RESOLVED_STATUSES = {"resolved", "done"}


class StatusKind(Enum):
    ALL = "all"
    EXCLUDE_RESOLVED = "exclude_resolved"
    ONLY_STATUS = "only_status"
    ONLY_RESOLVED = "only_resolved"


@dataclass(frozen=True)
class StatusFilter:
    """Which lifecycle statuses survive normalization.

    An empty request excludes resolved rows by default, while ``resolved``
    asks for resolved rows only. Named statuses such as ``active`` or
    ``paused`` come from subcommands that already selected by status, so
    they only drop resolved rows and keep every other row.
    """

    kind: StatusKind = StatusKind.EXCLUDE_RESOLVED
    status: str = ""

    @classmethod
    def parse(cls, value: str | None) -> StatusFilter:
        normalized = (value or "").strip().lower()
        if not normalized:
            return cls(StatusKind.EXCLUDE_RESOLVED)
        if normalized == "all":
            return cls(StatusKind.ALL)
        if normalized in RESOLVED_STATUSES:
            return cls(StatusKind.ONLY_RESOLVED, "resolved")
        return cls(StatusKind.ONLY_STATUS, normalized)

    def keeps(self, resolved: bool) -> bool:
        if self.kind is StatusKind.ALL:
            return True
        if self.kind is StatusKind.ONLY_RESOLVED:
            return resolved
        return not resolved


def is_resolved(record: DecodedRecord) -> bool:
    """Resolved by status/state value or by a boolean resolved flag."""
    status = trim_quotes(record.text(*STATUS_ALIASES)).lower()
    if status in RESOLVED_STATUSES:
        return True
    return record.flag(*RESOLVED_FLAG_ALIASES)


def _text_field(record: DecodedRecord, aliases: tuple[str, ...]) -> str:
    return trim_quotes(record.text(*aliases))


def _due_field(record: DecodedRecord, now: datetime) -> str:
    due = sanitize_due_value(_text_field(record, DUE_ALIASES))
    if due and parse_due(due, now) is None:
        return ""
    return due


def _timestamp_field(record: DecodedRecord, aliases: tuple[str, ...]) -> str:
    found = record.find(*aliases)
    if found is None or found.is_bool:
        return ""
    value = sanitize_due_value(trim_quotes(found.as_text()))
    if value and parse_absolute(value) is None:
        return ""
    return value


def _tags_field(record: DecodedRecord) -> str:
    found = record.find(*TAGS_ALIASES)
    if found is None:
        return ""
    return join_tags(found.value)


def is_canonical_row(fields: Mapping[str, object]) -> bool:
    """True for a mapping holding exactly the canonical keys, all strings."""
    return set(fields) == set(ROW_FIELDS) and all(
        isinstance(value, str) for value in fields.values()
    )


def _refresh_row(fields: Mapping[str, str], now: datetime) -> CanonicalRow | None:
    row = {name: fields[name] for name in ROW_FIELDS}
    if not row["id"]:
        return None
    row["age"] = age_in_days(row["created"], now)
    row["overdue"] = "true" if is_overdue(row["due"], now) else "false"
    return row


def normalize_record(
    record: DecodedRecord, now: datetime | None = None
) -> CanonicalRow | None:
    """Build one canonical row, or ``None`` when no id can be resolved.

    Canonical rows pass through with only ``age`` and ``overdue`` derived
    again, so normalizing twice yields the same row.
    """
    current = local_now(now)
    if is_canonical_row(record.fields):
        return _refresh_row(record.fields, current)
    row_id = _text_field(record, ID_ALIASES)
    if not row_id:
        return None
    created = _timestamp_field(record, CREATED_ALIASES)
    due = _due_field(record, current)
    return {
        "id": row_id,
        "status": _text_field(record, STATUS_ALIASES).lower(),
        "summary": _text_field(record, SUMMARY_ALIASES),
        "project": _text_field(record, PROJECT_ALIASES),
        "priority": _text_field(record, PRIORITY_ALIASES),
        "due": due,
        "tags": _tags_field(record),
        "created": created,
        "resolved": _timestamp_field(record, RESOLVED_ALIASES),
        "notes": _text_field(record, NOTES_ALIASES),
        "age": age_in_days(created, current),
        "overdue": "true" if is_overdue(due, current) else "false",
    }


def normalize_records(
    records: Iterable[DecodedRecord | Mapping[str, object]],
    status_filter: StatusFilter | str | None = None,
    now: datetime | None = None,
) -> list[CanonicalRow]:
    """Normalize records, applying the status filter and dropping id-less ones."""
    if not isinstance(status_filter, StatusFilter):
        status_filter = StatusFilter.parse(status_filter)
    current = local_now(now)

    rows: list[CanonicalRow] = []
    dropped = 0
    for item in records:
        record = item if isinstance(item, DecodedRecord) else DecodedRecord(fields=item)
        if not status_filter.keeps(is_resolved(record)):
            continue
        row = normalize_record(record, current)
        if row is None:
            dropped += 1
            continue
        rows.append(row)

    if dropped:
        logger.debug("Dropped %d record(s) without a resolvable id", dropped)
    return rows
