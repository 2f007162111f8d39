"""Free-text query and due-date filtering of canonical rows."""

from __future__ import annotations

from datetime import date, datetime
from typing import Mapping, Sequence, TypeVar

from taskview.dates import local_now, parse_due

Row = TypeVar("Row", bound=Mapping[str, str])

OVERDUE_TOKENS = {"due:overdue", "overdue"}
DUE_TOKEN_PREFIXES = {
    "due.before:": "before",
    "due.after:": "after",
    "due.on:": "on",
}


def row_matches(row: Mapping[str, str], tokens: Sequence[str]) -> bool:
    """A row matches when every token matches (logical AND)."""
    for token in tokens:
        if not token:
            continue
        if token.startswith("+"):
            tag = token[1:].lower()
            if tag not in row.get("tags", "").lower():
                return False
            continue
        if token.lower().startswith("project:"):
            project = token[len("project:") :]
            if row.get("project", "").lower() != project.lower():
                return False
            continue
        if token.lower() not in row.get("summary", "").lower():
            return False
    return True


def filter_by_query(rows: Sequence[Row], query: str | None) -> list[Row]:
    """Keep rows matching ``+tag``, ``project:name`` and plain text tokens."""
    tokens = (query or "").split()
    if not tokens:
        return list(rows)
    return [row for row in rows if row_matches(row, tokens)]


def _due_day(row: Mapping[str, str], now: datetime) -> date | None:
    due = row.get("due", "")
    if not due:
        return None
    parsed = parse_due(due, now)
    if parsed is None:
        return None
    return parsed.date()


def filter_by_due(
    rows: Sequence[Row], token: str | None, now: datetime | None = None
) -> list[Row]:
    """Apply a ``due:overdue`` or ``due.(before|after|on):<date>`` token.

    Comparisons happen on local calendar days. Rows without a usable due
    date never match. An empty, unknown or unparseable token leaves the
    rows untouched.
    """
    token = (token or "").strip()
    if not token:
        return list(rows)
    current = local_now(now)
    today = current.date()

    if token in OVERDUE_TOKENS:
        overdue: list[Row] = []
        for row in rows:
            day = _due_day(row, current)
            if day is not None and day < today:
                overdue.append(row)
        return overdue

    mode = None
    date_text = ""
    for prefix, candidate in DUE_TOKEN_PREFIXES.items():
        if token.startswith(prefix):
            mode = candidate
            date_text = token[len(prefix) :]
            break
    if mode is None:
        return list(rows)

    boundary = parse_due(date_text, current)
    if boundary is None:
        return list(rows)
    boundary_day = boundary.date()

    matched: list[Row] = []
    for row in rows:
        day = _due_day(row, current)
        if day is None:
            continue
        if mode == "before" and day < boundary_day:
            matched.append(row)
        elif mode == "after" and day > boundary_day:
            matched.append(row)
        elif mode == "on" and day == boundary_day:
            matched.append(row)
    return matched


def build_due_filter_token(filter_type: str | None, filter_date: str | None) -> str:
    """Combine ``dueFilterType``/``dueFilterDate`` parameters into a token."""
    kind = (filter_type or "").strip()
    when = (filter_date or "").strip()
    if not kind:
        return ""
    if kind == "overdue":
        return "due:overdue"
    if not when:
        return ""
    return f"due.{kind}:{when}"
