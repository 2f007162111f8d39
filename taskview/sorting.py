"""Column-aware stable sorting of table rows."""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping, Sequence, TypeVar

from taskview.dates import parse_absolute

Row = TypeVar("Row", bound=Mapping[str, str])

INTEGER_COLUMNS = {"id", "taskCount", "resolvedCount", "age"}
DATE_COLUMNS = {"created", "resolved"}
PRIORITY_RANKS = {"P0": 0, "P1": 1, "P2": 2, "P3": 3}
UNKNOWN_PRIORITY_RANK = 99

_INTEGER = re.compile(r"^[+-]?\d+$")


def priority_rank(priority: str) -> int:
    return PRIORITY_RANKS.get(priority.upper(), UNKNOWN_PRIORITY_RANK)


def _integer_key(value: str) -> int:
    if not _INTEGER.match(value):
        return 0
    return int(value)


def _date_key(value: str) -> float:
    parsed = parse_absolute(value)
    if parsed is None:
        return float("-inf")
    return parsed.timestamp()


def _text_key(value: str) -> str:
    return value.lower()


def sort_key_for(column: str) -> Callable[[str], Any]:
    if column in INTEGER_COLUMNS:
        return _integer_key
    if column == "priority":
        return priority_rank
    if column in DATE_COLUMNS:
        return _date_key
    return _text_key


def sort_rows(rows: Sequence[Row], column: str | None, direction: str | None) -> list[Row]:
    """Return rows ordered by ``column``; ``desc`` reverses, ties keep order."""
    if not column:
        return list(rows)
    key = sort_key_for(column)
    descending = (direction or "").strip().lower() == "desc"
    return sorted(
        rows,
        key=lambda row: key(row.get(column, "") or ""),
        reverse=descending,
    )


def next_sort_direction(
    current_column: str | None, current_direction: str | None, column: str
) -> str:
    """Direction for a column header link: toggle on the active column."""
    if current_column != column:
        return "asc"
    if (current_direction or "").strip().lower() == "asc":
        return "desc"
    return "asc"
