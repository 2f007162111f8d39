"""Absolute and relative date interpretation.

All returned datetimes are timezone-aware and expressed in server-local
time. Bare dates and relative expressions resolve to local midnight, so
day-granularity comparisons work on the local calendar date. ``None`` means
"no usable date" and is never an error.
"""

from __future__ import annotations

import re
from datetime import date, datetime, time, timedelta

from taskview.coercion import ZERO_DATE_SENTINEL

_RFC3339 = re.compile(
    r"^(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})$",
    re.IGNORECASE,
)
_LEGACY = re.compile(
    r"^(?P<stamp>\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r" (?P<offset>[+-]\d{4})(?: \S+)?$"
)
_BARE_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_WEEKDAYS = {
    "monday": 0, "mon": 0, "mo": 0,
    "tuesday": 1, "tue": 1, "tu": 1,
    "wednesday": 2, "wed": 2, "we": 2,
    "thursday": 3, "thu": 3, "th": 3,
    "friday": 4, "fri": 4, "fr": 4,
    "saturday": 5, "sat": 5, "sa": 5,
    "sunday": 6, "sun": 6, "su": 6,
}  # fmt: skip


def local_now(now: datetime | None = None) -> datetime:
    """Return ``now`` (or the current time) as an aware local datetime."""
    if now is None:
        return datetime.now().astimezone()
    return now.astimezone()


def local_midnight(day: date) -> datetime:
    return datetime.combine(day, time()).astimezone()


def start_of_day(moment: datetime) -> datetime:
    """Truncate a datetime to local midnight of its local calendar day."""
    return local_midnight(moment.astimezone().date())


def _fraction_to_micros(fraction: str | None) -> int:
    if not fraction:
        return 0
    return int(fraction[:6].ljust(6, "0"))


def _parse_rfc3339(value: str) -> datetime | None:
    match = _RFC3339.match(value)
    if match is None:
        return None
    offset = match.group("offset").upper()
    if offset == "Z":
        offset = "+00:00"
    try:
        parsed = datetime.strptime(
            match.group("stamp") + offset, "%Y-%m-%dT%H:%M:%S%z"
        )
    except ValueError:
        return None
    return parsed.replace(microsecond=_fraction_to_micros(match.group("fraction")))


def _parse_legacy(value: str) -> datetime | None:
    match = _LEGACY.match(value)
    if match is None:
        return None
    try:
        parsed = datetime.strptime(
            f"{match.group('stamp')} {match.group('offset')}",
            "%Y-%m-%d %H:%M:%S %z",
        )
    except ValueError:
        return None
    return parsed.replace(microsecond=_fraction_to_micros(match.group("fraction")))


def _parse_bare_date(value: str) -> datetime | None:
    if not _BARE_DATE.match(value):
        return None
    try:
        day = datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None
    if day.year <= 1:
        return None
    try:
        return local_midnight(day)
    except (OverflowError, ValueError):
        return None


def parse_absolute(value: str) -> datetime | None:
    """Parse RFC3339 (with or without fractions), legacy and bare dates."""
    stripped = value.strip()
    if not stripped or stripped.upper() == ZERO_DATE_SENTINEL:
        return None
    for parser in (_parse_rfc3339, _parse_legacy, _parse_bare_date):
        parsed = parser(stripped)
        if parsed is None:
            continue
        if parsed.year <= 1:
            return None
        try:
            return parsed.astimezone()
        except (OverflowError, ValueError):
            # Local conversion leaves the representable range at year 1 or 9999.
            return None
    return None


def parse_relative(value: str, now: datetime | None = None) -> datetime | None:
    """Parse today/tomorrow/yesterday and (this-|next-)weekday expressions."""
    expression = value.strip().lower()
    if not expression:
        return None
    today = local_now(now).date()

    if expression == "yesterday":
        return local_midnight(today - timedelta(days=1))
    if expression == "today":
        return local_midnight(today)
    if expression == "tomorrow":
        return local_midnight(today + timedelta(days=1))

    is_next = expression.startswith("next-")
    if is_next or expression.startswith("this-"):
        expression = expression.split("-", 1)[1]

    weekday = _WEEKDAYS.get(expression)
    if weekday is None:
        return None
    days_ahead = (weekday - today.weekday()) % 7
    if is_next:
        days_ahead += 7
    return local_midnight(today + timedelta(days=days_ahead))


def parse_due(value: str, now: datetime | None = None) -> datetime | None:
    """Relative expressions first, then absolute formats."""
    if not value or not value.strip():
        return None
    relative = parse_relative(value, now)
    if relative is not None:
        return relative
    return parse_absolute(value)


def age_in_days(created: str, now: datetime | None = None) -> str:
    """Whole days elapsed since ``created``; empty when unparseable."""
    parsed = parse_absolute(created)
    if parsed is None:
        return ""
    elapsed = local_now(now) - parsed
    return str(int(elapsed.total_seconds() / 86400))


def is_overdue(due: str, now: datetime | None = None) -> bool:
    """True when ``due`` is a usable time strictly before now."""
    current = local_now(now)
    parsed = parse_due(due, current)
    if parsed is None:
        return False
    return parsed < current


def format_date_short(value: str) -> str:
    parsed = parse_absolute(value)
    if parsed is None:
        return ""
    return parsed.strftime("%Y-%m-%d %H:%M")
