from datetime import datetime, timedelta

import pytest

from taskview.decoder import decode
from taskview.normalizer import (
    ROW_FIELDS,
    StatusFilter,
    StatusKind,
    is_canonical_row,
    is_resolved,
    normalize_record,
    normalize_records,
)
from taskview.records import DecodedRecord

NOW = datetime(2025, 1, 15, 12, 0).astimezone()
FIVE_DAYS_AGO = (NOW - timedelta(days=5, hours=1)).isoformat()
IN_ONE_HOUR = (NOW + timedelta(hours=1)).isoformat()


def _record(**fields):
    return DecodedRecord(fields=fields)


def test_normalize_record_fills_every_field():
    row = normalize_record(
        _record(
            id=7,
            status="Active",
            summary='"Write report"',
            project="work",
            priority="P1",
            due="2025-01-20",
            tags=["a", "b"],
            created=FIVE_DAYS_AGO,
            notes="draft first",
        ),
        NOW,
    )

    assert tuple(row) == ROW_FIELDS
    assert row == {
        "id": "7",
        "status": "active",
        "summary": "Write report",
        "project": "work",
        "priority": "P1",
        "due": "2025-01-20",
        "tags": "a, b",
        "created": FIVE_DAYS_AGO,
        "resolved": "",
        "notes": "draft first",
        "age": "5",
        "overdue": "false",
    }


def test_normalize_record_without_id_is_dropped():
    assert normalize_record(_record(summary="orphan"), NOW) is None
    assert normalize_record(_record(id="  ", summary="blank id"), NOW) is None


@pytest.mark.parametrize(
    ("fields", "expected"),
    [
        ({"ID": 3}, "3"),
        ({"uuid": "abc-123"}, "abc-123"),
        ({"id": "", "Id": "9"}, "9"),
    ],
)
def test_normalize_record_id_aliases(fields, expected):
    assert normalize_record(DecodedRecord(fields=fields), NOW)["id"] == expected


def test_normalize_record_field_aliases():
    row = normalize_record(
        _record(
            id=1,
            State="Paused",
            Description="From description",
            dueDate="tomorrow",
            Tags="single",
            annotations=["one", "two"],
        ),
        NOW,
    )

    assert row["status"] == "paused"
    assert row["summary"] == "From description"
    assert row["due"] == "tomorrow"
    assert row["tags"] == "single"
    assert row["notes"] == "one, two"


def test_normalize_record_blanks_sentinel_dates():
    row = normalize_record(
        _record(
            id=1,
            due="0001-01-01T00:00:00Z",
            created="0001-01-01T00:00:00Z",
            resolved="0001-01-01t00:00:00z",
        ),
        NOW,
    )

    assert row["due"] == ""
    assert row["created"] == ""
    assert row["resolved"] == ""
    assert row["age"] == ""
    assert row["overdue"] == "false"


def test_normalize_record_blanks_unparseable_dates():
    row = normalize_record(
        _record(id=1, due="someday", created="last week", resolved="n/a"), NOW
    )

    assert (row["due"], row["created"], row["resolved"]) == ("", "", "")


def test_normalize_record_ignores_boolean_resolved_flag():
    row = normalize_record(_record(id=1, resolved=False), NOW)

    assert row["resolved"] == ""


def test_overdue_uses_relative_and_absolute_due():
    rows = normalize_records(
        [
            {"id": 1, "due": "yesterday"},
            {"id": 2, "due": "today"},
            {"id": 3, "due": "tomorrow"},
            {"id": 4, "due": IN_ONE_HOUR},
            {"id": 5, "due": "2024-12-31T23:00:00Z"},
            {"id": 6},
        ],
        now=NOW,
    )

    assert {row["id"]: row["overdue"] for row in rows} == {
        "1": "true",
        "2": "true",
        "3": "false",
        "4": "false",
        "5": "true",
        "6": "false",
    }


def test_normalize_record_is_idempotent():
    first = normalize_record(
        _record(
            id=2,
            status="done",
            summary='""nested quotes""',
            notes='"quoted note"',
            tags=["x"],
            created="2025-01-01T00:00:00Z",
            resolved="2025-01-02T00:00:00Z",
        ),
        NOW,
    )
    second = normalize_record(DecodedRecord(fields=first), NOW)

    assert first["summary"] == '"nested quotes"'
    assert second == first


def test_normalize_records_twice_is_a_no_op():
    decoded = decode('[{"id": 1, "summary": "\\"\\"x\\"\\"", "due": "tomorrow"}]')

    first = normalize_records(decoded.records, now=NOW)
    second = normalize_records(first, now=NOW)

    assert first[0]["summary"] == '"x"'
    assert second == first


def test_canonical_row_rederives_age_and_overdue():
    row = normalize_record(_record(id=1, due="2025-01-16", created="2025-01-10"), NOW)
    later = NOW + timedelta(days=3)

    refreshed = normalize_record(DecodedRecord(fields=row), later)

    assert refreshed["age"] == "8"
    assert refreshed["overdue"] == "true"
    assert is_canonical_row(row)
    assert not is_canonical_row({**row, "extra": ""})
    assert not is_canonical_row({**row, "id": 1})


@pytest.mark.parametrize(
    ("fields", "expected"),
    [
        ({"status": "resolved"}, True),
        ({"status": "DONE"}, True),
        ({"state": "done"}, True),
        ({"resolved": True}, True),
        ({"isResolved": "true"}, True),
        ({"resolved": "2025-01-02T00:00:00Z"}, False),
        ({"status": "active"}, False),
        ({}, False),
    ],
)
def test_is_resolved(fields, expected):
    assert is_resolved(DecodedRecord(fields=fields)) is expected


@pytest.mark.parametrize(
    ("value", "kind", "status"),
    [
        (None, StatusKind.EXCLUDE_RESOLVED, ""),
        ("", StatusKind.EXCLUDE_RESOLVED, ""),
        ("all", StatusKind.ALL, ""),
        ("Resolved", StatusKind.ONLY_RESOLVED, "resolved"),
        ("done", StatusKind.ONLY_RESOLVED, "resolved"),
        (" Paused ", StatusKind.ONLY_STATUS, "paused"),
    ],
)
def test_status_filter_parse(value, kind, status):
    parsed = StatusFilter.parse(value)

    assert parsed.kind is kind
    assert parsed.status == status


STATUS_RECORDS = [
    {"id": 1, "status": "active"},
    {"id": 2, "status": "paused"},
    {"id": 3, "status": "resolved"},
    {"id": 4, "status": "active", "isResolved": True},
]


@pytest.mark.parametrize(
    ("status", "expected_ids"),
    [
        ("", ["1", "2"]),
        ("all", ["1", "2", "3", "4"]),
        ("resolved", ["3", "4"]),
        ("active", ["1", "2"]),
        ("paused", ["1", "2"]),
    ],
)
def test_normalize_records_status_filter(status, expected_ids):
    rows = normalize_records(STATUS_RECORDS, status, NOW)

    assert [row["id"] for row in rows] == expected_ids


def test_normalize_records_accepts_status_filter_instance():
    rows = normalize_records(STATUS_RECORDS, StatusFilter(StatusKind.ALL), NOW)

    assert len(rows) == 4


def test_normalize_records_preserves_order_and_drops_idless():
    rows = normalize_records(
        [
            DecodedRecord(fields={"id": 3, "summary": "c"}, strategy="strict_array"),
            {"summary": "no id"},
            {"id": 1, "summary": "a"},
        ],
        now=NOW,
    )

    assert [row["summary"] for row in rows] == ["c", "a"]
