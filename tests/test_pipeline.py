import json
from datetime import datetime

import pytest

from taskview.normalizer import StatusKind
from taskview.pipeline import (
    CommandResult,
    PageRequest,
    SortSpec,
    TaskQuery,
    run_command_query,
    run_task_query,
)

NOW = datetime(2025, 1, 15, 12, 0).astimezone()


def _output(count=3, **extra):
    records = [
        {
            "id": number,
            "summary": f"Task {number}",
            "project": "web" if number % 2 else "ops",
            "priority": f"P{number % 4}",
            "status": "active",
            **extra,
        }
        for number in range(1, count + 1)
    ]
    return json.dumps(records)


def test_task_query_from_params():
    query = TaskQuery.from_params(
        {
            "q": " +urgent fix ",
            "dueFilterType": "before",
            "dueFilterDate": "2025-01-20",
            "sort": "priority",
            "dir": "desc",
            "page": "2",
            "per_page": 10,
            "status": "all",
        }
    )

    assert query.text == "+urgent fix"
    assert query.due_token == "due.before:2025-01-20"
    assert query.sort == SortSpec(column="priority", direction="desc")
    assert query.page == PageRequest(page=2, per_page=10)
    assert query.status.kind is StatusKind.ALL


def test_task_query_from_empty_params():
    query = TaskQuery.from_params({})

    assert query == TaskQuery()
    assert query.sort.direction == "asc"
    assert query.status.kind is StatusKind.EXCLUDE_RESOLVED


@pytest.mark.parametrize("value", ["abc", "", True, 1.5, None])
def test_task_query_ignores_unusable_page_numbers(value):
    assert TaskQuery.from_params({"page": value}).page.page is None


def test_run_task_query_filters_sorts_and_pages():
    query = TaskQuery.from_params(
        {"q": "project:web", "sort": "id", "dir": "desc", "per_page": 2}
    )

    page = run_task_query(_output(count=7), query, now=NOW)

    assert page.decoded is True
    assert page.strategy == "strict_array"
    assert [row["id"] for row in page.rows] == ["7", "5"]
    assert page.meta.total_rows == 4
    assert page.meta.total_pages == 2


def test_run_task_query_excludes_resolved_by_default():
    raw = json.dumps(
        [
            {"id": 1, "summary": "open", "status": "active"},
            {"id": 2, "summary": "closed", "status": "done"},
        ]
    )

    assert [row["id"] for row in run_task_query(raw, now=NOW).rows] == ["1"]
    resolved = run_task_query(raw, TaskQuery.from_params({"status": "resolved"}), now=NOW)
    assert [row["id"] for row in resolved.rows] == ["2"]


def test_run_task_query_overdue_scenario():
    raw = json.dumps(
        [
            {"id": 1, "summary": "late", "due": "2025-01-14"},
            {"id": 2, "summary": "today", "due": "2025-01-15"},
            {"id": 3, "summary": "soon", "due": "2025-01-16"},
        ]
    )

    page = run_task_query(raw, now=NOW)

    assert [row["overdue"] for row in page.rows] == ["true", "true", "false"]
    filtered = run_task_query(
        raw, TaskQuery.from_params({"dueFilterType": "overdue"}), now=NOW
    )
    assert [row["id"] for row in filtered.rows] == ["1"]


def test_run_task_query_plaintext_output():
    page = run_task_query("ID  P  Project  Summary\n1  P2  demo  Fix bug", now=NOW)

    assert page.strategy == "plain_table"
    assert page.rows[0]["summary"] == "Fix bug"
    assert page.rows[0]["project"] == "demo"


def test_run_task_query_undecodable_output():
    page = run_task_query("error: database locked", now=NOW)

    assert page.decoded is False
    assert page.strategy is None
    assert page.rows == []
    assert page.meta.total_pages == 1


def test_run_task_query_uses_default_per_page():
    page = run_task_query(_output(count=30), now=NOW, default_per_page=12)

    assert len(page.rows) == 12
    assert page.meta.per_page == 12


def test_task_page_to_dict():
    data = run_task_query(_output(count=1), now=NOW).to_dict()

    assert set(data) == {"rows", "pagination", "strategy", "decoded"}
    assert data["pagination"]["total_rows"] == 1
    assert data["rows"][0]["id"] == "1"


def test_run_command_query_reads_stdout_only():
    result = CommandResult(
        stdout=_output(count=2),
        stderr='[{"id": 99, "summary": "from stderr"}]',
        exit_code=1,
    )

    page = run_command_query(result, now=NOW)

    assert [row["id"] for row in page.rows] == ["1", "2"]


def test_run_command_query_timed_out_without_output():
    page = run_command_query(CommandResult(timed_out=True), now=NOW)

    assert page.decoded is False
    assert page.rows == []


def test_run_task_query_blanks_zero_due_date():
    raw = '[{"id":1,"summary":"fix bug","priority":"P2","due":"0001-01-01T00:00:00Z"}]'

    page = run_task_query(raw, now=NOW)

    assert len(page.rows) == 1
    assert page.rows[0]["due"] == ""
    assert page.rows[0]["overdue"] == "false"
