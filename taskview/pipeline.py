"""End-to-end query pipeline over captured task tool output."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from taskview.config import DEFAULT_PER_PAGE
from taskview.dates import local_now
from taskview.decoder import decode
from taskview.normalizer import CanonicalRow, StatusFilter, normalize_records
from taskview.pagination import PageMeta, paginate
from taskview.query_filter import build_due_filter_token, filter_by_due, filter_by_query
from taskview.sorting import sort_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of one task tool invocation."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    timed_out: bool = False


@dataclass(frozen=True)
class SortSpec:
    column: str = ""
    direction: str = "asc"


@dataclass(frozen=True)
class PageRequest:
    page: int | None = None
    per_page: int | None = None


@dataclass(frozen=True)
class TaskQuery:
    """Query, due filter, sort, page and status parsed once per request."""

    text: str = ""
    due_token: str = ""
    sort: SortSpec = field(default_factory=SortSpec)
    page: PageRequest = field(default_factory=PageRequest)
    status: StatusFilter = field(default_factory=StatusFilter)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> TaskQuery:
        """Build a query from request parameters (query string or JSON body)."""
        return cls(
            text=_param_text(params, "q"),
            due_token=build_due_filter_token(
                _param_text(params, "dueFilterType"),
                _param_text(params, "dueFilterDate"),
            ),
            sort=SortSpec(
                column=_param_text(params, "sort"),
                direction=_param_text(params, "dir") or "asc",
            ),
            page=PageRequest(
                page=_param_int(params, "page"),
                per_page=_param_int(params, "per_page"),
            ),
            status=StatusFilter.parse(_param_text(params, "status")),
        )


@dataclass(frozen=True)
class TaskPage:
    rows: list[CanonicalRow]
    meta: PageMeta
    strategy: str | None
    decoded: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "pagination": self.meta.to_dict(),
            "strategy": self.strategy,
            "decoded": self.decoded,
        }


def _param_text(params: Mapping[str, Any], key: str) -> str:
    value = params.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _param_int(params: Mapping[str, Any], key: str) -> int | None:
    value = params.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def run_task_query(
    raw: str | None,
    query: TaskQuery | None = None,
    *,
    now: datetime | None = None,
    default_per_page: int = DEFAULT_PER_PAGE,
) -> TaskPage:
    """Decode, normalize, filter, sort and paginate raw task tool output."""
    query = query or TaskQuery()
    current = local_now(now)

    decoded = decode(raw)
    rows = normalize_records(decoded.records, query.status, current)
    rows = filter_by_query(rows, query.text)
    rows = filter_by_due(rows, query.due_token, current)
    rows = sort_rows(rows, query.sort.column, query.sort.direction)
    page_rows, meta = paginate(
        rows,
        query.page.page,
        query.page.per_page,
        default_per_page=default_per_page,
    )
    logger.debug(
        "Task query: strategy=%s decoded=%d matched=%d page=%d/%d",
        decoded.strategy,
        len(decoded.records),
        meta.total_rows,
        meta.current_page,
        meta.total_pages,
    )
    return TaskPage(
        rows=page_rows, meta=meta, strategy=decoded.strategy, decoded=decoded.ok
    )


def run_command_query(
    result: CommandResult,
    query: TaskQuery | None = None,
    *,
    now: datetime | None = None,
    default_per_page: int = DEFAULT_PER_PAGE,
) -> TaskPage:
    """Run the pipeline over a captured invocation; only stdout is read."""
    return run_task_query(
        result.stdout, query, now=now, default_per_page=default_per_page
    )
