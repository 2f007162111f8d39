"""Task listing tool endpoints backed by the normalization engine."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request

from taskview.api_payload import (
    _ensure_optional_integers,
    _ensure_optional_strings,
    _ensure_payload_dict,
    _reject_unknown_fields,
    _require_output,
)
from taskview.api_router import api_router
from taskview.coercion import extract_urls, strip_ansi, truncate
from taskview.config import DEFAULT_PER_PAGE
from taskview.dates import format_date_short
from taskview.errors import success_response
from taskview.listings import parse_projects, parse_tags, parse_templates, project_rows
from taskview.normalizer import ROW_FIELDS, CanonicalRow
from taskview.pagination import build_page_links
from taskview.pipeline import TaskQuery, run_task_query
from taskview.sorting import next_sort_direction, sort_rows

logger = logging.getLogger(__name__)

QUERY_STRING_FIELDS = {"q", "sort", "dir", "dueFilterType", "dueFilterDate", "status"}
QUERY_INTEGER_FIELDS = {"page", "per_page"}


def _request_settings(request: Request) -> tuple[int, bool]:
    config = getattr(request.app.state, "config", None)
    default_per_page = getattr(config, "default_per_page", DEFAULT_PER_PAGE)
    raw_fallback = bool(getattr(config, "raw_fallback", True))
    return default_per_page, raw_fallback


def _link_params(payload: dict[str, Any]) -> dict[str, str]:
    params: dict[str, str] = {}
    for name in sorted(QUERY_STRING_FIELDS | QUERY_INTEGER_FIELDS):
        value = payload.get(name)
        if value is None or value == "":
            continue
        params[name] = str(value)
    return params


def _display_row(row: CanonicalRow) -> dict[str, Any]:
    return {
        "id": row["id"],
        "due": format_date_short(row["due"]) or row["due"],
        "created": format_date_short(row["created"]),
        "resolved": format_date_short(row["resolved"]),
        "urls": extract_urls(f"{row['summary']} {row['notes']}"),
    }


@api_router.post("/tool:query_tasks")
def query_tasks(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """Decode task tool output and return one filtered, sorted page of rows."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(
        payload, {"output"} | QUERY_STRING_FIELDS | QUERY_INTEGER_FIELDS
    )
    output = strip_ansi(_require_output(payload))
    _ensure_optional_strings(payload, QUERY_STRING_FIELDS)
    _ensure_optional_integers(payload, QUERY_INTEGER_FIELDS)

    default_per_page, raw_fallback = _request_settings(request)
    query = TaskQuery.from_params(payload)
    page = run_task_query(output, query, default_per_page=default_per_page)
    logger.info(
        "query_tasks: %d chars, strategy=%s, rows=%d",
        len(output),
        page.strategy,
        page.meta.total_rows,
    )

    data = page.to_dict()
    data["links"] = build_page_links("", _link_params(payload), page.meta)
    data["sort_directions"] = {
        column: next_sort_direction(query.sort.column, query.sort.direction, column)
        for column in ROW_FIELDS
    }
    data["display"] = [_display_row(row) for row in page.rows]
    if not page.decoded:
        logger.warning("query_tasks: undecodable output %r", truncate(output, 200))
        if raw_fallback:
            data["raw"] = output.strip()
    return success_response(data)


@api_router.post("/tool:list_projects")
def list_projects(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """List project names and sortable project summary rows."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"output", "sort", "dir"})
    output = strip_ansi(_require_output(payload))
    _ensure_optional_strings(payload, {"sort", "dir"})

    rows = sort_rows(project_rows(output), payload.get("sort"), payload.get("dir"))
    return success_response({"projects": parse_projects(output), "rows": rows})


@api_router.post("/tool:list_tags")
def list_tags(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """List tags from tag listing output."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"output"})
    output = strip_ansi(_require_output(payload))
    return success_response({"tags": parse_tags(output)})


@api_router.post("/tool:list_templates")
def list_templates(payload: dict[str, Any], request: Request) -> dict[str, Any]:
    """List templates from template listing output."""
    payload = _ensure_payload_dict(payload)
    _reject_unknown_fields(payload, {"output"})
    output = strip_ansi(_require_output(payload))
    return success_response({"templates": parse_templates(output)})
