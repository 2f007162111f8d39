"""Tool definition endpoint."""

from __future__ import annotations

from typing import Any

from taskview.api_router import api_router
from taskview.errors import TOOL_SCHEMA_ERROR, TaskViewError, success_response
from tools.task_tools import ToolSchemaError, load_tool_definitions


@api_router.get("/tools")
def list_tool_schemas() -> dict[str, Any]:
    """Return the current tool definitions."""
    try:
        tools = load_tool_definitions()
    except ToolSchemaError as exc:
        raise TaskViewError(
            TOOL_SCHEMA_ERROR,
            "Tool definitions could not be loaded.",
            {"error": str(exc)},
        ) from exc
    return success_response({"tools": tools})
