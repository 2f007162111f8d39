"""Tool handler registration."""

# ruff: noqa: F401

from __future__ import annotations

from fastapi import FastAPI

from taskview.api_router import api_router

# Import modules to register routes with the shared router.
from taskview import api_tasks, api_tools_endpoint

# Re-export endpoints for tests and direct imports.
from taskview.api_tasks import list_projects, list_tags, list_templates, query_tasks
from taskview.api_tools_endpoint import list_tool_schemas


def register_api_handlers(app: FastAPI) -> None:
    """Attach tool routes to the FastAPI application."""
    app.include_router(api_router)
