"""Payload validation helpers for tool endpoints."""

from __future__ import annotations

from typing import Any

from taskview.errors import INVALID_TYPE, MISSING_OUTPUT, UNKNOWN_FIELD, TaskViewError


def _ensure_payload_dict(payload: Any) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise TaskViewError(
            INVALID_TYPE,
            "Payload must be an object.",
            {"type": type(payload).__name__},
        )
    return payload


def _reject_unknown_fields(payload: dict[str, Any], allowed_fields: set[str]) -> None:
    unknown_fields = sorted(set(payload) - allowed_fields)
    if unknown_fields:
        raise TaskViewError(
            UNKNOWN_FIELD,
            "Unknown fields are not allowed.",
            {"fields": unknown_fields},
        )


def _require_output(payload: dict[str, Any]) -> str:
    if "output" not in payload:
        raise TaskViewError(
            MISSING_OUTPUT,
            "output is required.",
            {"fields": ["output"]},
        )
    output = payload["output"]
    if not isinstance(output, str):
        raise TaskViewError(
            INVALID_TYPE,
            "output must be a string.",
            {"type": type(output).__name__},
        )
    return output


def _ensure_optional_strings(payload: dict[str, Any], fields: set[str]) -> None:
    for name in sorted(fields):
        value = payload.get(name)
        if value is not None and not isinstance(value, str):
            raise TaskViewError(
                INVALID_TYPE,
                f"{name} must be a string.",
                {name: str(value)},
            )


def _ensure_optional_integers(payload: dict[str, Any], fields: set[str]) -> None:
    for name in sorted(fields):
        value = payload.get(name)
        if value is None or isinstance(value, str):
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise TaskViewError(
                INVALID_TYPE,
                f"{name} must be an integer.",
                {name: str(value)},
            )
