"""Loosely typed decoded records and alias-aware accessors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from taskview.coercion import to_text

ID_ALIASES = ("id", "ID", "Id", "uuid", "UUID")
STATUS_ALIASES = ("status", "Status", "state", "State")
SUMMARY_ALIASES = ("summary", "Summary", "description", "Description")
PROJECT_ALIASES = ("project", "Project")
PRIORITY_ALIASES = ("priority", "Priority")
DUE_ALIASES = ("due", "Due", "dueDate", "DueDate")
TAGS_ALIASES = ("tags", "Tags")
CREATED_ALIASES = ("created", "Created")
RESOLVED_ALIASES = ("resolved", "Resolved")
RESOLVED_FLAG_ALIASES = ("resolved", "isResolved")
NOTES_ALIASES = ("notes", "Notes", "annotations", "note")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, dict)):
        return not value
    return not to_text(value).strip()


@dataclass(frozen=True)
class FieldValue:
    """A value found under one of a field's aliases."""

    key: str
    value: Any

    @property
    def is_bool(self) -> bool:
        return isinstance(self.value, bool)

    def as_text(self) -> str:
        return to_text(self.value)

    def as_bool(self) -> bool | None:
        if self.is_bool:
            return self.value
        lowered = self.as_text().strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        return None


@dataclass(frozen=True)
class DecodedRecord:
    """One record recovered by a decode strategy."""

    fields: Mapping[str, Any]
    strategy: str = ""

    def find(self, *aliases: str) -> FieldValue | None:
        """Return the first alias holding a non-blank value."""
        for alias in aliases:
            if alias not in self.fields:
                continue
            value = self.fields[alias]
            if _is_blank(value):
                continue
            return FieldValue(key=alias, value=value)
        return None

    def text(self, *aliases: str) -> str:
        found = self.find(*aliases)
        if found is None:
            return ""
        return found.as_text()

    def flag(self, *aliases: str) -> bool:
        found = self.find(*aliases)
        if found is None:
            return False
        return found.as_bool() is True
