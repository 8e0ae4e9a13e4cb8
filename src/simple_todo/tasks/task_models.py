# src/simple_todo/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

EXPORT_VERSION = "1.0.0"


class TaskFilter(StrEnum):
    """Which slice of the task list a query returns."""

    ALL = "all"
    COMPLETED = "completed"
    INCOMPLETE = "incomplete"

    @classmethod
    def parse(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown filter: {raw!r} (expected all, completed or incomplete)") from None


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond resolution used on disk."""
    now = datetime.now(UTC)
    return now.replace(microsecond=now.microsecond - now.microsecond % 1000)


def to_iso(ts: datetime) -> str:
    """Serialize an aware datetime as ISO-8601 with millisecond precision and a 'Z' suffix."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(raw: Any) -> datetime | None:
    """
    Parse an ISO-8601 timestamp string.

    Returns None for anything that is not a parseable string. Naive values are taken as UTC.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        ts = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    description: str
    created_at: datetime
    completed: bool = False
    completed_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire/persisted shape (camelCase keys, ISO timestamps, completedAt only when set)."""
        out: dict[str, Any] = {
            "id": self.id,
            "description": self.description,
            "completed": self.completed,
            "createdAt": to_iso(self.created_at),
        }
        if self.completed_at is not None:
            out["completedAt"] = to_iso(self.completed_at)
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Task:
        """
        Build a Task from a persisted/imported record.

        Raises ValueError when id, description or createdAt are unusable.
        A missing or unparsable completedAt means "not completed".
        """
        task_id = data.get("id")
        description = data.get("description")
        created_at = parse_iso(data.get("createdAt"))
        if not isinstance(task_id, str) or not task_id:
            raise ValueError("record has no id")
        if not isinstance(description, str):
            raise ValueError(f"record {task_id} has no description")
        if created_at is None:
            raise ValueError(f"record {task_id} has no valid createdAt")

        completed_at = parse_iso(data.get("completedAt")) if data.get("completed") is True else None
        return cls(
            id=task_id,
            description=description,
            created_at=created_at,
            completed=completed_at is not None,
            completed_at=completed_at,
        )


@dataclass(frozen=True, slots=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ExportData:
    tasks: list[Task]
    exported_at: datetime
    version: str = EXPORT_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "exportedAt": to_iso(self.exported_at),
            "version": self.version,
        }


@dataclass(frozen=True, slots=True)
class ImportResult:
    imported: int
    skipped: int

    def to_dict(self) -> dict[str, int]:
        return {"imported": self.imported, "skipped": self.skipped}
