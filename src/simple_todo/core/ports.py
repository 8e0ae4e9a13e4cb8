# src/simple_todo/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

TaskService depends on this Protocol instead of a concrete medium, so the SQLite
store, the in-memory store and test fakes are interchangeable.
"""

from typing import Protocol

from ..tasks.task_models import Task


class TaskStorage(Protocol):
    def load(self) -> list[Task]:
        """Return every persisted task; an absent or corrupt slot yields []."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Persist the full collection. Raises StorageError if the medium rejects it."""
        ...

    def clear(self) -> None: ...

    def export_snapshot(self) -> str:
        """Serialized snapshot: {"tasks": [...], "exportedAt": ..., "version": ...}."""
        ...

    def import_snapshot(self, data: str) -> list[Task]:
        """Parse a serialized snapshot. Raises StorageError on a bad payload."""
        ...
