# src/simple_todo/tasks/task_service.py

"""
Task service: the single owner of the in-memory task list.

Every mutating call runs validate -> mutate -> persist before returning. If the store
rejects the write, the in-memory list is restored to its previous state and the
StorageError propagates, so memory always matches the last successful save.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..core.errors import ImportFormatError, NotFoundError, StorageError, ValidationError
from ..core.ports import TaskStorage
from .task_models import EXPORT_VERSION, ExportData, ImportResult, Task, TaskFilter, utc_now
from .task_validation import validate_description, validate_import_record, validate_task

logger = logging.getLogger(__name__)


class TaskService:
    def __init__(self, storage: TaskStorage) -> None:
        self._storage = storage
        self._tasks: list[Task] = storage.load()
        logger.info("TaskService ready tasks=%d", len(self._tasks))

    # ---- helpers ----

    def _persist(self, previous: list[Task]) -> None:
        try:
            self._storage.save(self._tasks)
        except StorageError:
            self._tasks = previous
            logger.warning("Save failed; in-memory list rolled back to %d tasks.", len(previous))
            raise

    def _index_of(self, task_id: str) -> int:
        """Position of task_id, or raise: malformed id first, then not-found."""
        for i, task in enumerate(self._tasks):
            if task.id == task_id:
                return i
        result = validate_task({"id": task_id})
        if not result.is_valid:
            raise ValidationError(result.errors)
        raise NotFoundError(task_id)

    @staticmethod
    def _new_id(taken: set[str]) -> str:
        while True:
            task_id = str(uuid.uuid4())
            if task_id not in taken:
                return task_id

    # ---- queries ----

    def list_tasks(self, task_filter: TaskFilter | str = TaskFilter.ALL) -> list[Task]:
        """Matching tasks, newest first; equal timestamps keep insertion order."""
        flt = TaskFilter.parse(task_filter) if isinstance(task_filter, str) else task_filter
        if flt is TaskFilter.COMPLETED:
            items = [t for t in self._tasks if t.completed]
        elif flt is TaskFilter.INCOMPLETE:
            items = [t for t in self._tasks if not t.completed]
        else:
            items = list(self._tasks)
        return sorted(items, key=lambda t: t.created_at, reverse=True)

    def get_task(self, task_id: str) -> Task:
        return self._tasks[self._index_of(task_id)]

    def export_tasks(self) -> ExportData:
        return ExportData(tasks=self.list_tasks(), exported_at=utc_now(), version=EXPORT_VERSION)

    # ---- mutations ----

    def create_task(self, description: str) -> Task:
        result = validate_description(description)
        if not result.is_valid:
            raise ValidationError(result.errors)

        task = Task(
            id=self._new_id({t.id for t in self._tasks}),
            description=description.strip(),
            created_at=utc_now(),
        )
        previous = list(self._tasks)
        self._tasks.append(task)
        self._persist(previous)
        logger.debug("Task created id=%s", task.id)
        return task

    def update_task(self, task_id: str, *, completed: bool | None = None) -> Task:
        """
        Apply an update to one task. Only `completed` is supported.

        completed=True (re)stamps completedAt with the current time; completed=False
        clears it. The list is persisted even when nothing changes.
        """
        idx = self._index_of(task_id)
        task = self._tasks[idx]

        if completed is not None:
            task = replace(
                task,
                completed=completed,
                completed_at=utc_now() if completed else None,
            )

        previous = list(self._tasks)
        self._tasks[idx] = task
        self._persist(previous)
        logger.debug("Task updated id=%s completed=%s", task.id, task.completed)
        return task

    def toggle_task(self, task_id: str) -> Task:
        return self.update_task(task_id, completed=not self.get_task(task_id).completed)

    def delete_task(self, task_id: str) -> Task:
        """Remove one task and return it (callers use it for confirmation text)."""
        idx = self._index_of(task_id)
        previous = list(self._tasks)
        removed = self._tasks.pop(idx)
        self._persist(previous)
        logger.debug("Task deleted id=%s", removed.id)
        return removed

    def import_tasks(self, import_data: Any, *, merge: bool = False) -> ImportResult:
        """
        Import task records, deduplicating by id.

        The whole batch is validated before anything changes. Without merge the
        current list is discarded first; ids already present are skipped either way.
        """
        records = import_data.get("tasks") if isinstance(import_data, Mapping) else None
        if not isinstance(records, list):
            raise ImportFormatError("Invalid import data")

        for i, rec in enumerate(records):
            result = validate_import_record(rec)
            if not result.is_valid:
                logger.info("Import rejected: record %d invalid (%s)", i, "; ".join(result.errors))
                raise ImportFormatError("Invalid import data")

        previous = list(self._tasks)
        if not merge:
            self._tasks = []

        imported = skipped = 0
        known = {t.id for t in self._tasks}
        for rec in records:
            if rec["id"] in known:
                skipped += 1
                continue
            self._tasks.append(Task.from_dict(rec))
            known.add(rec["id"])
            imported += 1

        self._persist(previous)
        logger.info("Import done imported=%d skipped=%d merge=%s", imported, skipped, merge)
        return ImportResult(imported=imported, skipped=skipped)

    def clear_all_tasks(self) -> None:
        """Empty the store first; memory is only reset once the medium accepted it."""
        self._storage.clear()
        self._tasks = []
        logger.info("All tasks cleared")
