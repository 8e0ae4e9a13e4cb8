# src/simple_todo/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the configured storage backend into one TaskService held by AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import TaskStorage
from ..core.state import AppState
from ..tasks.task_service import TaskService
from ..tasks.task_store import MemoryTaskStore, SQLiteTaskStore

logger = logging.getLogger(__name__)


def build_storage(settings) -> TaskStorage:
    backend = str(getattr(settings, "storage_backend", "sqlite")).lower()
    if backend == "memory":
        logger.info("Using in-memory task storage (nothing survives the process).")
        return MemoryTaskStore()
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    return SQLiteTaskStore(settings.tasks_db_path)


def create_initial_state(*, settings=None, storage: TaskStorage | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and optionally storage) injectable makes the app easier to test
    and avoids hidden global config reads. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if storage is None:
        storage = build_storage(settings)

    return AppState(settings=settings, service=TaskService(storage))
