# tests/conftest.py

from __future__ import annotations

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from simple_todo.cli.bootstrap import create_initial_state
from simple_todo.core.state import AppState
from simple_todo.tasks.task_service import TaskService
from simple_todo.tasks.task_store import MemoryTaskStore

from .fakes import FlakyTaskStore


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """main() reconfigures the root logger; drop the handlers it installed afterwards."""
    root = logging.getLogger()
    level = root.level
    yield
    for h in list(root.handlers):
        if type(h) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(h)
            h.close()
    root.setLevel(level)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="simple-todo",
        log_level="WARNING",
        log_to_file=False,
        storage_backend="sqlite",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
    )


@pytest.fixture()
def state(settings: SimpleNamespace) -> AppState:
    """
    AppState wired the same way the CLI does it.

    NOTE: We keep the real SQLite store here because its correctness is part of
    what we want to test.
    """
    return create_initial_state(settings=settings)


@pytest.fixture()
def store() -> FlakyTaskStore:
    return FlakyTaskStore()


@pytest.fixture()
def service(store: FlakyTaskStore) -> TaskService:
    return TaskService(store)


@pytest.fixture()
def memory_store() -> MemoryTaskStore:
    return MemoryTaskStore()
