# tests/test_task_store.py

from __future__ import annotations

import json
import sqlite3
from pathlib import Path

import pytest

from simple_todo.core.errors import StorageError
from simple_todo.tasks.task_models import Task, utc_now
from simple_todo.tasks.task_store import METADATA_KEY, TASKS_KEY, MemoryTaskStore, SQLiteTaskStore

from .fakes import VALID_ID_1, VALID_ID_2, record


def _task(task_id: str, description: str = "x", completed: bool = False) -> Task:
    now = utc_now()
    return Task(
        id=task_id,
        description=description,
        created_at=now,
        completed=completed,
        completed_at=now if completed else None,
    )


def test_sqlite_store_persists_across_instances(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    tasks = [_task(VALID_ID_1, "first"), _task(VALID_ID_2, "second", completed=True)]

    SQLiteTaskStore(db).save(tasks)
    loaded = SQLiteTaskStore(db).load()

    assert loaded == tasks


def test_sqlite_store_writes_metadata_slot(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    SQLiteTaskStore(db).save([_task(VALID_ID_1)])

    conn = sqlite3.connect(str(db))
    try:
        row = conn.execute("SELECT value FROM kv WHERE key = ?", (METADATA_KEY,)).fetchone()
    finally:
        conn.close()
    meta = json.loads(row[0])
    assert meta["version"] == "1.0.0"
    assert meta["lastBackup"].endswith("Z")


def test_sqlite_store_clear(tmp_path: Path) -> None:
    store = SQLiteTaskStore(tmp_path / "tasks.sqlite3")
    store.save([_task(VALID_ID_1)])
    store.clear()
    assert store.load() == []


def test_load_empty_and_corrupt_slots(memory_store: MemoryTaskStore) -> None:
    assert memory_store.load() == []

    memory_store.slots[TASKS_KEY] = "{not json"
    assert memory_store.load() == []

    memory_store.slots[TASKS_KEY] = json.dumps({"tasks": []})
    assert memory_store.load() == []


def test_load_skips_bad_records(memory_store: MemoryTaskStore) -> None:
    memory_store.slots[TASKS_KEY] = json.dumps(
        [record(VALID_ID_1), {"id": VALID_ID_2, "description": "no date"}, "junk"]
    )
    loaded = memory_store.load()
    assert [t.id for t in loaded] == [VALID_ID_1]


def test_quota_exceeded_raises_storage_error() -> None:
    store = MemoryTaskStore(quota_bytes=200)
    with pytest.raises(StorageError):
        store.save([_task(VALID_ID_1, "a" * 300)])
    assert TASKS_KEY not in store.slots


def test_export_snapshot_shape(memory_store: MemoryTaskStore) -> None:
    memory_store.save([_task(VALID_ID_1, "first")])
    data = json.loads(memory_store.export_snapshot())

    assert data["version"] == "1.0.0"
    assert data["exportedAt"].endswith("Z")
    assert [t["id"] for t in data["tasks"]] == [VALID_ID_1]


def test_import_snapshot_round_trip(memory_store: MemoryTaskStore) -> None:
    tasks = [_task(VALID_ID_1, "first", completed=True)]
    memory_store.save(tasks)
    assert memory_store.import_snapshot(memory_store.export_snapshot()) == tasks


@pytest.mark.parametrize("payload", ["{oops", "[]", '{"tasks": {}}', '{"items": []}'])
def test_import_snapshot_rejects_bad_payload(memory_store: MemoryTaskStore, payload: str) -> None:
    with pytest.raises(StorageError, match="Invalid import data"):
        memory_store.import_snapshot(payload)


def test_load_skips_invalid_and_duplicate_records(memory_store: MemoryTaskStore) -> None:
    memory_store.slots[TASKS_KEY] = json.dumps(
        [
            record(VALID_ID_1, "first"),
            record(VALID_ID_1, "same id again"),
            record("not-a-uuid"),
            record(VALID_ID_2, "   "),
            record(VALID_ID_2, "a" * 501),
        ]
    )
    loaded = memory_store.load()
    assert [(t.id, t.description) for t in loaded] == [(VALID_ID_1, "first")]


class _BrokenDeleteStore(MemoryTaskStore):
    def _delete_slots(self, keys: list[str]) -> None:
        raise sqlite3.OperationalError("database is locked")


def test_clear_wraps_medium_errors() -> None:
    store = _BrokenDeleteStore()
    store.save([_task(VALID_ID_1, "keep")])

    with pytest.raises(StorageError, match="Failed to clear tasks"):
        store.clear()
    assert [t.description for t in store.load()] == ["keep"]
