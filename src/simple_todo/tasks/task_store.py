# src/simple_todo/tasks/task_store.py

from __future__ import annotations

import contextlib
import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from ..core.errors import StorageError
from .task_models import EXPORT_VERSION, ExportData, Task, to_iso, utc_now
from .task_validation import validate_task

logger = logging.getLogger(__name__)

TASKS_KEY = "todo-app-tasks"
METADATA_KEY = "todo-app-metadata"


class _SlotTaskStore:
    """
    Task storage on top of a string key-value medium.

    The whole collection lives in one slot (TASKS_KEY) as a JSON array; a second
    slot (METADATA_KEY) records {version, lastBackup} on every successful save and
    is never read back. Subclasses provide the three slot primitives.
    """

    def _read_slot(self, key: str) -> str | None:
        raise NotImplementedError

    def _write_slots(self, values: dict[str, str]) -> None:
        raise NotImplementedError

    def _delete_slots(self, keys: list[str]) -> None:
        raise NotImplementedError

    # ---- public API ----

    def load(self) -> list[Task]:
        try:
            raw = self._read_slot(TASKS_KEY)
        except Exception:
            logger.warning("Failed to read tasks slot; starting empty.", exc_info=True)
            return []
        if not raw:
            return []

        try:
            records = json.loads(raw)
        except ValueError:
            logger.warning("Tasks slot is not valid JSON; starting empty.")
            return []
        if not isinstance(records, list):
            logger.warning("Tasks slot holds %s instead of a list; starting empty.", type(records).__name__)
            return []

        tasks: list[Task] = []
        seen: set[str] = set()
        for rec in records:
            if not isinstance(rec, dict):
                logger.warning("Skipping non-object task record: %r", rec)
                continue
            check = validate_task({"id": rec.get("id"), "description": rec.get("description")})
            if not check.is_valid:
                logger.warning("Skipping invalid task record %r: %s", rec.get("id"), "; ".join(check.errors))
                continue
            if rec.get("id") in seen:
                logger.warning("Skipping duplicate task record id=%s", rec.get("id"))
                continue
            try:
                tasks.append(Task.from_dict(rec))
                seen.add(rec["id"])
            except ValueError as e:
                logger.warning("Skipping corrupt task record: %s", e)
        logger.debug("Loaded %d tasks", len(tasks))
        return tasks

    def save(self, tasks: list[Task]) -> None:
        payload = json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)
        metadata = json.dumps({"version": EXPORT_VERSION, "lastBackup": to_iso(utc_now())})
        try:
            self._write_slots({TASKS_KEY: payload, METADATA_KEY: metadata})
        except StorageError:
            raise
        except Exception as e:
            logger.error("Failed to save tasks: %s", e)
            raise StorageError("Failed to save tasks") from e
        logger.debug("Saved %d tasks", len(tasks))

    def clear(self) -> None:
        try:
            self._delete_slots([TASKS_KEY, METADATA_KEY])
        except StorageError:
            raise
        except Exception as e:
            logger.error("Failed to clear tasks: %s", e)
            raise StorageError("Failed to clear tasks") from e

    def export_snapshot(self) -> str:
        data = ExportData(tasks=self.load(), exported_at=utc_now())
        return json.dumps(data.to_dict(), ensure_ascii=False, indent=2)

    def import_snapshot(self, data: str) -> list[Task]:
        try:
            parsed: Any = json.loads(data)
        except (TypeError, ValueError) as e:
            raise StorageError("Invalid import data") from e

        if not isinstance(parsed, dict) or not isinstance(parsed.get("tasks"), list):
            raise StorageError("Invalid import data")

        try:
            return [Task.from_dict(rec) for rec in parsed["tasks"]]
        except (AttributeError, ValueError) as e:
            raise StorageError("Invalid import data") from e


class SQLiteTaskStore(_SlotTaskStore):
    """
    Local key-value store backed by a single SQLite table.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SQLiteTaskStore ready db=%s", self._db_path)

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(Exception):
            conn.execute("PRAGMA journal_mode=WAL")

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS kv (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            conn.commit()
        finally:
            conn.close()

    def _read_slot(self, key: str) -> str | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None
        finally:
            conn.close()

    def _write_slots(self, values: dict[str, str]) -> None:
        conn = self._get_conn()
        try:
            with conn:
                conn.executemany(
                    "INSERT INTO kv(key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                    list(values.items()),
                )
        finally:
            conn.close()

    def _delete_slots(self, keys: list[str]) -> None:
        conn = self._get_conn()
        try:
            with conn:
                conn.executemany("DELETE FROM kv WHERE key = ?", [(k,) for k in keys])
        finally:
            conn.close()


class MemoryTaskStore(_SlotTaskStore):
    """
    In-process key-value store.

    `quota_bytes` caps the total size of all slots; a write over the cap fails the way
    a full browser store does, which makes storage failures easy to reproduce.
    """

    def __init__(self, quota_bytes: int | None = None) -> None:
        self.slots: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def _read_slot(self, key: str) -> str | None:
        return self.slots.get(key)

    def _write_slots(self, values: dict[str, str]) -> None:
        if self.quota_bytes is not None:
            merged = {**self.slots, **values}
            size = sum(len(k.encode("utf-8")) + len(v.encode("utf-8")) for k, v in merged.items())
            if size > self.quota_bytes:
                raise StorageError(f"Failed to save tasks: quota of {self.quota_bytes} bytes exceeded")
        self.slots.update(values)

    def _delete_slots(self, keys: list[str]) -> None:
        for k in keys:
            self.slots.pop(k, None)
