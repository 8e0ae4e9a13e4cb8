# src/simple_todo/core/errors.py

"""
Error hierarchy shared by the task service, the storage adapters and the CLI.

The service never catches these; surfaces (CLI, console board) turn them into
user-facing text and exit codes.
"""

from __future__ import annotations


class TodoError(Exception):
    """Base class for every expected, user-reportable failure."""


class ValidationError(TodoError):
    """Empty or too long description, malformed task id."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors) or ["Invalid task"]
        super().__init__(self.errors[0])


class NotFoundError(TodoError):
    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class StorageError(TodoError):
    """The storage medium rejected a write, or a serialized payload is unreadable."""


class ImportFormatError(TodoError):
    """Import payload lacks a tasks array, or one of its records is invalid."""
