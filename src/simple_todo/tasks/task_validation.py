# src/simple_todo/tasks/task_validation.py

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from .task_models import ValidationResult, parse_iso

MAX_DESCRIPTION_LENGTH = 500

MSG_EMPTY = "Task description cannot be empty"
MSG_TOO_LONG = f"Task description must be less than {MAX_DESCRIPTION_LENGTH} characters"
MSG_NOT_STRING = "Task description must be a string"
MSG_BAD_ID = "Task ID must be a valid UUID"
MSG_MISSING_ID = "Task ID is required"
MSG_BAD_CREATED_AT = "Task createdAt must be an ISO-8601 timestamp"
MSG_BAD_COMPLETED = "Task completed flag must be a boolean"

UUID_V4_RE = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}")


def is_valid_uuid(value: Any) -> bool:
    return isinstance(value, str) and UUID_V4_RE.fullmatch(value) is not None


def validate_description(description: Any) -> ValidationResult:
    """
    Check a raw (untrimmed) description.

    Emptiness is judged after trimming, length on the raw text; both checks accumulate.
    """
    if not isinstance(description, str):
        return ValidationResult(is_valid=False, errors=[MSG_NOT_STRING])

    errors: list[str] = []
    if not description.strip():
        errors.append(MSG_EMPTY)
    if len(description) > MAX_DESCRIPTION_LENGTH:
        errors.append(MSG_TOO_LONG)
    return ValidationResult(is_valid=not errors, errors=errors)


def validate_task(task: Mapping[str, Any]) -> ValidationResult:
    """Validate whichever of `id` / `description` is present in a partial task record."""
    errors: list[str] = []

    if task.get("id") and not is_valid_uuid(task["id"]):
        errors.append(MSG_BAD_ID)

    if "description" in task:
        errors.extend(validate_description(task["description"]).errors)

    return ValidationResult(is_valid=not errors, errors=errors)


def validate_import_record(record: Any) -> ValidationResult:
    """
    Full check for an externally supplied task record.

    Unlike validate_task, id, description and createdAt are mandatory here: nothing
    from an import file becomes a Task without a well-formed id and a parseable timestamp.
    """
    if not isinstance(record, Mapping):
        return ValidationResult(is_valid=False, errors=["Task record must be an object"])

    errors: list[str] = []
    if not record.get("id"):
        errors.append(MSG_MISSING_ID)
    if "description" not in record:
        errors.append(MSG_EMPTY)
    errors.extend(validate_task(record).errors)

    if parse_iso(record.get("createdAt")) is None:
        errors.append(MSG_BAD_CREATED_AT)
    if "completed" in record and not isinstance(record["completed"], bool):
        errors.append(MSG_BAD_COMPLETED)

    return ValidationResult(is_valid=not errors, errors=errors)
