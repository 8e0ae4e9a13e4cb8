# tests/test_task_validation.py

from __future__ import annotations

import uuid

import pytest

from simple_todo.tasks.task_validation import (
    MSG_BAD_CREATED_AT,
    MSG_BAD_ID,
    MSG_EMPTY,
    MSG_TOO_LONG,
    is_valid_uuid,
    validate_description,
    validate_import_record,
    validate_task,
)

from .fakes import VALID_ID_1, record


@pytest.mark.parametrize("text", ["a", "  Buy milk  ", "x" * 500])
def test_description_accepts_1_to_500_chars(text: str) -> None:
    result = validate_description(text)
    assert result.is_valid
    assert result.errors == []


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_description_rejects_blank(text: str) -> None:
    result = validate_description(text)
    assert not result.is_valid
    assert result.errors == [MSG_EMPTY]


def test_description_length_is_checked_on_raw_text() -> None:
    assert validate_description("a" * 501).errors == [MSG_TOO_LONG]
    # 499 chars padded with spaces: trimmed text is fine, raw text is too long
    assert validate_description(" " + "a" * 499 + "  ").errors == [MSG_TOO_LONG]


def test_description_errors_accumulate() -> None:
    result = validate_description(" " * 501)
    assert result.errors == [MSG_EMPTY, MSG_TOO_LONG]


def test_uuid_shape() -> None:
    assert is_valid_uuid(str(uuid.uuid4()))
    assert is_valid_uuid(VALID_ID_1)
    assert not is_valid_uuid("invalid-id")
    assert not is_valid_uuid("550e8400-e29b-11d4-a716-446655440000")  # version 1
    assert not is_valid_uuid("550e8400-e29b-41d4-c716-446655440000")  # bad variant
    assert not is_valid_uuid(VALID_ID_1.upper())
    assert not is_valid_uuid(VALID_ID_1 + "\n")
    assert not is_valid_uuid(" " + VALID_ID_1)
    assert not is_valid_uuid(None)


def test_validate_task_checks_only_present_fields() -> None:
    assert validate_task({}).is_valid
    assert validate_task({"id": VALID_ID_1}).is_valid
    assert validate_task({"id": "nope"}).errors == [MSG_BAD_ID]
    assert validate_task({"id": "nope", "description": ""}).errors == [MSG_BAD_ID, MSG_EMPTY]


def test_import_record_requires_id_description_and_timestamp() -> None:
    assert validate_import_record(record(VALID_ID_1)).is_valid

    missing_id = record(VALID_ID_1)
    del missing_id["id"]
    assert not validate_import_record(missing_id).is_valid

    bad_ts = record(VALID_ID_1, created_at="yesterday")
    assert validate_import_record(bad_ts).errors == [MSG_BAD_CREATED_AT]

    assert not validate_import_record(record(VALID_ID_1, description="  ")).is_valid
    assert not validate_import_record({**record(VALID_ID_1), "completed": "yes"}).is_valid
    assert not validate_import_record("not a dict").is_valid


def test_import_record_rejects_trailing_newline_in_id() -> None:
    assert validate_import_record(record(VALID_ID_1 + "\n")).errors == [MSG_BAD_ID]
