"""Unit tests for todo record validation."""

import logging

import pytest

from dailytodo.storage import is_valid_todo_record, parse_todo_records


@pytest.fixture
def record():
    """A well-formed raw record."""
    return {
        "id": 1,
        "task": "Write tests",
        "completed": False,
        "priority": "high",
        "persistent": False,
        "createdAt": "2026-10-16T09:00:00.000+02:00",
        "tags": [],
    }


def test_valid_record(record):
    """Test a well-formed record passes."""
    assert is_valid_todo_record(record)


def test_float_id_is_valid(record):
    """Test ids written by older versions (time plus random) are accepted."""
    record["id"] = 1760601600000.4242
    assert is_valid_todo_record(record)


@pytest.mark.parametrize(
    "field, value",
    [
        ("id", "1"),
        ("id", True),
        ("id", None),
        ("id", float("nan")),
        ("id", float("inf")),
        ("id", float("-inf")),
        ("task", ""),
        ("task", "   "),
        ("task", 42),
        ("completed", "yes"),
        ("priority", "urgent"),
        ("priority", None),
        ("persistent", 1),
        ("createdAt", 1760601600),
        ("tags", "work"),
    ],
)
def test_invalid_field(record, field, value):
    """Test each invariant rejects bad values."""
    record[field] = value
    assert not is_valid_todo_record(record)


@pytest.mark.parametrize("field", ["id", "task", "completed", "priority", "persistent", "createdAt", "tags"])
def test_missing_field(record, field):
    """Test each required field must be present."""
    del record[field]
    assert not is_valid_todo_record(record)


def test_non_mapping_is_invalid():
    """Test non-dict values are rejected."""
    assert not is_valid_todo_record(["id", 1])
    assert not is_valid_todo_record(None)


def test_parse_todo_records_drops_and_logs(record, caplog):
    """Test malformed records are dropped with a count in the log."""
    second = dict(record, id=2, tags=[1, 2])
    third = dict(record, id=3, task="")

    with caplog.at_level(logging.WARNING):
        todos = parse_todo_records([record, second, third], stage="load")

    assert [todo.id for todo in todos] == [1]
    assert "Filtered out 2 invalid todos on load" in caplog.text


def test_parse_todo_records_nothing_dropped(record, caplog):
    """Test no warning is logged when every record is valid."""
    with caplog.at_level(logging.WARNING):
        todos = parse_todo_records([record], stage="save")

    assert len(todos) == 1
    assert todos[0].created_at == record["createdAt"]
    assert caplog.text == ""
