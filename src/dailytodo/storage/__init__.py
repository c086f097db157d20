"""Storage layer for the JSON todo document."""

from dailytodo.storage.todo_store import TodoStore
from dailytodo.storage.validation import is_valid_todo_record, parse_todo_records

__all__ = [
    "TodoStore",
    "is_valid_todo_record",
    "parse_todo_records",
]
