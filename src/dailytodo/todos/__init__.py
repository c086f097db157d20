"""Todo operations and tag extraction."""

from dailytodo.todos.operations import (
    VIEWS,
    TodoStats,
    add_todo,
    filter_todos,
    find_todo,
    get_stats,
    next_todo_id,
    remove_todo,
    sort_for_display,
    toggle_complete,
)
from dailytodo.todos.tags import extract_tags

__all__ = [
    "add_todo",
    "toggle_complete",
    "remove_todo",
    "find_todo",
    "next_todo_id",
    "get_stats",
    "filter_todos",
    "sort_for_display",
    "extract_tags",
    "TodoStats",
    "VIEWS",
]
