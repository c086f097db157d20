"""Add, toggle and remove todos, plus the views the interface needs.

Every mutation takes the caller's current todo sequence, returns a new one,
and writes it through the store. The store reloads the document first, so the
repositories and config sections on disk are never overwritten with stale
copies.
"""

import logging
from typing import List, Optional, Sequence, Union

from pydantic import BaseModel, Field

from dailytodo.errors import EmptyTaskError, InvalidPriorityError, TodoNotFoundError
from dailytodo.models.todo import PRIORITIES, PRIORITY_ORDER, Todo
from dailytodo.storage.todo_store import TodoStore
from dailytodo.todos.tags import extract_tags

logger = logging.getLogger(__name__)

TodoId = Union[int, float]

VIEWS = ("all", "pending", "completed")


class TodoStats(BaseModel):
    """Counts shown in the status bar and stats panel."""

    total: int = Field(0, description="Number of todos")
    completed: int = Field(0, description="Completed todos")
    pending: int = Field(0, description="Incomplete todos")
    high: int = Field(0, description="Incomplete high-priority todos")
    persistent: int = Field(0, description="Todos exempt from the daily reset")
    completion_rate: int = Field(0, description="Completed share, rounded percent")


def next_todo_id(todos: Sequence[Todo]) -> int:
    """Return an id greater than every existing one."""
    if not todos:
        return 1
    return int(max(todo.id for todo in todos)) + 1


def add_todo(
    store: TodoStore,
    todos: Sequence[Todo],
    task: str,
    priority: str = "medium",
    persistent: bool = False,
) -> List[Todo]:
    """Append a new todo and persist.

    Args:
        store: Store to write through
        todos: Current todo sequence
        task: Task text; hashtags become tags
        priority: high, medium or low
        persistent: Whether the todo survives the daily reset

    Returns:
        New todo sequence with the todo appended

    Raises:
        EmptyTaskError: If the trimmed task is empty
        InvalidPriorityError: If priority is not high, medium or low
        PersistenceError: If the document cannot be written
    """
    trimmed = task.strip()
    if not trimmed:
        raise EmptyTaskError()
    if priority not in PRIORITIES:
        raise InvalidPriorityError(priority)

    todo = Todo(
        id=next_todo_id(todos),
        task=trimmed,
        completed=False,
        priority=priority,
        persistent=persistent,
        created_at=store.now().isoformat(timespec="milliseconds"),
        tags=extract_tags(trimmed),
    )
    new_todos = [*todos, todo]
    _persist(store, new_todos)
    logger.debug(f"Added todo {todo.id}: {todo.task}")
    return new_todos


def toggle_complete(store: TodoStore, todos: Sequence[Todo], todo_id: TodoId) -> List[Todo]:
    """Flip a todo's completion state and persist.

    Completing stamps ``completedAt`` with the current time; un-completing
    clears it.

    Raises:
        TodoNotFoundError: If no todo has this id
    """
    _find(todos, todo_id)

    new_todos = []
    for todo in todos:
        if todo.id == todo_id:
            completed_at = None if todo.completed else store.now().isoformat(timespec="milliseconds")
            todo = todo.model_copy(update={"completed": not todo.completed, "completed_at": completed_at})
        new_todos.append(todo)

    _persist(store, new_todos)
    return new_todos


def remove_todo(store: TodoStore, todos: Sequence[Todo], todo_id: TodoId) -> List[Todo]:
    """Remove a todo and persist.

    Raises:
        TodoNotFoundError: If no todo has this id
    """
    _find(todos, todo_id)
    new_todos = [todo for todo in todos if todo.id != todo_id]
    _persist(store, new_todos)
    return new_todos


def get_stats(todos: Sequence[Todo]) -> TodoStats:
    total = len(todos)
    completed = sum(1 for todo in todos if todo.completed)
    return TodoStats(
        total=total,
        completed=completed,
        pending=total - completed,
        high=sum(1 for todo in todos if todo.priority == "high" and not todo.completed),
        persistent=sum(1 for todo in todos if todo.persistent),
        completion_rate=round(completed / total * 100) if total else 0,
    )


def filter_todos(todos: Sequence[Todo], view: str) -> List[Todo]:
    """Select todos for a view: all, pending or completed."""
    if view == "pending":
        return [todo for todo in todos if not todo.completed]
    if view == "completed":
        return [todo for todo in todos if todo.completed]
    return list(todos)


def sort_for_display(todos: Sequence[Todo]) -> List[Todo]:
    """Incomplete before complete, then high, medium, low."""
    return sorted(todos, key=lambda todo: (todo.completed, PRIORITY_ORDER[todo.priority]))


def find_todo(todos: Sequence[Todo], todo_id: TodoId) -> Optional[Todo]:
    return next((todo for todo in todos if todo.id == todo_id), None)


def _find(todos: Sequence[Todo], todo_id: TodoId) -> Todo:
    todo = find_todo(todos, todo_id)
    if todo is None:
        raise TodoNotFoundError(todo_id)
    return todo


def _persist(store: TodoStore, todos: List[Todo]) -> None:
    with store.transaction() as document:
        document.todos = list(todos)
