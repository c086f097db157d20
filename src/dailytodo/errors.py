"""Exception hierarchy for daily-todo."""


class DailyTodoError(Exception):
    """Base class for all daily-todo errors."""


class TodoOperationError(DailyTodoError, ValueError):
    """A todo operation was rejected; state is unchanged."""


class EmptyTaskError(TodoOperationError):
    """Raised when a task is empty after trimming."""

    def __init__(self) -> None:
        super().__init__("Task cannot be empty")


class InvalidPriorityError(TodoOperationError):
    """Raised when a priority is not one of high, medium, low."""

    def __init__(self, priority: object) -> None:
        self.priority = priority
        super().__init__(f"Invalid priority level: {priority!r} (expected high, medium or low)")


class TodoNotFoundError(TodoOperationError):
    """Raised when no todo matches the requested id."""

    def __init__(self, todo_id: object) -> None:
        self.todo_id = todo_id
        super().__init__(f"Todo not found: {todo_id}")


class StoreError(DailyTodoError):
    """Base class for errors reading or writing the todo file."""


class CorruptDocumentError(StoreError):
    """The todo file exists but is not a usable document."""


class PersistenceError(StoreError):
    """The todo file could not be read or written."""
