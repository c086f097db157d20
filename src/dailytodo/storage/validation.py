"""Well-formedness checks for stored todo records."""

import logging
import math
from typing import Any, Iterable, List, Mapping

from pydantic import ValidationError

from dailytodo.models.todo import PRIORITIES, Todo

logger = logging.getLogger(__name__)


def is_valid_todo_record(record: Any) -> bool:
    """Check a raw todo record against the document invariant.

    A record is well-formed when ``id`` is a finite number, ``task`` is non-empty
    after trimming, ``completed`` and ``persistent`` are booleans,
    ``priority`` is one of high/medium/low, ``createdAt`` is a string and
    ``tags`` is a list.

    Args:
        record: Candidate record as decoded from JSON

    Returns:
        True if the record may be served or persisted
    """
    if not isinstance(record, Mapping):
        return False

    todo_id = record.get("id")
    task = record.get("task")
    return (
        isinstance(todo_id, (int, float))
        and not isinstance(todo_id, bool)
        and math.isfinite(todo_id)
        and isinstance(task, str)
        and len(task.strip()) > 0
        and isinstance(record.get("completed"), bool)
        and record.get("priority") in PRIORITIES
        and isinstance(record.get("persistent"), bool)
        and isinstance(record.get("createdAt"), str)
        and isinstance(record.get("tags"), list)
    )


def parse_todo_records(records: Iterable[Any], stage: str) -> List[Todo]:
    """Build Todo models from raw records, dropping malformed ones.

    Args:
        records: Raw records
        stage: "load" or "save", used in the log message

    Returns:
        Todos for every well-formed record, in input order
    """
    todos: List[Todo] = []
    dropped = 0

    for record in records:
        if not is_valid_todo_record(record):
            dropped += 1
            continue
        try:
            todos.append(Todo.model_validate(record))
        except ValidationError:
            # Passed the invariant but carries e.g. non-string tags
            dropped += 1

    if dropped:
        logger.warning(f"Filtered out {dropped} invalid todos on {stage}")

    return todos
