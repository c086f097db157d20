"""Persistence for the todo document, including the daily reset.

The document is stored as a single JSON file (``~/.daily-todo.json`` by
default). Loading detects a change of calendar day and drops every todo that
is not marked persistent; saving re-validates each record and replaces the
file atomically.
"""

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from pydantic import ValidationError

from dailytodo.errors import CorruptDocumentError, PersistenceError
from dailytodo.models.config import DEFAULT_TODO_FILE
from dailytodo.models.todo import AppConfig, RepositoryConfig, TodoDocument
from dailytodo.storage.validation import parse_todo_records

logger = logging.getLogger(__name__)

# lastUpdated format used by earlier versions of the tool
LEGACY_DATE_FORMAT = "%a %b %d %Y"


class TodoStore:
    """Owns the on-disk todo document.

    There is no cross-process locking; the last writer wins. Within a process
    the read-modify-write cycle of ``transaction()`` runs under a lock.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize the store.

        Args:
            path: Location of the JSON document. Defaults to ~/.daily-todo.json
            clock: Returns the current time. Defaults to datetime.now
        """
        self.path = Path(path) if path is not None else DEFAULT_TODO_FILE
        self._clock = clock or datetime.now
        self._lock = threading.RLock()

    def now(self) -> datetime:
        """Current time as a timezone-aware local datetime."""
        return self._clock().astimezone()

    def today(self) -> str:
        """Current calendar date as an ISO string (YYYY-MM-DD)."""
        return self.now().date().isoformat()

    def is_today(self, stamp: Any) -> bool:
        """Whether a stored lastUpdated value names the current day.

        Accepts the ISO date this store writes and the "Fri Oct 16 2026" form
        found in files written by earlier versions of the tool.
        """
        return stamp in (self.today(), self.now().strftime(LEGACY_DATE_FORMAT))

    def empty_document(self) -> TodoDocument:
        return TodoDocument(todos=[], last_updated=self.today(), repositories=[], config=AppConfig())

    def load(self) -> TodoDocument:
        """Load the document, applying the daily reset if the day changed.

        Returns:
            TodoDocument stamped with today's date

        Raises:
            CorruptDocumentError: If the file is not valid JSON or lacks a todos list
            PersistenceError: If the file cannot be read, or a reset cannot be saved
        """
        with self._lock:
            data = self._read()
            if data is None:
                return self.empty_document()

            todos = parse_todo_records(data["todos"], stage="load")
            today = self.today()
            last_updated = data.get("lastUpdated")

            document = TodoDocument(
                todos=todos,
                last_updated=today,
                repositories=self._parse_repositories(data.get("repositories")),
                config=self._parse_config(data.get("config")),
            )

            if not self.is_today(last_updated):
                kept = [todo for todo in todos if todo.persistent]
                logger.info(
                    f"New day ({last_updated} -> {today}): kept {len(kept)} persistent "
                    f"of {len(todos)} todos"
                )
                document.todos = kept
                document = self.save(document)

            return document

    def save(self, document: TodoDocument) -> TodoDocument:
        """Validate and write the whole document, replacing the file atomically.

        The given document is not modified; on failure nothing is written.

        Args:
            document: Document to persist

        Returns:
            The document as written, stamped with today's date and holding only
            well-formed todos

        Raises:
            PersistenceError: If the file cannot be written
        """
        with self._lock:
            record = document.to_record()
            todos = parse_todo_records(record["todos"], stage="save")
            saved = TodoDocument(
                todos=todos,
                last_updated=self.today(),
                repositories=[repo.model_copy(deep=True) for repo in document.repositories],
                config=document.config.model_copy(deep=True),
            )
            self._write(saved.to_record())
            return saved

    @contextmanager
    def transaction(self) -> Iterator[TodoDocument]:
        """Load the current document, let the caller mutate it, then save it.

        Nothing is saved if the body raises.

        Yields:
            The freshly loaded document
        """
        with self._lock:
            document = self.load()
            yield document
            self.save(document)

    def _read(self) -> Optional[Dict[str, Any]]:
        """Read and structurally check the raw document; None if absent or blank."""
        if not self.path.exists():
            return None

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(f"Failed to read {self.path}: {e}") from e

        if not text.strip():
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDocumentError(f"Invalid JSON in {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("todos"), list):
            raise CorruptDocumentError(f"Invalid todo data format in {self.path}: missing todos list")

        return data

    def _write(self, data: Dict[str, Any]) -> None:
        """Write to a temporary file first, then rename over the target."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=".daily-todo_", suffix=".json.tmp"
            )
        except OSError as e:
            raise PersistenceError(f"Failed to save {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")

            os.replace(temp_path, self.path)
        except OSError as e:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise PersistenceError(f"Failed to save {self.path}: {e}") from e

    @staticmethod
    def _parse_repositories(raw: Any) -> List[RepositoryConfig]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring repositories: expected a list")
            return []

        repositories = []
        for entry in raw:
            try:
                repositories.append(RepositoryConfig.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping invalid repository entry {entry!r}: {e.error_count()} errors")
        return repositories

    @staticmethod
    def _parse_config(raw: Any) -> AppConfig:
        if raw is None:
            return AppConfig()
        try:
            return AppConfig.model_validate(raw)
        except ValidationError:
            logger.warning("Ignoring invalid config section, using defaults")
            return AppConfig()
