"""Data models for the persisted todo document."""

import os
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, model_validator

Priority = Literal["high", "medium", "low"]

PRIORITIES: Tuple[str, ...] = ("high", "medium", "low")

# Display order: high sorts first
PRIORITY_ORDER: Dict[str, int] = {"high": 0, "medium": 1, "low": 2}

PRIORITY_LABELS: Dict[str, str] = {"high": "High", "medium": "Med", "low": "Low"}


class Todo(BaseModel):
    """A single unit of work.

    Field names follow the on-disk camelCase keys through aliases, and any
    unknown keys found on a stored record are carried along untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Union[StrictInt, StrictFloat] = Field(..., description="Unique numeric identifier")
    task: str = Field(..., description="Task text, trimmed")
    completed: bool = Field(False, description="Whether the todo is done")
    priority: Priority = Field("medium", description="high, medium or low")
    persistent: bool = Field(False, description="Survives the daily reset")
    created_at: str = Field(..., alias="createdAt", description="ISO-8601 creation timestamp")
    completed_at: Optional[str] = Field(
        None, alias="completedAt", description="ISO-8601 completion timestamp"
    )
    tags: List[str] = Field(default_factory=list, description="Hashtags found in the task")

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the JSON record stored on disk.

        ``completedAt`` is left out while unset; every other key, including
        unknown ones holding null, is written as loaded.
        """
        exclude = {"completed_at"} if self.completed_at is None else None
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)


class RepositoryConfig(BaseModel):
    """A git repository whose commits feed the DIDs view."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(None, description="Stable identifier for the entry")
    path: str = Field(..., description="Path to the repository")
    name: str = Field(..., description="Display name")
    enabled: bool = Field(True, description="Whether the repository is queried")
    last_scanned: Optional[str] = Field(None, alias="lastScanned")

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name") and data.get("path"):
            data = dict(data)
            data["name"] = os.path.basename(os.path.normpath(str(data["path"])))
        return data


class AppConfig(BaseModel):
    """User settings stored inside the todo document."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    git_author: Optional[str] = Field(
        None, alias="gitAuthor", description="Author identity used to filter commits"
    )


class TodoDocument(BaseModel):
    """The whole persisted file."""

    model_config = ConfigDict(populate_by_name=True)

    todos: List[Todo] = Field(default_factory=list)
    last_updated: str = Field(..., alias="lastUpdated", description="ISO calendar date of last write")
    repositories: List[RepositoryConfig] = Field(default_factory=list)
    config: AppConfig = Field(default_factory=AppConfig)

    def to_record(self) -> Dict[str, Any]:
        """Serialize to the JSON object stored on disk."""
        return {
            "todos": [todo.to_record() for todo in self.todos],
            "lastUpdated": self.last_updated,
            "repositories": [
                repo.model_dump(mode="json", by_alias=True, exclude_none=True)
                for repo in self.repositories
            ],
            "config": self.config.model_dump(mode="json", by_alias=True, exclude_none=True),
        }
