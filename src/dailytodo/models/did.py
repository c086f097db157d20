"""Data models for the DIDs feed."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from dailytodo.models.todo import Priority


class RepositoryRef(BaseModel):
    """Repository a commit came from."""

    name: str = Field(..., description="Display name")
    path: str = Field(..., description="Path to the repository")


class GitCommit(BaseModel):
    """A commit parsed from git log output."""

    hash: str = Field(..., description="Commit hash truncated to 8 characters")
    message: str = Field(..., description="Commit subject line")
    author: str = Field(..., description="Author name")
    date: str = Field(..., description="Author date formatted for display")
    timestamp: datetime = Field(..., description="Author date, timezone aware")
    repository: Optional[RepositoryRef] = Field(None, description="Originating repository")


class DidKind(str, Enum):
    """Source of a DID."""

    TODO = "todo"
    COMMIT = "commit"


class DidMetadata(BaseModel):
    """Kind-specific details: priority and tags for todos, author, hash and repository for commits."""

    priority: Optional[Priority] = None
    tags: List[str] = Field(default_factory=list)
    author: Optional[str] = None
    hash: Optional[str] = None
    repository: Optional[RepositoryRef] = None


class DidItem(BaseModel):
    """A unit of completed work shown in the DIDs feed. Never persisted."""

    kind: DidKind
    id: str = Field(..., description="todo-<id> or commit-<hash>")
    title: str
    description: Optional[str] = None
    completed_at: datetime = Field(..., description="Timestamp used for sorting and bucketing")
    metadata: DidMetadata = Field(default_factory=DidMetadata)
