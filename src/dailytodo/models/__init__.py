"""Data models for todos, DIDs and settings."""

from dailytodo.models.config import Settings
from dailytodo.models.did import DidItem, DidKind, DidMetadata, GitCommit, RepositoryRef
from dailytodo.models.todo import (
    PRIORITIES,
    PRIORITY_LABELS,
    PRIORITY_ORDER,
    AppConfig,
    Priority,
    RepositoryConfig,
    Todo,
    TodoDocument,
)

__all__ = [
    "Todo",
    "TodoDocument",
    "RepositoryConfig",
    "AppConfig",
    "Priority",
    "PRIORITIES",
    "PRIORITY_ORDER",
    "PRIORITY_LABELS",
    "GitCommit",
    "RepositoryRef",
    "DidItem",
    "DidKind",
    "DidMetadata",
    "Settings",
]
