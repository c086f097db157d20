"""Merge finished todos and recent commits into the DIDs feed."""

import logging
import os
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from dailytodo.dids.dates import CATEGORY_ORDER, DEFAULT_WEEK_START, DateCategory, get_date_category, parse_timestamp
from dailytodo.extraction.git_source import CommitSource, collect_commits
from dailytodo.models.did import DidItem, DidKind, DidMetadata, GitCommit
from dailytodo.models.todo import RepositoryConfig, Todo

logger = logging.getLogger(__name__)

DidGroups = Dict[DateCategory, List[DidItem]]


def todos_to_dids(todos: Iterable[Todo]) -> List[DidItem]:
    """One DID per completed todo that has a completion time."""
    dids = []
    for todo in todos:
        if not todo.completed or not todo.completed_at:
            continue
        try:
            completed_at = parse_timestamp(todo.completed_at)
        except ValueError:
            logger.debug(f"Skipping todo {todo.id} with unreadable completedAt {todo.completed_at!r}")
            continue

        dids.append(
            DidItem(
                kind=DidKind.TODO,
                id=f"todo-{todo.id}",
                title=todo.task,
                description="#" + " #".join(todo.tags) if todo.tags else None,
                completed_at=completed_at,
                metadata=DidMetadata(priority=todo.priority, tags=list(todo.tags)),
            )
        )
    return dids


def commits_to_dids(commits: Iterable[GitCommit]) -> List[DidItem]:
    dids = []
    for commit in commits:
        description = f"by {commit.author}"
        if commit.repository:
            description += f" in {commit.repository.name}"
        dids.append(
            DidItem(
                kind=DidKind.COMMIT,
                id=f"commit-{commit.hash}",
                title=commit.message,
                description=description,
                completed_at=commit.timestamp,
                metadata=DidMetadata(
                    author=commit.author,
                    hash=commit.hash,
                    repository=commit.repository,
                ),
            )
        )
    return dids


def merge_dids(todo_dids: Sequence[DidItem], commit_dids: Sequence[DidItem]) -> List[DidItem]:
    """Newest first; on equal times todos stay ahead of commits."""
    return sorted([*todo_dids, *commit_dids], key=lambda did: did.completed_at, reverse=True)


def group_dids(
    dids: Iterable[DidItem],
    now: Optional[datetime] = None,
    week_start: int = DEFAULT_WEEK_START,
) -> DidGroups:
    """Bucket DIDs by relative date.

    Returns:
        Mapping in display order (today, yesterday, this week, last week,
        older) with empty buckets left out; each bucket keeps input order
    """
    buckets: Dict[DateCategory, List[DidItem]] = {category: [] for category in CATEGORY_ORDER}
    for did in dids:
        buckets[get_date_category(did.completed_at, now=now, week_start=week_start)].append(did)
    return {category: items for category, items in buckets.items() if items}


class DidAggregator:
    """Builds the DIDs feed from todos and the configured repositories."""

    def __init__(
        self,
        source: CommitSource,
        days: int = 7,
        week_start: int = DEFAULT_WEEK_START,
        cwd_fallback: bool = True,
    ) -> None:
        """Initialize the aggregator.

        Args:
            source: Where commits come from
            days: Lookback window for commits
            week_start: Weekday number the week starts on (Monday is 0)
            cwd_fallback: Query the working directory when no repositories
                are configured
        """
        self.source = source
        self.days = days
        self.week_start = week_start
        self.cwd_fallback = cwd_fallback

    def use_author(self, git_author: Optional[str]) -> None:
        """Filter commits by ``git_author``; None falls back to each repository's user.name."""
        self.source.git_author = git_author

    def build(self, todos: Sequence[Todo], repositories: Sequence[RepositoryConfig]) -> List[DidItem]:
        """Merged DIDs, newest first."""
        if not repositories and self.cwd_fallback:
            cwd = os.getcwd()
            repositories = [RepositoryConfig(path=cwd, name=os.path.basename(cwd) or cwd)]

        commits = collect_commits(repositories, self.source, self.days)
        dids = merge_dids(todos_to_dids(todos), commits_to_dids(commits))
        logger.debug(f"Built {len(dids)} DIDs from {len(commits)} commits")
        return dids

    def build_grouped(
        self,
        todos: Sequence[Todo],
        repositories: Sequence[RepositoryConfig],
        now: Optional[datetime] = None,
    ) -> DidGroups:
        return group_dids(self.build(todos, repositories), now=now, week_start=self.week_start)

    def group(self, dids: Iterable[DidItem], now: Optional[datetime] = None) -> DidGroups:
        return group_dids(dids, now=now, week_start=self.week_start)
