"""Recent commits from git repositories for the DIDs feed."""

import logging
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

import git
from git import Repo
from git.exc import GitError

from dailytodo.models.did import GitCommit, RepositoryRef
from dailytodo.models.todo import RepositoryConfig

logger = logging.getLogger(__name__)

# hash, subject, author name, strict ISO author date
LOG_FIELD_SEPARATOR = "\x1f"
LOG_FORMAT = LOG_FIELD_SEPARATOR.join(["%H", "%s", "%an", "%aI"])
SHORT_HASH_LENGTH = 8


class CommitSource(Protocol):
    """Anything that can list recent commits for a configured repository."""

    git_author: Optional[str]

    def get_commits(self, repository: RepositoryConfig, days: int) -> List[GitCommit]:
        ...


def parse_log_output(output: str, repository: Optional[RepositoryRef] = None) -> List[GitCommit]:
    """Parse ``git log`` output written with LOG_FORMAT.

    Lines that do not have four fields or carry an unreadable date are skipped.

    Args:
        output: Raw git log output, one commit per line
        repository: Repository attached to every commit

    Returns:
        GitCommit objects in output order
    """
    commits = []
    for line in output.splitlines():
        if not line.strip():
            continue

        fields = line.split(LOG_FIELD_SEPARATOR)
        if len(fields) != 4:
            logger.debug(f"Skipping malformed git log line: {line!r}")
            continue

        commit_hash, message, author, date_text = fields
        try:
            timestamp = datetime.fromisoformat(date_text.strip()).astimezone()
        except ValueError:
            logger.debug(f"Skipping git log line with bad date: {line!r}")
            continue

        commits.append(
            GitCommit(
                hash=commit_hash.strip()[:SHORT_HASH_LENGTH],
                message=message.strip(),
                author=author.strip(),
                date=timestamp.strftime("%Y-%m-%d"),
                timestamp=timestamp,
                repository=repository,
            )
        )
    return commits


def filter_by_author(commits: Iterable[GitCommit], author: Optional[str]) -> List[GitCommit]:
    """Keep commits whose author contains ``author``, ignoring case.

    No filtering happens when ``author`` is empty.
    """
    if not author:
        return list(commits)
    needle = author.lower()
    return [commit for commit in commits if needle in commit.author.lower()]


class GitCommitSource:
    """Queries git repositories through GitPython."""

    def __init__(self, git_author: Optional[str] = None, timeout: Optional[float] = None) -> None:
        """Initialize the source.

        Args:
            git_author: Identity to filter commits by. When unset, each
                repository's user.name is used
            timeout: Seconds after which a git query is killed
        """
        self.git_author = git_author
        self.timeout = timeout

    def open_repo(self, path: str) -> Optional[Repo]:
        """Open the repository containing ``path``; None if there is none."""
        try:
            return Repo(Path(path).expanduser(), search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError):
            return None

    def resolve_author(self, repo: Repo) -> Optional[str]:
        """Configured author, else the repository's user.name, else None."""
        if self.git_author:
            return self.git_author
        try:
            with repo.config_reader() as reader:
                name = reader.get_value("user", "name", default="")
        except (GitError, OSError) as e:
            logger.debug(f"Could not read git user.name for {repo.working_dir}: {e}")
            return None
        return str(name).strip() or None

    def get_commits(
        self,
        repository: RepositoryConfig,
        days: int = 7,
        now: Optional[datetime] = None,
    ) -> List[GitCommit]:
        """List non-merge commits from the last ``days`` days.

        A path that is not a git repository yields no commits, as does any
        failure running git.

        Args:
            repository: Repository to query
            days: Lookback window in days
            now: Reference time for the window (defaults to the current time)

        Returns:
            Commits by the resolved author, in git log order (newest first)
        """
        repo = self.open_repo(repository.path)
        if repo is None:
            logger.debug(f"Not a git repository: {repository.path}")
            return []

        since = (now or datetime.now()).astimezone() - timedelta(days=days)
        ref = RepositoryRef(name=repository.name, path=repository.path)

        try:
            output = repo.git.log(
                f"--since={since.isoformat()}",
                f"--pretty=format:{LOG_FORMAT}",
                "--no-merges",
                kill_after_timeout=self.timeout,
            )
            author = self.resolve_author(repo)
        except (GitError, OSError) as e:
            logger.warning(f"Failed to fetch git commits from {repository.path}: {e}")
            return []
        finally:
            repo.close()

        commits = filter_by_author(parse_log_output(output, ref), author)
        logger.debug(f"Found {len(commits)} commits in {repository.name}")
        return commits


def collect_commits(
    repositories: Iterable[RepositoryConfig],
    source: CommitSource,
    days: int = 7,
) -> List[GitCommit]:
    """Gather commits from every enabled repository, newest first.

    A repository whose query raises contributes no commits; the others are
    still collected.
    """
    commits: List[GitCommit] = []
    for repository in repositories:
        if not repository.enabled:
            continue
        try:
            commits.extend(source.get_commits(repository, days))
        except Exception as e:
            logger.warning(f"Skipping repository {repository.name} ({repository.path}): {e}")

    return sorted(commits, key=lambda commit: commit.timestamp, reverse=True)
