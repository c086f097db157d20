"""Git commit extraction."""

from dailytodo.extraction.git_source import (
    CommitSource,
    GitCommitSource,
    collect_commits,
    filter_by_author,
    parse_log_output,
)

__all__ = [
    "CommitSource",
    "GitCommitSource",
    "collect_commits",
    "filter_by_author",
    "parse_log_output",
]
