"""DIDs feed: merging, sorting and date bucketing."""

from dailytodo.dids.aggregator import (
    DidAggregator,
    DidGroups,
    commits_to_dids,
    group_dids,
    merge_dids,
    todos_to_dids,
)
from dailytodo.dids.dates import CATEGORY_ORDER, DateCategory, get_date_category, parse_timestamp

__all__ = [
    "DidAggregator",
    "DidGroups",
    "todos_to_dids",
    "commits_to_dids",
    "merge_dids",
    "group_dids",
    "DateCategory",
    "CATEGORY_ORDER",
    "get_date_category",
    "parse_timestamp",
]
