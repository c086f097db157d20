"""Hashtag extraction for task text."""

import re
from typing import List

TAG_PATTERN = re.compile(r"#(\w+)")


def extract_tags(text: str) -> List[str]:
    """Return hashtag words in order of appearance, duplicates included.

    >>> extract_tags("Buy milk #errand #home")
    ['errand', 'home']
    """
    return TAG_PATTERN.findall(text)
