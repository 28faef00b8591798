"""Tag helpers for Obsidian markdown content."""

from __future__ import annotations

import re

TAG_PATTERN = re.compile(r"#[\w-]+")


def _strip_hash(tag: str) -> str:
    return tag[1:] if tag.startswith("#") else tag


def extract_tags(content: str) -> list[str]:
    """Return the distinct tags in *content* in order of first appearance."""

    return list(dict.fromkeys(TAG_PATTERN.findall(content)))


def tag_query_pattern(query: str) -> re.Pattern[str]:
    """Compile a case-insensitive pattern for occurrences of the tag *query*.

    A single leading ``#`` on the query is ignored, and the tag must not
    continue into another word character (``#ai`` does not match ``#aim``).
    """

    return re.compile(rf"#{re.escape(_strip_hash(query))}(?!\w)", re.IGNORECASE)


def find_tag_occurrences(query: str, content: str) -> list[str]:
    """Return every literal occurrence of the tag *query* in *content*.

    An empty tag (``""`` or a bare ``"#"``) never matches.
    """

    if not _strip_hash(query):
        return []
    return tag_query_pattern(query).findall(content)
