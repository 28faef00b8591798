"""Search utilities for vault content.

Every call walks the vault from scratch; nothing is cached between calls.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import AccessDenied, InvalidPattern, SearchFailed
from .paths import Vault, relative_note_path, resolve_in_vault
from .tags import extract_tags, find_tag_occurrences

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"
CONTEXT_LINES = 1
MAX_REGEX_EXCERPTS = 3


class SearchType(str, Enum):
    FILENAME = "filename"
    CONTENT = "content"
    TAG = "tag"
    REGEX = "regex"

    @classmethod
    def parse(cls, value: str | SearchType) -> SearchType:
        try:
            return cls(value)
        except ValueError:
            valid = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown search type {value!r}; expected one of: {valid}") from None


@dataclass(frozen=True)
class Document:
    """A note discovered during a search, with its content and metadata read fresh."""

    relative_path: str
    path: Path
    content: str
    stat: os.stat_result

    @property
    def name(self) -> str:
        return self.relative_path.rsplit("/", 1)[-1]

    @classmethod
    def load(cls, relative_path: str, path: Path) -> Document:
        stat = path.stat()
        with path.open(encoding="utf-8", newline="") as handle:
            content = handle.read()
        return cls(relative_path=relative_path, path=path, content=content, stat=stat)


@dataclass(frozen=True)
class Match:
    excerpt: str | None = None
    lines: list[int] | None = None


@dataclass(frozen=True)
class SearchResult:
    relative_path: str
    name: str
    tags: list[str]
    size: int
    created_at: datetime
    updated_at: datetime
    matched_excerpt: str | None = None
    matched_lines: list[int] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "relative_path": self.relative_path,
            "name": self.name,
            "tags": list(self.tags),
            "size": self.size,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "matched_excerpt": self.matched_excerpt,
            "matched_lines": list(self.matched_lines) if self.matched_lines else None,
        }


Matcher = Callable[[Document], Match | None]


def _match_filename(query: str) -> Matcher:
    needle = query.lower()

    def matcher(document: Document) -> Match | None:
        return Match() if needle in document.name.lower() else None

    return matcher


def _context_around(lines: list[str], index: int) -> str:
    start = max(0, index - CONTEXT_LINES)
    end = min(len(lines), index + CONTEXT_LINES + 1)
    return "\n".join(lines[start:end])


def split_lines(content: str) -> list[str]:
    """Split on ``\\n`` only, dropping the ``\\r`` of CRLF endings."""

    return [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]


def _match_content(query: str) -> Matcher:
    needle = query.lower()

    def matcher(document: Document) -> Match | None:
        lines = split_lines(document.content)
        hits = [number for number, line in enumerate(lines, start=1) if needle in line.lower()]
        if not hits:
            return None
        return Match(excerpt=_context_around(lines, hits[0] - 1), lines=hits)

    return matcher


def _match_tag(query: str) -> Matcher:
    def matcher(document: Document) -> Match | None:
        occurrences = find_tag_occurrences(query, document.content)
        if not occurrences:
            return None
        return Match(excerpt=", ".join(occurrences))

    return matcher


def _match_regex(query: str) -> Matcher:
    try:
        pattern = re.compile(query, re.IGNORECASE)
    except re.error as exc:
        raise InvalidPattern(f"Invalid regex pattern: {query} ({exc})") from exc

    def matcher(document: Document) -> Match | None:
        found: list[str] = []
        matched = False
        for occurrence in pattern.finditer(document.content):
            matched = True
            text = occurrence.group(0)
            if text not in found:
                found.append(text)
                if len(found) == MAX_REGEX_EXCERPTS:
                    break
        if not matched:
            return None
        return Match(excerpt=", ".join(found))

    return matcher


_MATCHER_FACTORIES: dict[SearchType, Callable[[str], Matcher]] = {
    SearchType.FILENAME: _match_filename,
    SearchType.CONTENT: _match_content,
    SearchType.TAG: _match_tag,
    SearchType.REGEX: _match_regex,
}


def build_matcher(query: str, search_type: SearchType | str) -> Matcher:
    """Return the matching function for *search_type*.

    Regex patterns are compiled here, so an invalid pattern fails before any
    note is read.
    """

    return _MATCHER_FACTORIES[SearchType.parse(search_type)](query)


def _sorted_entries(directory: Path) -> Iterator[Path]:
    return iter(sorted(directory.iterdir(), key=lambda item: item.name))


def _walk(root: Path) -> Iterator[Path]:
    # explicit stack of directory iterators; depth is limited only by the filesystem
    stack = [_sorted_entries(root)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
        elif entry.is_dir() and not entry.is_symlink():
            stack.append(_sorted_entries(entry))
        elif entry.suffix == NOTE_SUFFIX and entry.is_file():
            yield entry


def iter_notes(vault: Vault) -> Iterator[Document]:
    """Yield every note in *vault* in deterministic depth-first order.

    Each note is stat-ed and read as it is yielded, whatever the search
    strategy. Symlinked directories are not descended. A symlinked note whose
    target lies outside the vault is skipped without being read.
    """

    for path in _walk(vault.root):
        relative = relative_note_path(path, vault)
        try:
            resolved = resolve_in_vault(relative, vault)
        except AccessDenied:
            logger.warning("Skipping %s: target is outside the vault", relative)
            continue
        yield Document.load(relative, resolved)


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _to_result(document: Document, match: Match) -> SearchResult:
    stat = document.stat
    created = getattr(stat, "st_birthtime", stat.st_ctime)
    return SearchResult(
        relative_path=document.relative_path,
        name=document.name,
        tags=extract_tags(document.content),
        size=stat.st_size,
        created_at=_timestamp(created),
        updated_at=_timestamp(stat.st_mtime),
        matched_excerpt=match.excerpt,
        matched_lines=match.lines,
    )


def search_notes(vault: Vault, query: str, search_type: SearchType | str) -> list[SearchResult]:
    """Return every note in *vault* matching *query* under *search_type*.

    Results keep traversal order. Any I/O problem aborts the whole search with
    :class:`SearchFailed`; an invalid regex raises :class:`InvalidPattern`.
    """

    search_type = SearchType.parse(search_type)
    matcher = build_matcher(query, search_type)

    results: list[SearchResult] = []
    try:
        for document in iter_notes(vault):
            match = matcher(document)
            if match is not None:
                results.append(_to_result(document, match))
    except (OSError, UnicodeDecodeError) as exc:
        raise SearchFailed(f"Search failed: {exc}") from exc

    logger.debug("search %r (%s) matched %d notes", query, search_type.value, len(results))
    return results
