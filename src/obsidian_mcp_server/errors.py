"""Error taxonomy shared by the search engine and the note store."""

from __future__ import annotations

from typing import Literal

ErrorKind = Literal[
    "AccessDenied",
    "NotFound",
    "AlreadyExists",
    "InvalidPattern",
    "ReadFailed",
    "CreateFailed",
    "UpdateFailed",
    "SearchFailed",
]


class NoteError(RuntimeError):
    """Base class for every failure a vault operation can report."""

    kind: ErrorKind


class AccessDenied(NoteError):
    kind = "AccessDenied"

    def __init__(self, message: str = "Access denied: Path is outside vault directory") -> None:
        super().__init__(message)


class NotFound(NoteError):
    kind = "NotFound"


class AlreadyExists(NoteError):
    kind = "AlreadyExists"


class InvalidPattern(NoteError):
    kind = "InvalidPattern"


class ReadFailed(NoteError):
    kind = "ReadFailed"


class CreateFailed(NoteError):
    kind = "CreateFailed"


class UpdateFailed(NoteError):
    kind = "UpdateFailed"


class SearchFailed(NoteError):
    kind = "SearchFailed"
