"""Reading and writing individual notes inside a vault."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import AlreadyExists, CreateFailed, NotFound, ReadFailed, UpdateFailed
from .paths import Vault, resolve_in_vault

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class NoteStore:
    """Read, create and update notes, each path checked against the vault first.

    Content is read and written untranslated (``newline=""``) so a note
    round-trips exactly.
    """

    vault: Vault

    def read_note(self, path: str) -> str:
        target = resolve_in_vault(path, self.vault)
        try:
            with target.open(encoding="utf-8", newline="") as handle:
                return handle.read()
        except FileNotFoundError as exc:
            raise NotFound(f"Failed to read note: File not found: {path}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ReadFailed(f"Failed to read note: {exc}") from exc

    def create_note(self, path: str, content: str) -> None:
        target = resolve_in_vault(path, self.vault)
        if target.exists():
            raise AlreadyExists(f"File already exists: {path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise CreateFailed(f"Failed to create note: {exc}") from exc
        try:
            # "x" refuses to clobber a file created since the check above
            with target.open("x", encoding="utf-8", newline="") as handle:
                handle.write(content)
        except FileExistsError as exc:
            raise AlreadyExists(f"File already exists: {path}") from exc
        except OSError as exc:
            raise CreateFailed(f"Failed to create note: {exc}") from exc
        logger.info("Created note %s", path)

    def update_note(self, path: str, content: str) -> None:
        target = resolve_in_vault(path, self.vault)
        if not target.is_file():
            raise NotFound(f"Failed to update note: File not found: {path}")
        try:
            target.write_text(content, encoding="utf-8", newline="")
        except OSError as exc:
            raise UpdateFailed(f"Failed to update note: {exc}") from exc
        logger.info("Updated note %s", path)
