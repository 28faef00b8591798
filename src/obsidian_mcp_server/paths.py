"""Utilities for working with vault paths safely."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .errors import AccessDenied


@dataclass(frozen=True)
class Vault:
    """Container representing a vault root."""

    name: str
    root: Path


class VaultConfigurationError(ValueError):
    """Raised when vault configuration is invalid."""


def parse_vault_path(raw: str | None) -> Vault:
    """Parse the configured vault location into a :class:`Vault`."""

    candidate = (raw or "").strip()
    if not candidate:
        raise VaultConfigurationError("VAULT_PATH must be provided")

    path = Path(candidate).expanduser()
    if not path.is_absolute():
        raise VaultConfigurationError(f"Vault path must be absolute: {candidate!r}")
    root = path.resolve(strict=False)
    return Vault(name=root.name or str(root), root=root)


def _is_within(path: Path, root: Path) -> bool:
    try:
        path.relative_to(root)
    except ValueError:
        return False
    return True


def resolve_in_vault(path_str: str, vault: Vault) -> Path:
    """Resolve *path_str* against the vault root, refusing anything outside it.

    The lexical check runs first and touches nothing on disk. Symlinks are
    canonicalized afterwards so a link inside the vault cannot point out of it.
    """

    normalized = Path(os.path.normpath(vault.root / path_str))
    if not _is_within(normalized, vault.root):
        raise AccessDenied()

    try:
        resolved = normalized.resolve(strict=False)
    except (OSError, RuntimeError, ValueError) as exc:
        # symlink loops and embedded NUL bytes cannot be canonicalized
        raise AccessDenied(f"Access denied: Cannot resolve path {path_str!r}") from exc
    if not _is_within(resolved, vault.root):
        raise AccessDenied()
    return resolved


def relative_note_path(path: Path, vault: Vault) -> str:
    """Return the ``/`` separated location of *path* relative to the vault root."""

    return path.relative_to(vault.root).as_posix()
