from pathlib import Path

import pytest

from obsidian_mcp_server.paths import Vault, parse_vault_path

SAMPLE_NOTES = {
    "note1.md": "# First Note\n\nThis is a note about #programming and #javascript.",
    "note2.md": "# Second Note\n\nThis note discusses #programming concepts.",
    "folder/note3.md": "# Third Note\n\nThis note is about #design patterns.",
    "daily/2024-01-01.md": "# Daily Note\n\nToday I learned about machine learning.",
    "projects/webapp.md": "# Web Application\n\nBuilding a webapp with React.",
}


def _write_note(root: Path, relative: str, body: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture
def write_note():
    return _write_note


@pytest.fixture
def vault(tmp_path) -> Vault:
    root = tmp_path / "vault"
    root.mkdir()
    return parse_vault_path(str(root))


@pytest.fixture
def sample_vault(vault) -> Vault:
    for relative, body in SAMPLE_NOTES.items():
        _write_note(vault.root, relative, body)
    return vault
