import os

import pytest

from obsidian_mcp_server.errors import AccessDenied
from obsidian_mcp_server.paths import (
    Vault,
    VaultConfigurationError,
    parse_vault_path,
    relative_note_path,
    resolve_in_vault,
)


def test_parse_vault_path(tmp_path):
    root = tmp_path / "vault"
    root.mkdir()
    vault = parse_vault_path(str(root))
    assert vault.name == "vault"
    assert vault.root == root.resolve()


def test_parse_vault_path_requires_absolute():
    with pytest.raises(VaultConfigurationError):
        parse_vault_path("relative/path")


def test_parse_vault_path_requires_value():
    with pytest.raises(VaultConfigurationError, match="VAULT_PATH"):
        parse_vault_path("  ")


def test_resolve_in_vault_nested(vault):
    result = resolve_in_vault("folder/sub/note.md", vault)
    assert result == vault.root / "folder" / "sub" / "note.md"


def test_resolve_in_vault_collapses_inner_dotdot(vault):
    result = resolve_in_vault("folder/../note.md", vault)
    assert result == vault.root / "note.md"


def test_resolve_in_vault_root_itself(vault):
    assert resolve_in_vault(".", vault) == vault.root


@pytest.mark.parametrize(
    "candidate",
    [
        "../outside.md",
        "../../../etc/passwd",
        "folder/../../outside.md",
        "/etc/passwd",
    ],
)
def test_resolve_in_vault_rejects_escape(vault, candidate):
    with pytest.raises(AccessDenied, match="outside vault directory"):
        resolve_in_vault(candidate, vault)


def test_resolve_in_vault_rejects_sibling_with_shared_prefix(tmp_path, vault):
    sibling = tmp_path / "vault-evil"
    sibling.mkdir()
    with pytest.raises(AccessDenied):
        resolve_in_vault("../vault-evil/note.md", vault)


def test_resolve_in_vault_accepts_absolute_path_inside(vault):
    target = vault.root / "note.md"
    assert resolve_in_vault(str(target), vault) == target


def test_resolve_in_vault_rejects_symlink_escape(tmp_path, vault):
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.md").write_text("secret", encoding="utf-8")
    os.symlink(outside, vault.root / "link")
    with pytest.raises(AccessDenied):
        resolve_in_vault("link/secret.md", vault)


def test_resolve_in_vault_does_not_touch_disk_for_escape(tmp_path, vault):
    resolve_target = tmp_path / "never-created"
    with pytest.raises(AccessDenied):
        resolve_in_vault("../never-created/note.md", vault)
    assert not resolve_target.exists()


def test_relative_note_path_uses_forward_slashes(vault):
    path = vault.root / "daily" / "2024-01-01.md"
    assert relative_note_path(path, vault) == "daily/2024-01-01.md"


def test_vault_is_frozen(tmp_path):
    vault = Vault("vault", tmp_path)
    with pytest.raises(AttributeError):
        vault.root = tmp_path / "other"  # type: ignore[misc]
