"""FastMCP server exposing note search and editing tools for an Obsidian vault."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Literal, TypeVar, cast

from dotenv import load_dotenv
from fastmcp import FastMCP
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .errors import NoteError
from .notes import NoteStore
from .paths import Vault, VaultConfigurationError, parse_vault_path
from .search import search_notes
from .security import HEALTH_PATH, build_security_middleware

TToolFunc = TypeVar("TToolFunc", bound=Callable[..., Any])
SearchTypeName = Literal["filename", "content", "tag", "regex"]
Transport = Literal["stdio", "http"]

logger = logging.getLogger(__name__)

load_dotenv()


@dataclass(slots=True)
class Settings:
    vault: Vault
    transport: Transport
    host: str
    port: int
    shared_secret: str | None
    log_level: str


def _error_payload(exc: NoteError, **extra: Any) -> dict[str, Any]:
    return {"ok": False, "error": str(exc), "kind": exc.kind, **extra}


@dataclass(slots=True)
class NoteService:
    """Turns vault operations into tool payloads."""

    vault: Vault

    @property
    def store(self) -> NoteStore:
        return NoteStore(self.vault)

    def search_notes(self, query: str, search_type: str) -> dict[str, Any]:
        """Search the vault; an unknown *search_type* raises ``ValueError``.

        The ``search_notes`` tool restricts ``search_type`` to the four known
        names, so only direct callers can hit that error.
        """
        try:
            results = search_notes(self.vault, query, search_type)
        except NoteError as exc:
            return _error_payload(exc)
        return {
            "ok": True,
            "count": len(results),
            "results": [result.to_dict() for result in results],
        }

    def read_note(self, file_path: str) -> dict[str, Any]:
        try:
            content = self.store.read_note(file_path)
        except NoteError as exc:
            return _error_payload(exc, path=file_path)
        return {"ok": True, "path": file_path, "content": content}

    def create_note(self, file_path: str, content: str) -> dict[str, Any]:
        try:
            self.store.create_note(file_path, content)
        except NoteError as exc:
            return _error_payload(exc, path=file_path)
        return {"ok": True, "path": file_path, "message": f"Note created successfully: {file_path}"}

    def update_note(self, file_path: str, content: str) -> dict[str, Any]:
        try:
            self.store.update_note(file_path, content)
        except NoteError as exc:
            return _error_payload(exc, path=file_path)
        return {"ok": True, "path": file_path, "message": f"Note updated successfully: {file_path}"}


def _parse_port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError as exc:
        raise VaultConfigurationError(f"Invalid PORT value {raw!r}") from exc
    if not 1 <= port <= 65535:
        raise VaultConfigurationError(f"Port must be between 1 and 65535, got {port}")
    return port


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="MCP server for an Obsidian vault")
    parser.add_argument("--vault-path", help="Path to the Obsidian vault directory (VAULT_PATH)")
    parser.add_argument(
        "--transport", choices=["stdio", "http"], help="Transport to serve on (MCP_TRANSPORT)"
    )
    parser.add_argument("--host", help="Bind address for the http transport (HOST)")
    parser.add_argument("--port", help="Port for the http transport (PORT)")
    parser.add_argument("--log-level", help="Logging level (LOG_LEVEL)")
    return parser


def load_settings(argv: Sequence[str] | None = None) -> Settings:
    """Load configuration from command line flags, falling back to environment variables."""

    args = build_arg_parser().parse_args(argv)

    vault = parse_vault_path(args.vault_path or os.environ.get("VAULT_PATH"))
    if not vault.root.is_dir():
        raise VaultConfigurationError(
            f"Vault path {vault.root} does not exist or is not a directory"
        )

    transport = (args.transport or os.environ.get("MCP_TRANSPORT", "stdio")).lower()
    if transport not in ("stdio", "http"):
        raise VaultConfigurationError(f"Unknown transport {transport!r}")

    host = args.host or os.environ.get("HOST", "127.0.0.1")
    port = _parse_port(args.port or os.environ.get("PORT", "8000"))
    shared_secret = os.environ.get("MCP_SHARED_SECRET") or None
    log_level = (args.log_level or os.environ.get("LOG_LEVEL", "info")).upper()

    return Settings(
        vault=vault,
        transport=cast(Transport, transport),
        host=host,
        port=port,
        shared_secret=shared_secret,
        log_level=log_level,
    )


def create_server(settings: Settings) -> tuple[FastMCP, list[Middleware]]:
    """Create a configured :class:`FastMCP` instance and its HTTP security middleware."""

    server = FastMCP(
        "Obsidian Vault",
        instructions=(
            "Search, read, create and update Markdown notes in an Obsidian vault. "
            "Paths are relative to the vault root."
        ),
    )

    security_middleware = build_security_middleware(settings.shared_secret, HEALTH_PATH)

    service = NoteService(settings.vault)

    def tool(*args: Any, **kwargs: Any) -> Callable[[TToolFunc], TToolFunc]:
        decorator = server.tool(*args, **kwargs)
        return cast(Callable[[TToolFunc], TToolFunc], decorator)

    @tool()
    async def search_notes(query: str, search_type: SearchTypeName) -> dict[str, Any]:
        """Search notes by filename, content line, tag or regular expression."""
        return service.search_notes(query, search_type)

    @tool()
    async def read_note(file_path: str) -> dict[str, Any]:
        """Read the content of a note (path relative to the vault)."""
        return service.read_note(file_path)

    @tool()
    async def create_note(file_path: str, content: str) -> dict[str, Any]:
        """Create a new note; fails if the file already exists."""
        return service.create_note(file_path, content)

    @tool()
    async def update_note(file_path: str, content: str) -> dict[str, Any]:
        """Replace the content of an existing note."""
        return service.update_note(file_path, content)

    @server.custom_route(HEALTH_PATH, methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return server, security_middleware


def main(argv: Sequence[str] | None = None) -> None:
    """Run the FastMCP server."""

    try:
        settings = load_settings(argv)
    except VaultConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logger.info("Obsidian MCP server starting on %s", settings.transport)
    logger.info("Vault path: %s", settings.vault.root)

    server, security_middleware = create_server(settings)
    if settings.transport == "http":
        server.run(
            transport="http",
            host=settings.host,
            port=settings.port,
            middleware=security_middleware,
        )
    else:
        server.run()


if __name__ == "__main__":
    main()
