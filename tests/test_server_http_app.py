"""Regression tests for HTTP app construction."""

from starlette.testclient import TestClient

from obsidian_mcp_server.server import Settings, create_server


def _settings(vault, secret):
    return Settings(
        vault=vault,
        transport="http",
        host="127.0.0.1",
        port=8000,
        shared_secret=secret,
        log_level="INFO",
    )


def test_http_app_builds_with_security_middleware(vault):
    server, security_middleware = create_server(_settings(vault, "super-secret"))

    app = server.http_app(middleware=security_middleware)

    assert app is not None


def test_health_route_is_exempt_from_secret(vault):
    server, security_middleware = create_server(_settings(vault, "super-secret"))
    app = server.http_app(middleware=security_middleware)

    client = TestClient(app)
    assert client.get("/mcp/health").json() == {"status": "ok"}
    assert client.post("/mcp", json={}).status_code == 401
