"""Unit tests for pushdeploy.api.errors handlers.

Usage
-----
Run with pytest::

    pytest tests/unit/test_api_errors.py

"""

from __future__ import annotations

import falcon
import falcon.asgi
import falcon.testing
import pytest

from pushdeploy.api.errors import register_error_handlers
from pushdeploy.errors import (
    DeployFailedError,
    InvalidSignatureError,
    MalformedEventError,
    MissingSignatureError,
    UnknownSourceError,
)


class _RaisingResource:
    """Resource that raises the exception stored on it."""

    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def on_get(
        self, req: falcon.asgi.Request, resp: falcon.asgi.Response
    ) -> None:
        raise self._exc


_ROUTES: dict[str, Exception] = {
    "/unknown-source": UnknownSourceError.for_source("acme"),
    "/missing-signature": MissingSignatureError.for_source("acme"),
    "/invalid-signature": InvalidSignatureError.for_source("acme"),
    "/malformed": MalformedEventError.undecodable("Expected `object`"),
    "/deploy-failed": DeployFailedError("acme", "refs/heads/main", exit_status=2),
    "/unexpected": RuntimeError("internal detail"),
    "/http-error": falcon.HTTPBadRequest(title="Bad", description="bad"),
}


@pytest.fixture
def client() -> falcon.testing.TestClient:
    """Build a test client with every handler registered."""
    app = falcon.asgi.App()
    for path, exc in _ROUTES.items():
        app.add_route(path, _RaisingResource(exc))
    register_error_handlers(app)
    return falcon.testing.TestClient(app)


@pytest.mark.parametrize(
    ("path", "status", "title"),
    [
        ("/unknown-source", falcon.HTTP_401, "Unauthorized"),
        ("/missing-signature", falcon.HTTP_401, "Unauthorized"),
        ("/invalid-signature", falcon.HTTP_403, "Forbidden"),
        ("/malformed", falcon.HTTP_500, "Server error"),
        ("/deploy-failed", falcon.HTTP_500, "Deploy failed"),
        ("/unexpected", falcon.HTTP_500, "Server error"),
    ],
)
def test_maps_errors_to_status(
    client: falcon.testing.TestClient, path: str, status: str, title: str
) -> None:
    """Each error class maps to its status and title."""
    result = client.simulate_get(path)
    assert result.status == status, f"wrong status for {path}"
    assert result.json["title"] == title, f"wrong title for {path}"


def test_unauthorized_causes_are_distinguished(
    client: falcon.testing.TestClient,
) -> None:
    """Unknown source and missing signature carry different descriptions."""
    unknown = client.simulate_get("/unknown-source").json["description"]
    missing = client.simulate_get("/missing-signature").json["description"]
    assert unknown != missing


def test_deploy_failed_includes_target(client: falcon.testing.TestClient) -> None:
    """Deploy failures identify the repository and ref."""
    body = client.simulate_get("/deploy-failed").json
    assert body["repository"] == "acme"
    assert body["ref"] == "refs/heads/main"
    assert "status 2" in body["description"]


def test_unexpected_errors_hide_detail(client: falcon.testing.TestClient) -> None:
    """Unexpected exception text is not echoed to the caller."""
    result = client.simulate_get("/unexpected")
    assert "internal detail" not in result.text


def test_falcon_http_errors_keep_default_handling(
    client: falcon.testing.TestClient,
) -> None:
    """Falcon's own HTTP errors are not swallowed by the catch-all."""
    result = client.simulate_get("/http-error")
    assert result.status == falcon.HTTP_400
