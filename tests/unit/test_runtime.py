"""Unit tests for the pushdeploy.runtime module."""

from __future__ import annotations

import os
import typing as typ
from http import HTTPStatus
from unittest import mock

import falcon.testing
import pytest

from pushdeploy import runtime
from tests.helpers.push_events import build_push_payload, signed_headers

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def isolated_env_file_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Restore ENVFILE after each test, since main exports it."""
    monkeypatch.setenv("ENVFILE", "")


@pytest.fixture
def env_file(tmp_path: Path) -> Path:
    """Write a dotenv file with one deploy rule and its secret."""
    path = tmp_path / ".env"
    path.write_text("WIDGETS_MAIN=exit 0\nWIDGETS_SECRET=from-file\n")
    return path


class TestCreateApp:
    """Tests for runtime.create_app."""

    def test_probes_respond(self, env_file: Path) -> None:
        """The runtime app serves the probes."""
        client = falcon.testing.TestClient(runtime.create_app(env_file))
        assert client.simulate_get("/health").status_code == HTTPStatus.OK
        assert client.simulate_get("/ready").status_code == HTTPStatus.OK

    def test_rules_come_from_env_file(self, env_file: Path) -> None:
        """Rules and secrets in the dotenv file are honoured."""
        client = falcon.testing.TestClient(runtime.create_app(env_file))
        payload = build_push_payload("widgets", "refs/heads/main")

        result = client.simulate_post(
            "/deploy", body=payload, headers=signed_headers(payload, "from-file")
        )

        assert result.status_code == HTTPStatus.OK
        assert result.json["status"] == "deployed"

    def test_environment_overrides_env_file(
        self, env_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """An exported secret replaces the one in the file."""
        monkeypatch.setenv("WIDGETS_SECRET", "from-env")
        client = falcon.testing.TestClient(runtime.create_app(env_file))
        payload = build_push_payload("widgets", "refs/heads/dev")

        stale = client.simulate_post(
            "/deploy", body=payload, headers=signed_headers(payload, "from-file")
        )
        fresh = client.simulate_post(
            "/deploy", body=payload, headers=signed_headers(payload, "from-env")
        )

        assert stale.status_code == HTTPStatus.FORBIDDEN
        assert fresh.status_code == HTTPStatus.OK


class TestMain:
    """Tests for runtime.main."""

    def test_invalid_port_exits(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A non-numeric PORT stops start-up with status 1."""
        monkeypatch.setenv("PORT", "not-a-port")

        with pytest.raises(SystemExit) as excinfo:
            runtime.main(["--env-file", str(tmp_path / "absent.env")])

        assert excinfo.value.code == 1

    def test_serves_with_configured_port(
        self, env_file: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Granian is started with the configured address and factory."""
        monkeypatch.setenv("PORT", "9123")
        monkeypatch.setenv("HOST", "127.0.0.1")
        monkeypatch.setattr(
            runtime, "configure_logging", lambda _level: ("INFO", False)
        )
        granian_cls = mock.MagicMock()
        monkeypatch.setattr("granian.Granian", granian_cls)

        runtime.main(["--env-file", str(env_file)])

        assert os.environ["ENVFILE"] == str(env_file)
        granian_cls.assert_called_once()
        args, kwargs = granian_cls.call_args
        assert args == ("pushdeploy.runtime:create_app",)
        assert kwargs["address"] == "127.0.0.1"
        assert kwargs["port"] == 9123
        assert kwargs["factory"] is True
        granian_cls.return_value.serve.assert_called_once_with()

    def test_workers_read_the_chosen_env_file(
        self,
        tmp_path: Path,
        env_file: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """The factory Granian calls reads --env-file, not ./.env."""
        workdir = tmp_path / "workdir"
        workdir.mkdir()
        (workdir / ".env").write_text("STALE_MAIN=echo stale\nSTALE_SECRET=old\n")
        monkeypatch.chdir(workdir)
        monkeypatch.setattr(
            runtime, "configure_logging", lambda _level: ("INFO", False)
        )
        monkeypatch.setattr("granian.Granian", mock.MagicMock())

        runtime.main(["--env-file", str(env_file)])
        client = falcon.testing.TestClient(runtime.create_app())

        stale_payload = build_push_payload("stale", "refs/heads/main")
        stale = client.simulate_post(
            "/deploy", body=stale_payload, headers=signed_headers(stale_payload, "old")
        )
        payload = build_push_payload("widgets", "refs/heads/dev")
        chosen = client.simulate_post(
            "/deploy", body=payload, headers=signed_headers(payload, "from-file")
        )

        assert stale.status_code == HTTPStatus.UNAUTHORIZED
        assert chosen.status_code == HTTPStatus.OK
        assert chosen.json["status"] == "no_action"


class TestCreateAppWithoutEnvFile:
    """Tests for runtime.create_app when no dotenv file is named."""

    def test_ignores_working_directory_env_file(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Without ENVFILE only the process environment is read."""
        (tmp_path / ".env").write_text("STALE_MAIN=echo stale\nSTALE_SECRET=old\n")
        monkeypatch.chdir(tmp_path)
        client = falcon.testing.TestClient(runtime.create_app())
        payload = build_push_payload("stale", "refs/heads/main")

        result = client.simulate_post(
            "/deploy", body=payload, headers=signed_headers(payload, "old")
        )

        assert result.status_code == HTTPStatus.UNAUTHORIZED
