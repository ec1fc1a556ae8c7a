"""Unit tests for runtime settings and the configuration source."""

from __future__ import annotations

import typing as typ

import pytest

from pushdeploy.config import InvalidPortError, RuntimeSettings, load_config_source

if typ.TYPE_CHECKING:
    from pathlib import Path


class TestRuntimeSettings:
    """Tests for RuntimeSettings.from_mapping."""

    def test_defaults(self) -> None:
        """Missing keys fall back to defaults."""
        settings = RuntimeSettings.from_mapping({})
        assert settings == RuntimeSettings(
            host="0.0.0.0",  # noqa: S104
            port=3000,
            log_level="INFO",
        )

    def test_reads_values(self) -> None:
        """HOST, PORT and LOGLEVEL are read from the mapping."""
        settings = RuntimeSettings.from_mapping(
            {"HOST": "127.0.0.1", "PORT": "9000", "LOGLEVEL": "debug"}
        )
        assert settings.host == "127.0.0.1"
        assert settings.port == 9000
        assert settings.log_level == "debug"

    @pytest.mark.parametrize("raw", ["abc", "0", "65536", "-1"])
    def test_invalid_port_raises(self, raw: str) -> None:
        """Ports must be integers in 1-65535."""
        with pytest.raises(InvalidPortError, match="PORT"):
            RuntimeSettings.from_mapping({"PORT": raw})


class TestLoadConfigSource:
    """Tests for load_config_source."""

    def test_environment_overrides_env_file(self, tmp_path: Path) -> None:
        """Exported variables win over the dotenv file."""
        env_file = tmp_path / ".env"
        env_file.write_text("ACME_MAIN=from-file.sh\nACME_SECRET=file-secret\n")

        merged = load_config_source(env_file, environ={"ACME_MAIN": "from-env.sh"})

        assert merged["ACME_MAIN"] == "from-env.sh"
        assert merged["ACME_SECRET"] == "file-secret"

    def test_missing_env_file_is_ignored(self, tmp_path: Path) -> None:
        """A missing dotenv file yields the environment alone."""
        merged = load_config_source(tmp_path / "absent.env", environ={"A_B": "c"})
        assert merged == {"A_B": "c"}

    def test_valueless_keys_are_skipped(self, tmp_path: Path) -> None:
        """Keys declared without a value in the file are not included."""
        env_file = tmp_path / ".env"
        env_file.write_text("ACME_MAIN\nFOO_SECRET=f\n")

        merged = load_config_source(env_file, environ={})

        assert merged == {"FOO_SECRET": "f"}
