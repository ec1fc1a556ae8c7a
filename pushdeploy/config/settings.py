"""Runtime settings and the configuration source.

The listener reads one flat mapping: the process environment layered over
an optional dotenv file. The same mapping feeds both the runtime settings
below and the deploy rules in :mod:`pushdeploy.config.resolver`.

- ``PORT``: listen port (default ``3000``)
- ``HOST``: bind address (default ``0.0.0.0``)
- ``LOGLEVEL``: log level (default ``INFO``)
- ``ENVFILE``: dotenv file the server workers read (set by ``main``)

``HOST``, ``LOGLEVEL`` and ``ENVFILE`` have no ``_`` separator, so the rule parser
drops them.

Usage
-----
>>> settings = RuntimeSettings.from_mapping({"PORT": "9000"})
>>> settings.port
9000

"""

from __future__ import annotations

import dataclasses as dc
import os
import typing as typ

from dotenv import dotenv_values

from pushdeploy.config.keys import CONTROL_PORT_KEY

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

__all__ = [
    "ENV_FILE_KEY",
    "HOST_KEY",
    "LOG_LEVEL_KEY",
    "InvalidPortError",
    "RuntimeSettings",
    "load_config_source",
]

HOST_KEY = "HOST"
LOG_LEVEL_KEY = "LOGLEVEL"
ENV_FILE_KEY = "ENVFILE"

_DEFAULT_HOST = "0.0.0.0"  # noqa: S104 - listener binds all interfaces
_DEFAULT_PORT = 3000
_DEFAULT_LOG_LEVEL = "INFO"

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


class InvalidPortError(ValueError):
    """Raised when the configured port is not a usable TCP port."""

    def __init__(self, raw: str, reason: str) -> None:
        """Initialise with the raw value and what was wrong with it."""
        self.raw = raw
        super().__init__(
            f"{CONTROL_PORT_KEY} must be an integer in "
            f"{_MIN_PORT}-{_MAX_PORT}, got {raw!r}: {reason}"
        )


def _parse_port(raw: str | None) -> int:
    if raw is None or not raw.strip():
        return _DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError as exc:
        raise InvalidPortError(raw, "not an integer") from exc
    if not (_MIN_PORT <= port <= _MAX_PORT):
        raise InvalidPortError(raw, "out of range")
    return port


@dc.dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Listener settings read from the configuration mapping.

    Attributes
    ----------
    host
        Address the server binds to.
    port
        TCP port the server listens on.
    log_level
        Raw log level string; normalized by
        :func:`pushdeploy.logging.configure_logging`.

    """

    host: str = _DEFAULT_HOST
    port: int = _DEFAULT_PORT
    log_level: str = _DEFAULT_LOG_LEVEL

    @classmethod
    def from_mapping(cls, config: cabc.Mapping[str, str]) -> RuntimeSettings:
        """Read settings from ``config``.

        Raises
        ------
        InvalidPortError
            If ``PORT`` is set but is not an integer in 1-65535.

        """
        host = config.get(HOST_KEY, "").strip() or _DEFAULT_HOST
        log_level = config.get(LOG_LEVEL_KEY, "").strip() or _DEFAULT_LOG_LEVEL
        return cls(
            host=host,
            port=_parse_port(config.get(CONTROL_PORT_KEY)),
            log_level=log_level,
        )


def load_config_source(
    env_file: Path | None = None,
    environ: cabc.Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Return the configuration mapping.

    Values from ``env_file`` are loaded first and the process environment
    is applied on top, so an exported variable wins over the file. Keys
    declared in the file without a value are skipped. A missing file is
    not an error.

    Parameters
    ----------
    env_file
        Optional dotenv file to read.
    environ
        Environment to layer on top; defaults to ``os.environ``.

    Returns
    -------
    dict[str, str]
        The merged mapping, file keys first.

    """
    merged: dict[str, str] = {}
    if env_file is not None and env_file.is_file():
        for key, value in dotenv_values(env_file).items():
            if value is not None:
                merged[key] = value
    merged.update(os.environ if environ is None else environ)
    return merged
