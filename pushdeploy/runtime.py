"""Runtime entrypoint for the deploy listener.

``pushdeploy.runtime:create_app`` is the Granian factory. It resolves the
deploy table and secret store from the process environment, layered over
the dotenv file named by ``ENVFILE`` when that variable is set, and builds
the Falcon app with both passed in explicitly. :func:`main` sets
``ENVFILE`` from ``--env-file`` before starting Granian, so the workers read
the same file the launcher validated.

Configuration is driven by flat key/value pairs:

- ``PORT``: Listen port (default ``3000``)
- ``HOST``: Bind address (default ``0.0.0.0``)
- ``LOGLEVEL``: Log level (default ``INFO``)
- ``ENVFILE``: dotenv file read by the workers
- ``<REPO>_SECRET``: Shared webhook secret for a repository
- ``<REPO>_<BRANCH>``: Deploy command for pushes to ``refs/heads/<branch>``

Run the service directly with ``python -m pushdeploy.runtime``.
"""

from __future__ import annotations

import argparse
import os
import typing as typ
from pathlib import Path

from pushdeploy.config import (
    ENV_FILE_KEY,
    InvalidPortError,
    RuntimeSettings,
    load_config_source,
    resolve_config,
)
from pushdeploy.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)
from pushdeploy.observability import DeployEventLogger

if typ.TYPE_CHECKING:
    import falcon.asgi

__all__ = ["DEFAULT_ENV_FILE", "create_app", "main"]

logger = get_logger(__name__)

DEFAULT_ENV_FILE = Path(".env")


def _env_file_from_environ() -> Path | None:
    raw = os.environ.get(ENV_FILE_KEY, "").strip()
    return Path(raw) if raw else None


def create_app(env_file: Path | None = None) -> falcon.asgi.App:
    """Create the Falcon ASGI application from the environment.

    Parameters
    ----------
    env_file
        Optional dotenv file layered under the process environment. When
        omitted, the file named by ``ENVFILE`` is used; with neither, only
        the process environment is read.

    Returns
    -------
    falcon.asgi.App
        Application serving ``POST /deploy``, ``/health`` and ``/ready``.

    """
    from pushdeploy.api.app import AppDependencies
    from pushdeploy.api.app import create_app as _create_api_app

    if env_file is None:
        env_file = _env_file_from_environ()
    resolved = resolve_config(load_config_source(env_file))
    event_logger = DeployEventLogger()
    event_logger.log_table_loaded(resolved.table, resolved.secrets)

    return _create_api_app(
        AppDependencies(config=resolved, event_logger=event_logger)
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="pushdeploy",
        description="Run the push-to-deploy webhook listener.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=DEFAULT_ENV_FILE,
        help="dotenv file to load before reading configuration",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Start the deploy listener using Granian.

    The chosen dotenv file is exported as ``ENVFILE``; the Granian workers
    build the app through :func:`create_app`, which reads that variable.

    Raises
    ------
    SystemExit
        If ``PORT`` is not a valid TCP port.

    """
    from granian import Granian
    from granian.constants import Interfaces

    args = _parse_args(argv)
    env_file: Path = args.env_file.absolute()
    os.environ[ENV_FILE_KEY] = str(env_file)

    config = load_config_source(env_file)
    try:
        settings = RuntimeSettings.from_mapping(config)
    except InvalidPortError as exc:
        # validation failures need no traceback
        log_error(logger, "Invalid port configuration: %s", exc)
        raise SystemExit(1) from exc

    normalized_level, invalid_level = configure_logging(settings.log_level)
    if invalid_level:
        log_warning(
            logger,
            "Invalid LOGLEVEL %r, falling back to %s",
            settings.log_level,
            normalized_level,
        )

    log_info(
        logger,
        "Webhook listener running on %s:%d (log_level=%s)",
        settings.host,
        settings.port,
        normalized_level,
    )

    server = Granian(
        "pushdeploy.runtime:create_app",
        address=settings.host,
        port=settings.port,
        interface=Interfaces.ASGI,
        factory=True,
    )
    server.serve()


if __name__ == "__main__":
    main()
