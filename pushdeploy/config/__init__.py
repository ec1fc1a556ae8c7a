"""Configuration for the deploy listener.

Flat key/value configuration is turned into an immutable deploy table and
secret store by :func:`resolve_config`; listener settings come from
:class:`RuntimeSettings`.
"""

from __future__ import annotations

from pushdeploy.config.keys import DropReason, KeyKind, ParsedKey, parse_config_key
from pushdeploy.config.resolver import (
    DeployTable,
    ResolvedConfig,
    SecretStore,
    resolve_config,
)
from pushdeploy.config.settings import (
    ENV_FILE_KEY,
    InvalidPortError,
    RuntimeSettings,
    load_config_source,
)

__all__ = [
    "ENV_FILE_KEY",
    "DeployTable",
    "DropReason",
    "InvalidPortError",
    "KeyKind",
    "ParsedKey",
    "ResolvedConfig",
    "RuntimeSettings",
    "SecretStore",
    "load_config_source",
    "parse_config_key",
    "resolve_config",
]
