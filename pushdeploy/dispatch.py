"""Resolution of authenticated events to deploy actions."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from pushdeploy.config.resolver import DeployTable

__all__ = ["resolve_action"]


def resolve_action(table: DeployTable, source: str, ref: str) -> str | None:
    """Return the action configured for ``(source, ref)``.

    ``None`` means the event is acknowledged with no action. An empty
    configured action is treated the same way.

    Examples
    --------
    >>> from pushdeploy.config import resolve_config
    >>> table = resolve_config({"ACME_MAIN": "deploy.sh"}).table
    >>> resolve_action(table, "acme", "refs/heads/main")
    'deploy.sh'
    >>> resolve_action(table, "acme", "refs/heads/dev") is None
    True

    """
    return table.resolve(source, ref) or None
