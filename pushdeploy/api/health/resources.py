"""Liveness and readiness probes for the deploy listener.

Neither probe touches the deploy table or runs commands.

Usage
-----
Register the probes on the Falcon app::

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource())

"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe answering ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe reporting how many deploy rules are loaded.

    Parameters
    ----------
    rule_count
        Number of (source, ref) rules in the deploy table.

    """

    def __init__(self, rule_count: int = 0) -> None:
        """Store the rule count reported by the probe."""
        self._rule_count = rule_count

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready."""
        resp.media = {"status": "ready", "rules": self._rule_count}
        resp.status = HTTPStatus.OK
