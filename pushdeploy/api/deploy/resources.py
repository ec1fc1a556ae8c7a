"""Webhook resource receiving push notifications.

``POST /deploy`` reads the raw body and the ``X-Hub-Signature-256``
header and hands both to :class:`~pushdeploy.service.DeployService`.
Errors propagate to the handlers in :mod:`pushdeploy.api.errors`.

Usage
-----
Register the resource on the Falcon app::

    app.add_route("/deploy", DeployResource(service))

"""

from __future__ import annotations

import typing as typ

import falcon

from pushdeploy.runner import DeployOutcome
from pushdeploy.signature import SIGNATURE_HEADER

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from pushdeploy.service import DeployResult, DeployService

__all__ = ["DeployResource"]

_MESSAGES = {
    DeployOutcome.DEPLOYED: "Deploy successful",
    DeployOutcome.NO_ACTION: "No action taken",
}


def _serialize_result(result: DeployResult) -> dict[str, typ.Any]:
    return {
        "status": result.outcome.value,
        "description": _MESSAGES[result.outcome],
        "repository": result.source,
        "ref": result.ref,
    }


class DeployResource:
    """Resource for inbound push events."""

    def __init__(self, service: DeployService) -> None:
        """Configure the resource with the deploy service."""
        self._service = service

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /deploy.

        The body is read as bytes before any decoding so the signature is
        checked against exactly what the sender signed.

        Parameters
        ----------
        req
            Falcon request carrying the push payload.
        resp
            Falcon response populated with the outcome.

        """
        payload = await req.stream.read()
        signature = req.get_header(SIGNATURE_HEADER)

        result = await self._service.handle(payload, signature)

        resp.media = _serialize_result(result)
        resp.status = falcon.HTTP_200
