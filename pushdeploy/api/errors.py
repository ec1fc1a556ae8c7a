"""Falcon error handlers translating deploy errors into HTTP responses.

Registered once on the application, these handlers are the single place
where failures become responses:

- unknown source and missing signature → 401
- invalid signature → 403
- failed deploy → 500
- malformed payload and anything unexpected → 500

Usage
-----
Register the handlers on the Falcon app::

    from pushdeploy.api.errors import register_error_handlers

    register_error_handlers(app)

"""

from __future__ import annotations

import typing as typ

import falcon

from pushdeploy.errors import (
    DeployFailedError,
    InvalidSignatureError,
    MalformedEventError,
    MissingSignatureError,
    UnknownSourceError,
)
from pushdeploy.logging import get_logger, log_exception

if typ.TYPE_CHECKING:
    import falcon.asgi
    from falcon.asgi import Request, Response

__all__ = [
    "handle_deploy_failed",
    "handle_invalid_signature",
    "handle_malformed_event",
    "handle_unauthorized",
    "handle_unexpected_error",
    "register_error_handlers",
]

logger = get_logger(__name__)


async def handle_unauthorized(
    _req: Request,
    resp: Response,
    ex: UnknownSourceError | MissingSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map unknown-source and missing-signature errors to HTTP 401."""
    resp.status = falcon.HTTP_401
    if isinstance(ex, UnknownSourceError):
        description = "No secret configured for this repository"
    else:
        description = "No signature provided"
    resp.media = {"title": "Unauthorized", "description": description}


async def handle_invalid_signature(
    _req: Request,
    resp: Response,
    _ex: InvalidSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidSignatureError`` to HTTP 403."""
    resp.status = falcon.HTTP_403
    resp.media = {"title": "Forbidden", "description": "Invalid signature"}


async def handle_deploy_failed(
    _req: Request,
    resp: Response,
    ex: DeployFailedError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``DeployFailedError`` to HTTP 500.

    Parameters
    ----------
    _req
        Falcon request (unused).
    resp
        Falcon response whose status and media are set.
    ex
        The failure, carrying the source and ref of the deploy.
    _params
        URI template parameters (unused).

    """
    resp.status = falcon.HTTP_500
    resp.media = {
        "title": "Deploy failed",
        "description": str(ex),
        "repository": ex.source,
        "ref": ex.ref,
    }


async def handle_malformed_event(
    _req: Request,
    resp: Response,
    ex: MalformedEventError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``MalformedEventError`` to HTTP 500."""
    resp.status = falcon.HTTP_500
    resp.media = {"title": "Server error", "description": str(ex)}


async def handle_unexpected_error(
    _req: Request,
    resp: Response,
    ex: Exception,
    _params: dict[str, typ.Any],
) -> None:
    """Log any other exception and answer with a generic HTTP 500.

    The exception text is not echoed to the caller.
    """
    log_exception(logger, "Unhandled error while handling webhook", ex)
    resp.status = falcon.HTTP_500
    resp.media = {"title": "Server error", "description": "Server error"}


def register_error_handlers(app: falcon.asgi.App) -> None:
    """Attach every deploy error handler to ``app``.

    The catch-all handler is registered first; Falcon picks the most
    specific handler for each exception, and its own ``HTTPError``
    handling still applies.
    """
    app.add_error_handler(Exception, handle_unexpected_error)
    app.add_error_handler(UnknownSourceError, handle_unauthorized)
    app.add_error_handler(MissingSignatureError, handle_unauthorized)
    app.add_error_handler(InvalidSignatureError, handle_invalid_signature)
    app.add_error_handler(MalformedEventError, handle_malformed_event)
    app.add_error_handler(DeployFailedError, handle_deploy_failed)
