"""Application factory for the deploy listener's Falcon ASGI app.

Usage
-----
Create a probe-only app::

    app = create_app()

Create the webhook app from resolved configuration::

    from pushdeploy.api.app import AppDependencies, create_app

    deps = AppDependencies(config=resolve_config(mapping))
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from pushdeploy.api.deploy.resources import DeployResource
from pushdeploy.api.errors import register_error_handlers
from pushdeploy.api.health.resources import HealthResource, ReadyResource
from pushdeploy.runner import ShellActionRunner
from pushdeploy.service import DeployService, DeployServiceDependencies

if typ.TYPE_CHECKING:
    from pushdeploy.config.resolver import ResolvedConfig
    from pushdeploy.observability import DeployEventLogger
    from pushdeploy.runner import ActionRunner

__all__ = ["DEPLOY_ROUTE", "AppDependencies", "create_app"]

DEPLOY_ROUTE = "/deploy"


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    When ``config`` is ``None`` only the probes are registered.

    Attributes
    ----------
    config
        Resolved deploy table and secret store.
    runner
        Deploy command runner; defaults to :class:`ShellActionRunner`.
    event_logger
        Optional override for deploy lifecycle logging.

    """

    config: ResolvedConfig | None = None
    runner: ActionRunner | None = None
    event_logger: DeployEventLogger | None = None


def _build_service(dependencies: AppDependencies) -> DeployService:
    config = typ.cast("ResolvedConfig", dependencies.config)
    runner = dependencies.runner or ShellActionRunner()
    return DeployService(
        DeployServiceDependencies(config=config, runner=runner),
        event_logger=dependencies.event_logger,
    )


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional application dependencies. Without a resolved
        configuration the ``POST /deploy`` route is not registered.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    app = falcon.asgi.App()
    register_error_handlers(app)

    rule_count = 0
    if dependencies is not None and dependencies.config is not None:
        rule_count = len(dependencies.config.table)
        app.add_route(DEPLOY_ROUTE, DeployResource(_build_service(dependencies)))

    app.add_route("/health", HealthResource())
    app.add_route("/ready", ReadyResource(rule_count))

    return app
