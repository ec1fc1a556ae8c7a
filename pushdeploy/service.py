"""Authentication and dispatch of inbound push events.

``DeployService.handle`` runs the whole decision for one request:

1. decode the body into an :class:`~pushdeploy.events.InboundEvent`;
2. authenticate it against the source's shared secret;
3. resolve ``(source, ref)`` to at most one action;
4. run the action once and classify the result.

Failures are raised as :mod:`pushdeploy.errors` exceptions for the HTTP
layer to translate. An event with no matching rule is a normal outcome.

Usage
-----
Build the service from resolved configuration::

    resolved = resolve_config(load_config_source())
    service = DeployService(
        DeployServiceDependencies(config=resolved, runner=ShellActionRunner())
    )
    result = await service.handle(body, signature)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from pushdeploy.dispatch import resolve_action
from pushdeploy.errors import (
    ActionExecutionError,
    AuthenticationError,
    DeployFailedError,
    MalformedEventError,
)
from pushdeploy.events import parse_push_event
from pushdeploy.observability import DeployEventLogger
from pushdeploy.runner import DeployOutcome, classify_result
from pushdeploy.signature import authenticate

if typ.TYPE_CHECKING:
    from pushdeploy.config.resolver import ResolvedConfig
    from pushdeploy.runner import ActionResult, ActionRunner

__all__ = ["DeployResult", "DeployService", "DeployServiceDependencies"]


@dc.dataclass(frozen=True, slots=True)
class DeployServiceDependencies:
    """Collaborators for :class:`DeployService`.

    Attributes
    ----------
    config
        Resolved deploy table and secret store.
    runner
        Executes matched deploy commands.

    """

    config: ResolvedConfig
    runner: ActionRunner


@dc.dataclass(frozen=True, slots=True)
class DeployResult:
    """Outcome of an event that passed authentication."""

    outcome: DeployOutcome
    source: str
    ref: str
    action: str | None = None
    result: ActionResult | None = None


class DeployService:
    """Authenticate push events and run their configured deploy action."""

    def __init__(
        self,
        dependencies: DeployServiceDependencies,
        *,
        event_logger: DeployEventLogger | None = None,
    ) -> None:
        """Configure the service with its collaborators."""
        self._table = dependencies.config.table
        self._secrets = dependencies.config.secrets
        self._runner = dependencies.runner
        self._events = event_logger or DeployEventLogger()

    async def handle(self, payload: bytes, signature: str | None) -> DeployResult:
        """Handle one push event.

        Parameters
        ----------
        payload
            Raw request body.
        signature
            Claimed ``sha256=<hex>`` signature, or ``None`` when absent.

        Returns
        -------
        DeployResult
            ``DEPLOYED`` when the action ran cleanly, ``NO_ACTION`` when no
            rule matched.

        Raises
        ------
        MalformedEventError
            If the payload cannot be decoded.
        AuthenticationError
            If the source is unknown or the signature is missing or wrong.
        DeployFailedError
            If the matched action failed or could not be launched.

        """
        try:
            event = parse_push_event(payload, signature)
        except MalformedEventError as exc:
            self._events.log_rejected(exc)
            raise

        try:
            authenticate(event, self._secrets)
        except AuthenticationError as exc:
            self._events.log_rejected(exc, source=event.source)
            raise

        action = resolve_action(self._table, event.source, event.ref)
        if action is None:
            self._events.log_no_action(event.source, event.ref)
            return DeployResult(
                outcome=DeployOutcome.NO_ACTION,
                source=event.source,
                ref=event.ref,
            )

        return await self._run(event.source, event.ref, action)

    async def _run(self, source: str, ref: str, action: str) -> DeployResult:
        self._events.log_started(source, ref, action)
        try:
            result = await self._runner.run(action)
        except ActionExecutionError as exc:
            self._events.log_failed(source, ref, error=exc)
            raise DeployFailedError(source, ref, exit_status=None) from exc

        if classify_result(result) is DeployOutcome.FAILED:
            self._events.log_failed(source, ref, result=result)
            raise DeployFailedError(source, ref, exit_status=result.exit_status)

        self._events.log_succeeded(source, ref, result)
        return DeployResult(
            outcome=DeployOutcome.DEPLOYED,
            source=source,
            ref=ref,
            action=action,
            result=result,
        )
