"""Execution of deploy commands and classification of their results.

The service depends only on the :class:`ActionRunner` protocol.
:class:`ShellActionRunner` is the production implementation: it runs the
configured command through the system shell and waits for it without
blocking the event loop. There is no timeout, so a hung command keeps only
its own request pending.

Usage
-----
Run a command and classify the result::

    runner = ShellActionRunner()
    result = await runner.run("./deploy.sh")
    outcome = classify_result(result)

"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import enum
import typing as typ

from pushdeploy.errors import ActionExecutionError

__all__ = [
    "ActionResult",
    "ActionRunner",
    "DeployOutcome",
    "ShellActionRunner",
    "classify_result",
]


@dc.dataclass(frozen=True, slots=True)
class ActionResult:
    """Captured result of one deploy command.

    Attributes
    ----------
    exit_status
        Process exit status; negative when killed by a signal.
    stdout
        Captured standard output.
    stderr
        Captured standard error.

    """

    exit_status: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def succeeded(self) -> bool:
        """Return whether the command exited cleanly."""
        return self.exit_status == 0


class DeployOutcome(enum.StrEnum):
    """Terminal outcome of handling one push event."""

    DEPLOYED = "deployed"
    NO_ACTION = "no_action"
    FAILED = "failed"


@typ.runtime_checkable
class ActionRunner(typ.Protocol):
    """Runs a deploy command once and reports its result."""

    async def run(self, command: str) -> ActionResult:
        """Run ``command`` to completion.

        Raises
        ------
        ActionExecutionError
            If the command could not be launched.

        """
        ...


def classify_result(result: ActionResult) -> DeployOutcome:
    """Map a command result to ``DEPLOYED`` or ``FAILED``."""
    return DeployOutcome.DEPLOYED if result.succeeded else DeployOutcome.FAILED


class ShellActionRunner:
    """Run commands with ``asyncio.create_subprocess_shell``.

    Parameters
    ----------
    cwd
        Optional working directory for the command.

    """

    def __init__(self, *, cwd: str | None = None) -> None:
        """Configure the runner."""
        self._cwd = cwd

    async def run(self, command: str) -> ActionResult:
        """Run ``command`` through the shell and capture its output."""
        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self._cwd,
            )
        except OSError as exc:
            raise ActionExecutionError(command, str(exc)) from exc

        stdout, stderr = await process.communicate()
        # communicate() waits for exit, so returncode is set
        exit_status = typ.cast("int", process.returncode)
        return ActionResult(exit_status=exit_status, stdout=stdout, stderr=stderr)
