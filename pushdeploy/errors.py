"""Errors raised while authenticating and dispatching push events.

None of these messages include a configured secret.
"""

from __future__ import annotations


class DeployError(Exception):
    """Base class for push-event handling errors."""


class AuthenticationError(DeployError):
    """Raised when an inbound event cannot be authenticated."""

    def __init__(self, message: str, *, source: str) -> None:
        """Initialise with a message and the source named by the event."""
        self.source = source
        super().__init__(message)


class UnknownSourceError(AuthenticationError):
    """Raised when no shared secret is configured for the event's source."""

    @classmethod
    def for_source(cls, source: str) -> UnknownSourceError:
        """Return an error for a source without a configured secret."""
        return cls(f"No secret configured for repository: {source}", source=source)


class MissingSignatureError(AuthenticationError):
    """Raised when the request carries no signature header."""

    @classmethod
    def for_source(cls, source: str) -> MissingSignatureError:
        """Return an error for an unsigned event."""
        return cls(f"No signature provided for repository: {source}", source=source)


class InvalidSignatureError(AuthenticationError):
    """Raised when the claimed signature does not match the payload digest."""

    @classmethod
    def for_source(cls, source: str) -> InvalidSignatureError:
        """Return an error for a signature mismatch."""
        return cls(f"Invalid signature for repository: {source}", source=source)


class MalformedEventError(DeployError):
    """Raised when a push payload lacks the fields needed for dispatch."""

    @classmethod
    def undecodable(cls, detail: str) -> MalformedEventError:
        """Return an error for a body that is not a valid push payload."""
        return cls(f"Malformed push payload: {detail}")


class ActionExecutionError(DeployError):
    """Raised when a deploy command cannot be launched at all."""

    def __init__(self, command: str, reason: str) -> None:
        """Initialise with the command and the launch failure reason."""
        self.command = command
        self.reason = reason
        super().__init__(f"Could not run deploy command {command!r}: {reason}")


class DeployFailedError(DeployError):
    """Raised when a matched deploy action fails or cannot be launched.

    Attributes
    ----------
    source
        Lower-cased repository name of the event.
    ref
        Ref the event was pushed to.
    exit_status
        Exit status of the command, or ``None`` when it never started.

    """

    def __init__(self, source: str, ref: str, *, exit_status: int | None) -> None:
        """Initialise with the deploy target and the command's exit status."""
        self.source = source
        self.ref = ref
        self.exit_status = exit_status
        if exit_status is None:
            detail = "command could not be started"
        else:
            detail = f"command exited with status {exit_status}"
        super().__init__(f"Deploy of {source} ({ref}) failed: {detail}")


__all__ = [
    "ActionExecutionError",
    "AuthenticationError",
    "DeployError",
    "DeployFailedError",
    "InvalidSignatureError",
    "MalformedEventError",
    "MissingSignatureError",
    "UnknownSourceError",
]
