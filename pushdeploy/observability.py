"""Structured log events for the deploy lifecycle.

Events are emitted as ``[<event type>] key=value ...`` lines so log
aggregators can parse them. Source and ref are always present; secrets
never are.
"""

from __future__ import annotations

import enum
import typing as typ

from pushdeploy.errors import (
    ActionExecutionError,
    InvalidSignatureError,
    MalformedEventError,
    MissingSignatureError,
    UnknownSourceError,
)
from pushdeploy.logging import (
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    from pushdeploy.config.resolver import DeployTable, SecretStore
    from pushdeploy.runner import ActionResult

__all__ = [
    "DeployEventLogger",
    "DeployEventType",
    "RejectionReason",
    "categorize_rejection",
]

logger = get_logger(__name__)


class DeployEventType(enum.StrEnum):
    """Structured log event types."""

    TABLE_LOADED = "deploy.table.loaded"
    EVENT_REJECTED = "deploy.event.rejected"
    NO_ACTION = "deploy.event.no_action"
    DEPLOY_STARTED = "deploy.run.started"
    DEPLOY_SUCCEEDED = "deploy.run.succeeded"
    DEPLOY_FAILED = "deploy.run.failed"


class RejectionReason(enum.StrEnum):
    """Why an inbound event was rejected before dispatch."""

    UNKNOWN_SOURCE = "unknown_source"
    MISSING_SIGNATURE = "missing_signature"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED_PAYLOAD = "malformed_payload"
    UNKNOWN = "unknown"


_REJECTION_MAP: tuple[tuple[type[BaseException], RejectionReason], ...] = (
    (UnknownSourceError, RejectionReason.UNKNOWN_SOURCE),
    (MissingSignatureError, RejectionReason.MISSING_SIGNATURE),
    (InvalidSignatureError, RejectionReason.INVALID_SIGNATURE),
    (MalformedEventError, RejectionReason.MALFORMED_PAYLOAD),
)


def categorize_rejection(exc: BaseException) -> RejectionReason:
    """Return the rejection reason for an authentication or decode error."""
    for exc_type, reason in _REJECTION_MAP:
        if isinstance(exc, exc_type):
            return reason
    return RejectionReason.UNKNOWN


def _decode_output(data: bytes) -> str:
    return data.decode(errors="replace").rstrip()


class DeployEventLogger:
    """Emit deploy lifecycle events via femtologging.

    Successful and no-op outcomes log at INFO, rejections at WARNING and
    failed deploys at ERROR.
    """

    def log_table_loaded(self, table: DeployTable, secrets: SecretStore) -> None:
        """Log the loaded deploy table and which sources can authenticate."""
        log_info(
            logger,
            "[%s] rules=%d sources_with_secret=%s table=%s",
            DeployEventType.TABLE_LOADED,
            len(table),
            ",".join(sorted(secrets.sources())),
            table.dump(),
        )

    def log_rejected(
        self,
        error: BaseException,
        *,
        source: str | None = None,
    ) -> None:
        """Log an event rejected before dispatch."""
        log_warning(
            logger,
            "[%s] source=%s reason=%s error_message=%s",
            DeployEventType.EVENT_REJECTED,
            source,
            categorize_rejection(error),
            str(error),
        )

    def log_no_action(self, source: str, ref: str) -> None:
        """Log an authenticated event with no configured action."""
        log_info(
            logger,
            "[%s] source=%s ref=%s",
            DeployEventType.NO_ACTION,
            source,
            ref,
        )

    def log_started(self, source: str, ref: str, command: str) -> None:
        """Log the start of a deploy command."""
        log_info(
            logger,
            "[%s] source=%s ref=%s command=%s",
            DeployEventType.DEPLOY_STARTED,
            source,
            ref,
            command,
        )

    def log_succeeded(self, source: str, ref: str, result: ActionResult) -> None:
        """Log a deploy command that exited cleanly, with its output."""
        log_info(
            logger,
            "[%s] source=%s ref=%s exit_status=%d stdout=%s",
            DeployEventType.DEPLOY_SUCCEEDED,
            source,
            ref,
            result.exit_status,
            _decode_output(result.stdout),
        )
        if result.stderr:
            log_warning(
                logger,
                "[%s] source=%s ref=%s stderr=%s",
                DeployEventType.DEPLOY_SUCCEEDED,
                source,
                ref,
                _decode_output(result.stderr),
            )

    def log_failed(
        self,
        source: str,
        ref: str,
        *,
        result: ActionResult | None = None,
        error: ActionExecutionError | None = None,
    ) -> None:
        """Log a deploy command that exited non-zero or never started."""
        if error is not None:
            log_error(
                logger,
                "[%s] source=%s ref=%s error_type=%s error_message=%s",
                DeployEventType.DEPLOY_FAILED,
                source,
                ref,
                type(error).__name__,
                str(error),
                exc_info=error,
            )
            return

        exit_status = result.exit_status if result is not None else None
        stdout = _decode_output(result.stdout) if result is not None else ""
        stderr = _decode_output(result.stderr) if result is not None else ""
        log_error(
            logger,
            "[%s] source=%s ref=%s exit_status=%s stdout=%s stderr=%s",
            DeployEventType.DEPLOY_FAILED,
            source,
            ref,
            exit_status,
            stdout,
            stderr,
        )
