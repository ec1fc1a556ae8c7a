"""Typed push events decoded from webhook request bodies."""

from __future__ import annotations

import dataclasses as dc

import msgspec

from pushdeploy.errors import MalformedEventError

__all__ = ["InboundEvent", "PushPayload", "PushRepository", "parse_push_event"]


class PushRepository(msgspec.Struct, kw_only=True):
    """Repository block of a push payload.

    Attributes
    ----------
    name : str
        Repository name, matched case-insensitively against configuration.

    """

    name: str


class PushPayload(msgspec.Struct, kw_only=True):
    """Fields of a push payload that the listener reads.

    Other fields are ignored.

    Attributes
    ----------
    repository : PushRepository
        Repository the push targeted.
    ref : str
        Fully-qualified ref that was pushed, e.g. ``refs/heads/main``.

    """

    repository: PushRepository
    ref: str


_decoder = msgspec.json.Decoder(PushPayload)


@dc.dataclass(frozen=True, slots=True)
class InboundEvent:
    """A single push notification awaiting authentication.

    Attributes
    ----------
    source
        Lower-cased repository name.
    ref
        Ref exactly as it appeared in the payload.
    signature
        Claimed signature header value, or ``None`` when absent.
    payload
        Raw request body used for signature verification.

    """

    source: str
    ref: str
    signature: str | None
    payload: bytes = dc.field(repr=False)


def parse_push_event(payload: bytes, signature: str | None) -> InboundEvent:
    """Decode ``payload`` into an :class:`InboundEvent`.

    Raises
    ------
    MalformedEventError
        If the body is not JSON or lacks ``repository.name`` or ``ref``.

    """
    try:
        decoded = _decoder.decode(payload)
    except (msgspec.DecodeError, msgspec.ValidationError) as exc:
        raise MalformedEventError.undecodable(str(exc)) from exc

    return InboundEvent(
        source=decoded.repository.name.lower(),
        ref=decoded.ref,
        signature=signature,
        payload=payload,
    )
