"""HMAC-SHA256 signatures for inbound push events.

Signatures are compared against the exact request body bytes. Decoding the
JSON and encoding it again would not reproduce the sender's bytes.

Examples
--------
>>> sig = compute_signature(b"{}", "s3cr3t")
>>> sig.startswith("sha256=")
True
>>> verify_signature(b"{}", sig, "s3cr3t")
True

"""

from __future__ import annotations

import hashlib
import hmac
import typing as typ

from pushdeploy.errors import (
    InvalidSignatureError,
    MissingSignatureError,
    UnknownSourceError,
)

if typ.TYPE_CHECKING:
    from pushdeploy.config.resolver import SecretStore
    from pushdeploy.events import InboundEvent

__all__ = [
    "SIGNATURE_HEADER",
    "SIGNATURE_PREFIX",
    "authenticate",
    "compute_signature",
    "verify_signature",
]

SIGNATURE_HEADER = "X-Hub-Signature-256"
SIGNATURE_PREFIX = "sha256="


def compute_signature(payload: bytes, secret: str) -> str:
    """Return ``sha256=<hex>`` for ``payload`` keyed with ``secret``.

    Undecodable bytes that reached ``secret`` as surrogates (environment
    values on POSIX) are keyed as the original bytes.
    """
    key = secret.encode(errors="surrogateescape")
    digest = hmac.new(key, payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload: bytes, claimed: str, secret: str) -> bool:
    """Return whether ``claimed`` is the signature of ``payload``.

    The comparison runs in constant time over the full string, prefix
    included.
    """
    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected.encode(), claimed.encode())


def authenticate(event: InboundEvent, secrets: SecretStore) -> None:
    """Authenticate ``event`` against the secret configured for its source.

    Checks run in order and the first failure is raised. No digest is
    computed unless a secret and a signature are both present.

    Raises
    ------
    UnknownSourceError
        If no secret is configured for ``event.source``.
    MissingSignatureError
        If the event carries no signature.
    InvalidSignatureError
        If the signature does not match the payload.

    """
    secret = secrets.get(event.source)
    if secret is None:
        raise UnknownSourceError.for_source(event.source)

    if not event.signature:
        raise MissingSignatureError.for_source(event.source)

    if not verify_signature(event.payload, event.signature, secret):
        raise InvalidSignatureError.for_source(event.source)
