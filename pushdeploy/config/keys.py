"""Classification of flat configuration keys.

Every key in the configuration mapping is one of:

- the reserved control key ``PORT``;
- a secret key ``<SOURCE>_SECRET``;
- a deploy-rule key ``<SOURCE>_<BRANCH>``;
- something malformed, which is dropped.

Rule keys are split on ``_``; the first segment names the source and the
second names the branch. Any further segments are ignored, so branch names
cannot contain ``_``.

Examples
--------
>>> parse_config_key("ACME_MAIN").ref
'refs/heads/main'
>>> parse_config_key("ACME_SECRET").source
'acme'
>>> parse_config_key("PATH").kind
<KeyKind.DROPPED: 'dropped'>

"""

from __future__ import annotations

import dataclasses as dc
import enum

CONTROL_PORT_KEY = "PORT"
SECRET_SUFFIX = "_SECRET"
KEY_SEPARATOR = "_"
BRANCH_REF_PREFIX = "refs/heads/"


class KeyKind(enum.StrEnum):
    """How a configuration key is interpreted."""

    CONTROL = "control"
    SECRET = "secret"
    RULE = "rule"
    DROPPED = "dropped"


class DropReason(enum.StrEnum):
    """Why a configuration key was ignored."""

    EMPTY_SECRET_SOURCE = "empty_secret_source"
    NO_SEPARATOR = "no_separator"
    EMPTY_SOURCE = "empty_source"
    EMPTY_BRANCH = "empty_branch"


@dc.dataclass(frozen=True, slots=True)
class ParsedKey:
    """Structured interpretation of a single configuration key.

    Attributes
    ----------
    key
        The key exactly as it appeared in the configuration.
    kind
        Classification of the key.
    source
        Lower-cased source name for secret and rule keys.
    ref
        Fully-qualified branch ref for rule keys.
    reason
        Why the key was dropped, for ``KeyKind.DROPPED`` only.

    """

    key: str
    kind: KeyKind
    source: str | None = None
    ref: str | None = None
    reason: DropReason | None = None


def branch_ref(branch: str) -> str:
    """Return the lower-cased ``refs/heads/`` ref for ``branch``."""
    return f"{BRANCH_REF_PREFIX}{branch.lower()}"


def _dropped(key: str, reason: DropReason) -> ParsedKey:
    return ParsedKey(key=key, kind=KeyKind.DROPPED, reason=reason)


def _parse_rule_key(key: str) -> ParsedKey:
    segments = key.split(KEY_SEPARATOR)
    if len(segments) < 2:  # noqa: PLR2004 - source and branch
        return _dropped(key, DropReason.NO_SEPARATOR)

    source, branch = segments[0], segments[1]
    if not source:
        return _dropped(key, DropReason.EMPTY_SOURCE)
    if not branch:
        return _dropped(key, DropReason.EMPTY_BRANCH)

    return ParsedKey(
        key=key,
        kind=KeyKind.RULE,
        source=source.lower(),
        ref=branch_ref(branch),
    )


def parse_config_key(key: str) -> ParsedKey:
    """Classify ``key`` according to the keep/drop policy.

    Parameters
    ----------
    key
        Raw configuration key.

    Returns
    -------
    ParsedKey
        The classification. Malformed keys are returned as
        ``KeyKind.DROPPED`` rather than raising.

    """
    if key == CONTROL_PORT_KEY:
        return ParsedKey(key=key, kind=KeyKind.CONTROL)

    if key.endswith(SECRET_SUFFIX):
        prefix = key[: -len(SECRET_SUFFIX)]
        if not prefix:
            return _dropped(key, DropReason.EMPTY_SECRET_SOURCE)
        return ParsedKey(key=key, kind=KeyKind.SECRET, source=prefix.lower())

    return _parse_rule_key(key)


__all__ = [
    "BRANCH_REF_PREFIX",
    "CONTROL_PORT_KEY",
    "KEY_SEPARATOR",
    "SECRET_SUFFIX",
    "DropReason",
    "KeyKind",
    "ParsedKey",
    "branch_ref",
    "parse_config_key",
]
