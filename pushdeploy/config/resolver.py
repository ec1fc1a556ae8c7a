"""Build the deploy table and secret store from flat configuration.

``resolve_config`` walks the mapping once, classifies each key with
:func:`pushdeploy.config.keys.parse_config_key` and collects rules and
secrets into read-only structures that request handlers share without
locking.

Usage
-----
>>> resolved = resolve_config({"ACME_MAIN": "deploy.sh", "ACME_SECRET": "s3cr3t"})
>>> resolved.table.resolve("acme", "refs/heads/main")
'deploy.sh'
>>> resolved.secrets.get("acme") is not None
True

"""

from __future__ import annotations

import dataclasses as dc
import types
import typing as typ

import msgspec

from pushdeploy.config.keys import KeyKind, ParsedKey, parse_config_key
from pushdeploy.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    import collections.abc as cabc

__all__ = ["DeployTable", "ResolvedConfig", "SecretStore", "resolve_config"]

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class DeployTable:
    """Read-only mapping of source to ref to deploy action."""

    rules: cabc.Mapping[str, cabc.Mapping[str, str]] = dc.field(
        default_factory=lambda: types.MappingProxyType({})
    )

    @classmethod
    def from_dict(cls, rules: dict[str, dict[str, str]]) -> DeployTable:
        """Freeze a nested dict into a table."""
        frozen = {
            source: types.MappingProxyType(dict(refs))
            for source, refs in rules.items()
        }
        return cls(rules=types.MappingProxyType(frozen))

    def resolve(self, source: str, ref: str) -> str | None:
        """Return the action bound to ``(source, ref)`` or ``None``."""
        refs = self.rules.get(source)
        if refs is None:
            return None
        return refs.get(ref)

    def as_dict(self) -> dict[str, dict[str, str]]:
        """Return a mutable copy of the rules."""
        return {source: dict(refs) for source, refs in self.rules.items()}

    def dump(self) -> str:
        """Render the table as JSON for operator diagnostics."""
        return msgspec.json.encode(self.as_dict()).decode()

    def __len__(self) -> int:
        """Return the number of (source, ref) rules."""
        return sum(len(refs) for refs in self.rules.values())


class SecretStore:
    """Lookup of shared secrets by lower-cased source name.

    Values never appear in ``repr`` output; only the configured source
    names are shown.
    """

    __slots__ = ("_secrets",)

    def __init__(self, secrets: cabc.Mapping[str, str] | None = None) -> None:
        """Store a copy of ``secrets``, discarding empty values."""
        self._secrets: cabc.Mapping[str, str] = types.MappingProxyType(
            {source: value for source, value in (secrets or {}).items() if value}
        )

    def get(self, source: str) -> str | None:
        """Return the secret for ``source`` or ``None`` when absent."""
        return self._secrets.get(source)

    def __call__(self, source: str) -> str | None:
        """Alias for :meth:`get`, so the store can be used as a function."""
        return self.get(source)

    def __contains__(self, source: object) -> bool:
        """Return whether ``source`` has a usable secret."""
        return source in self._secrets

    def sources(self) -> frozenset[str]:
        """Return the set of authenticatable sources."""
        return frozenset(self._secrets)

    def __eq__(self, other: object) -> bool:
        """Compare by content."""
        if not isinstance(other, SecretStore):
            return NotImplemented
        return dict(self._secrets) == dict(other._secrets)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        """Return a representation listing sources only."""
        return f"SecretStore(sources={sorted(self._secrets)!r})"


@dc.dataclass(frozen=True, slots=True)
class ResolvedConfig:
    """Deploy table and secret store derived from one configuration mapping."""

    table: DeployTable
    secrets: SecretStore
    dropped: tuple[ParsedKey, ...] = ()


def resolve_config(config: cabc.Mapping[str, str]) -> ResolvedConfig:
    """Interpret a flat key/value mapping.

    Rule keys that map to the same (source, ref) overwrite one another in
    iteration order. Malformed keys are recorded in ``dropped`` and
    otherwise ignored; this function never raises for bad configuration.

    Parameters
    ----------
    config
        Environment-style mapping of string keys to string values.

    Returns
    -------
    ResolvedConfig
        Immutable table and secret store.

    """
    rules: dict[str, dict[str, str]] = {}
    secrets: dict[str, str] = {}
    dropped: list[ParsedKey] = []

    for key, value in config.items():
        parsed = parse_config_key(key)
        match parsed.kind:
            case KeyKind.CONTROL:
                continue
            case KeyKind.SECRET:
                secrets[typ.cast("str", parsed.source)] = value
            case KeyKind.RULE:
                source = typ.cast("str", parsed.source)
                ref = typ.cast("str", parsed.ref)
                rules.setdefault(source, {})[ref] = value
            case KeyKind.DROPPED:
                log_debug(
                    logger,
                    "Ignoring configuration key %r (%s)",
                    key,
                    parsed.reason,
                )
                dropped.append(parsed)

    return ResolvedConfig(
        table=DeployTable.from_dict(rules),
        secrets=SecretStore(secrets),
        dropped=tuple(dropped),
    )
