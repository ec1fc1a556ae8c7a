"""Unit tests for push payload decoding."""

from __future__ import annotations

import pytest

from pushdeploy.errors import MalformedEventError
from pushdeploy.events import parse_push_event
from tests.helpers.push_events import build_push_payload


def test_parse_lowercases_source_and_keeps_ref() -> None:
    """The source is lower-cased; the ref is kept verbatim."""
    payload = build_push_payload("AcMe", "refs/heads/Main")

    event = parse_push_event(payload, "sha256=abc")

    assert event.source == "acme"
    assert event.ref == "refs/heads/Main"
    assert event.signature == "sha256=abc"


def test_parse_keeps_raw_payload_bytes() -> None:
    """The exact body is retained for signature verification."""
    payload = b'{ "ref" : "refs/heads/main",  "repository": {"name": "acme"} }'

    event = parse_push_event(payload, None)

    assert event.payload is payload
    assert event.signature is None


def test_payload_is_not_in_repr() -> None:
    """Raw payloads are kept out of the event representation."""
    event = parse_push_event(build_push_payload("acme", "refs/heads/main"), None)
    assert "payload" not in repr(event)


@pytest.mark.parametrize(
    "payload",
    [
        b"",
        b"not json",
        b"[]",
        b'{"ref": "refs/heads/main"}',
        b'{"repository": {"name": "acme"}}',
        b'{"ref": "refs/heads/main", "repository": {}}',
        b'{"ref": 3, "repository": {"name": "acme"}}',
        b'{"ref": "refs/heads/main", "repository": {"name": null}}',
    ],
)
def test_malformed_payloads_raise(payload: bytes) -> None:
    """Bodies without a string repository name and ref are malformed."""
    with pytest.raises(MalformedEventError):
        parse_push_event(payload, None)
