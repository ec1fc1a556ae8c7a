"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import pytest

from pushdeploy.config import ResolvedConfig, resolve_config
from tests.helpers.push_events import SCENARIO_CONFIG, RecordingRunner


@pytest.fixture
def scenario_config() -> ResolvedConfig:
    """Resolve the ``ACME_MAIN`` / ``ACME_SECRET`` configuration."""
    return resolve_config(SCENARIO_CONFIG)


@pytest.fixture
def recording_runner() -> RecordingRunner:
    """Return a runner fake whose commands exit cleanly."""
    return RecordingRunner()
