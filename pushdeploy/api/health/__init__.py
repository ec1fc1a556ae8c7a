"""Probe resources for the deploy listener."""

from pushdeploy.api.health.resources import HealthResource, ReadyResource

__all__ = ["HealthResource", "ReadyResource"]
