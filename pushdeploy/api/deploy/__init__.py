"""Webhook resource for push notifications."""

from pushdeploy.api.deploy.resources import DeployResource

__all__ = ["DeployResource"]
