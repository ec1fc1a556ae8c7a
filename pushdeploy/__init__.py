"""Push-to-deploy webhook listener.

Authenticates repository push notifications with per-repository HMAC
secrets and runs the deploy command configured for the pushed branch.
"""

from __future__ import annotations

from pushdeploy.config import DeployTable, SecretStore, resolve_config
from pushdeploy.dispatch import resolve_action
from pushdeploy.service import DeployService, DeployServiceDependencies
from pushdeploy.signature import authenticate, compute_signature, verify_signature

__all__ = [
    "DeployService",
    "DeployServiceDependencies",
    "DeployTable",
    "SecretStore",
    "authenticate",
    "compute_signature",
    "resolve_action",
    "resolve_config",
    "verify_signature",
]
