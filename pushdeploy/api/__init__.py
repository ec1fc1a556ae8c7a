"""HTTP surface of the deploy listener.

Public API
----------
create_app
    Application factory that registers the probes and, when given a
    resolved configuration, the ``POST /deploy`` webhook.
AppDependencies
    Collaborators passed to :func:`create_app`.
"""

from pushdeploy.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
