"""docspine framework -- the CRUD service built on the core primitives.

Modules
-------
context     Context -- one action invocation (params, meta, request id)
params      pydantic schemas per action + validate_params()
notify      ChangeNotifier -- cache invalidation and lifecycle hooks
lifecycle   ConnectionLifecycle -- init / connect with retry / disconnect
service     CrudService -- methods, actions, call()

Tags:
    docspine, framework, crud

Doc-Types:
    package-overview, module-index
"""

from docspine.framework.context import Context
from docspine.framework.lifecycle import ConnectionLifecycle, LifecycleState
from docspine.framework.notify import ChangeNotifier, ChangeType, EntityHooks
from docspine.framework.params import validate_params
from docspine.framework.service import CrudService

__all__ = [
    "Context",
    "validate_params",
    "ChangeType",
    "EntityHooks",
    "ChangeNotifier",
    "LifecycleState",
    "ConnectionLifecycle",
    "CrudService",
]
