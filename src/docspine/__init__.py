"""
docspine - Storage-agnostic CRUD services over document stores.

- docspine.core: errors, logging, settings, cache, events, query model, adapters
- docspine.framework: CrudService and its collaborators
- docspine.api: FastAPI router (requires fastapi)
"""

__version__ = "0.1.0"

from docspine.core.adapters import FirestoreAdapter, InMemoryDocumentAdapter, get_adapter  # noqa: E402
from docspine.framework import Context, CrudService, EntityHooks  # noqa: E402

__all__ = [
    "__version__",
    "CrudService",
    "Context",
    "EntityHooks",
    "InMemoryDocumentAdapter",
    "FirestoreAdapter",
    "get_adapter",
]
