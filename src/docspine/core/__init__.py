"""docspine core -- storage-agnostic primitives of the CRUD layer.

Manifesto:
    A service that stores documents needs the same foundations no matter
    which database it talks to: a typed error hierarchy, an identity rule
    for entities, a query model, a driver contract, and a way to tell the
    rest of the system that cached reads are stale.  ``docspine.core``
    holds these primitives and nothing service-specific.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Error hierarchy (ConfigurationError, StoreError...)
        query.py           Condition / Query / ResultSet + in-memory evaluation
        entity.py          ID_KEY + normalize_entity()

    Layer 2 -- Storage
        adapters/          DocumentAdapter protocol, memory + Firestore drivers

    Layer 3 -- Cross-Cutting Concerns
        logging.py         Structured logging (structlog)
        settings.py        DocSpineSettings / FirestoreSettings (pydantic-settings)
        cache.py           CacheBackend with InMemory + Redis, clean(pattern)
        events/            EventBus protocol + in-memory backend
"""

from docspine.core.entity import ID_KEY, generate_uid, normalize_entity
from docspine.core.errors import (
    ConfigurationError,
    DocSpineError,
    ErrorCategory,
    ErrorContext,
    MissingApiKeyError,
    MissingCredentialError,
    MissingProjectIdError,
    StoreConnectionError,
    StoreError,
    ValidationError,
)
from docspine.core.query import Condition, Entity, Operator, Query, ResultSet, order_results

__all__ = [
    # Errors
    "ErrorCategory",
    "ErrorContext",
    "DocSpineError",
    "ConfigurationError",
    "MissingCredentialError",
    "MissingApiKeyError",
    "MissingProjectIdError",
    "ValidationError",
    "StoreError",
    "StoreConnectionError",
    # Entities
    "ID_KEY",
    "generate_uid",
    "normalize_entity",
    # Query model
    "Entity",
    "ResultSet",
    "Operator",
    "Condition",
    "Query",
    "order_results",
]
