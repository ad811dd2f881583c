"""
Structured error types for docspine.

Every failure the CRUD layer can surface belongs to one of four families,
each with a different lifetime and handling rule:

- **Configuration errors** are fatal and surface at service construction or
  startup (missing collection, missing adapter, unknown adapter name).
- **Credential errors** are configuration errors raised by a driver whose
  construction-time credentials were not supplied. There is one subclass
  per credential so callers can tell which one is missing.
- **Validation errors** are per-request and recoverable. They are raised
  before any adapter call is made.
- **Store errors** are per-request and opaque. Drivers wrap their native
  exceptions in them, chaining the original as ``cause``.

Manifesto:
    - **Typed hierarchy:** Callers branch on the class, never on messages
    - **Explicit retry semantics:** Only connect failures are retryable
    - **Rich context:** Errors carry collection, service and id metadata
    - **Error chaining:** Native driver exceptions stay reachable as cause

Architecture:
    ::

        DocSpineError  (category, retryable, context, cause)
        ├── ConfigurationError          CONFIG
        │   └── MissingCredentialError  AUTH
        │       ├── MissingApiKeyError
        │       └── MissingProjectIdError
        ├── ValidationError             VALIDATION
        └── StoreError                  STORAGE
            └── StoreConnectionError    (retryable)

Examples:
    >>> error = StoreError("write rejected").with_context(collection="posts")
    >>> error.context.collection
    'posts'
    >>> error.to_dict()["category"]
    'STORAGE'

Tags:
    error-handling, exception-hierarchy, docspine, adapters, validation

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    CONFIG = "CONFIG"             # Missing collection, missing adapter
    AUTH = "AUTH"                 # Missing or rejected credentials
    VALIDATION = "VALIDATION"     # Malformed action parameters
    STORAGE = "STORAGE"           # Backing store failures
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that were set are emitted by :meth:`to_dict`, so the context
    can be splatted straight into a structured log call.

    Attributes:
        service: Full name of the owning service
        collection: Collection the adapter is bound to
        action: Action being executed (``get``, ``create``...)
        entity_id: Identity value involved in the failing call
        request_id: Id of the originating request context
        metadata: Additional key-value pairs
    """

    service: str | None = None
    collection: str | None = None
    action: str | None = None
    entity_id: Any = None
    request_id: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["service", "collection", "action", "entity_id", "request_id"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class DocSpineError(Exception):
    """
    Base exception for all docspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    call sites rarely need to pass either explicitly.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> DocSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise StoreError("Failed").with_context(collection="posts", entity_id="1")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigurationError(DocSpineError):
    """
    Service or adapter is misconfigured.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class MissingCredentialError(ConfigurationError):
    """A required construction-time credential was not supplied to a driver."""

    default_category = ErrorCategory.AUTH
    credential: str = "credential"

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Missing required adapter credential: {self.credential}", **kwargs)


class MissingApiKeyError(MissingCredentialError):
    """The API key (first adapter argument) is missing."""

    credential = "api_key"

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(
            message
            or "missing API key: pass it as the first argument, e.g. FirestoreAdapter(api_key, project_id)",
            **kwargs,
        )


class MissingProjectIdError(MissingCredentialError):
    """The project id (second adapter argument) is missing."""

    credential = "project_id"

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(
            message
            or "missing project id: pass it as the second argument, e.g. FirestoreAdapter(api_key, project_id)",
            **kwargs,
        )


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(DocSpineError):
    """
    Malformed action parameters or entity.

    Never retryable - the request must be fixed.

    Attributes:
        field: Dotted path of the first offending field, if known
        errors: Per-field error records (``{"field", "message", "code"}``)
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.errors = errors or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.errors:
            result["errors"] = self.errors
        return result


# =============================================================================
# STORE ERRORS
# =============================================================================


class StoreError(DocSpineError):
    """Failure raised by an adapter while talking to its backing store."""

    default_category = ErrorCategory.STORAGE
    default_retryable = False


class StoreConnectionError(StoreError):
    """The adapter could not open a handle to its collection."""

    default_retryable = True


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, DocSpineError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, DocSpineError):
        return error.category
    if isinstance(error, (KeyError, AttributeError)):
        return ErrorCategory.CONFIG
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "DocSpineError",
    # Config
    "ConfigurationError",
    "MissingCredentialError",
    "MissingApiKeyError",
    "MissingProjectIdError",
    # Validation
    "ValidationError",
    # Store
    "StoreError",
    "StoreConnectionError",
    # Utilities
    "is_retryable",
    "categorize_error",
]
