"""
API schemas -- success envelope and RFC 7807 errors.

Every route returns either :class:`SuccessResponse` (200/201) or
:class:`ProblemDetail` (4xx/5xx).

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


# ── RFC 7807 Problem Detail ─────────────────────────────────────────────


class ErrorDetail(BaseModel):
    """Field-level error detail."""

    code: str = Field(description="Machine-readable error code (e.g., 'missing', 'int_type')")
    message: str = Field(description="Human-readable error description")
    field: str | None = Field(default=None, description="Field path if error is field-specific")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Error statuses:
        - 404: Entity does not exist
        - 422: Invalid action parameters or entity
        - 500: Service misconfigured
        - 502: Document store failure

    Example:
        {
            "type": "about:blank",
            "title": "Entity not found",
            "status": 404,
            "detail": "No entity with id 'abc-123' in v1.posts",
            "instance": "/posts/abc-123",
            "errors": []
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(
        default_factory=list,
        description="List of field-level error details",
    )


# ── Success Envelope ─────────────────────────────────────────────────────


class SuccessResponse(BaseModel, Generic[T]):
    """Standard success envelope."""

    data: T = Field(description="Response payload (type varies by route)")


# ── Request Bodies ───────────────────────────────────────────────────────


class CreateRequest(BaseModel):
    """Body of ``POST /``."""

    doc: dict[str, Any] = Field(..., description="Document to create; the identity field is optional")


class UpdateRequest(BaseModel):
    """Body of ``PUT /{id}``."""

    values: dict[str, Any] = Field(..., description="Fields to merge into the entity")
