"""
Error mapping -- docspine errors to RFC 7807 responses.
"""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from docspine.api.schemas import ErrorDetail, ProblemDetail
from docspine.core.errors import DocSpineError, ErrorCategory, ValidationError

# ── Error category → HTTP status mapping ─────────────────────────────────

CATEGORY_TO_STATUS: dict[ErrorCategory, int] = {
    ErrorCategory.VALIDATION: 422,
    ErrorCategory.CONFIG: 500,
    ErrorCategory.AUTH: 500,
    ErrorCategory.STORAGE: 502,
    ErrorCategory.INTERNAL: 500,
}

CATEGORY_TO_TITLE: dict[ErrorCategory, str] = {
    ErrorCategory.VALIDATION: "Validation failed",
    ErrorCategory.CONFIG: "Service misconfigured",
    ErrorCategory.AUTH: "Service misconfigured",
    ErrorCategory.STORAGE: "Document store error",
    ErrorCategory.INTERNAL: "Internal Server Error",
}


def status_for_error(error: DocSpineError) -> int:
    """Resolve an error's category to an HTTP status, defaulting to 500."""
    return CATEGORY_TO_STATUS.get(error.category, 500)


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
    )
    if errors:
        body.errors = [ErrorDetail(**e) for e in errors]
    return JSONResponse(status_code=status, content=body.model_dump())


def error_response(error: DocSpineError, instance: str = "") -> JSONResponse:
    """Convert a docspine error into a Problem Details response."""
    return problem_response(
        status=status_for_error(error),
        title=CATEGORY_TO_TITLE.get(error.category, "Internal Server Error"),
        detail=error.message,
        instance=instance,
        errors=error.errors if isinstance(error, ValidationError) else None,
    )
