"""
docspine API -- FastAPI surface for CRUD services.

Usage::

    from fastapi import FastAPI
    from docspine.api import build_router

    app = FastAPI()
    app.include_router(build_router(posts_service), prefix="/posts")

Modules
-------
router      build_router(service) -> APIRouter
errors      docspine errors -> RFC 7807 responses
schemas     ProblemDetail, SuccessResponse, request bodies
"""

from docspine.api.router import build_router

__all__ = ["build_router"]
