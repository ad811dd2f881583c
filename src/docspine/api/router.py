"""
CRUD router -- REST surface of a CrudService.

Endpoints:
    GET    /           List the collection
    GET    /{id}       Get one entity (404 when absent)
    POST   /           Create an entity from ``{"doc": {...}}``
    PUT    /{id}       Merge ``{"values": {...}}`` into an entity
    DELETE /{id}       Delete an entity, returning its last snapshot

Every route goes through ``service.call()``, so REST requests get the same
parameter validation, cache invalidation and hooks as any other host.
Errors are returned as RFC 7807 problem details.

Tags:
    docspine, api, crud, rest, fastapi

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from docspine.api.errors import error_response, problem_response
from docspine.api.schemas import CreateRequest, ProblemDetail, SuccessResponse, UpdateRequest
from docspine.core.errors import DocSpineError
from docspine.core.logging import get_logger
from docspine.framework.service import CrudService

logger = get_logger(__name__)

EntityBody = dict[str, Any]

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    422: {"model": ProblemDetail},
    502: {"model": ProblemDetail},
}


def build_router(service: CrudService, *, prefix: str = "") -> APIRouter:
    """Expose ``service`` as REST routes under ``prefix``.

    Usage:
        app = FastAPI()
        app.include_router(build_router(posts), prefix="/posts")
    """
    router = APIRouter(prefix=prefix, tags=[service.full_name])

    async def dispatch(request: Request, action: str, params: dict[str, Any]) -> Any:
        try:
            return await service.call(action, params)
        except DocSpineError as e:
            logger.warning(
                "request_failed",
                service=service.full_name,
                action=action,
                path=request.url.path,
                **e.to_dict(),
            )
            return error_response(e, instance=str(request.url))

    @router.get("/", response_model=SuccessResponse[dict[Any, EntityBody]], responses=ERROR_RESPONSES)
    async def list_entities(request: Request):
        """Return every entity of the collection, keyed by id."""
        result = await dispatch(request, "list", {})
        if isinstance(result, JSONResponse):
            return result
        return {"data": result}

    @router.get(
        "/{entity_id}",
        response_model=SuccessResponse[EntityBody],
        responses={**ERROR_RESPONSES, 404: {"model": ProblemDetail}},
    )
    async def get_entity(request: Request, entity_id: str):
        """Return one entity."""
        result = await dispatch(request, "get", {"id": entity_id})
        if isinstance(result, JSONResponse):
            return result
        if result is None:
            return problem_response(
                status=404,
                title="Entity not found",
                detail=f"No entity with id '{entity_id}' in {service.full_name}",
                instance=str(request.url),
            )
        return {"data": result}

    @router.post(
        "/", status_code=201, response_model=SuccessResponse[EntityBody], responses=ERROR_RESPONSES
    )
    async def create_entity(request: Request, body: CreateRequest):
        """Create an entity; an identity is generated when the document has none."""
        result = await dispatch(request, "create", {"doc": body.doc})
        if isinstance(result, JSONResponse):
            return result
        return {"data": result}

    @router.put("/{entity_id}", response_model=SuccessResponse[EntityBody], responses=ERROR_RESPONSES)
    async def update_entity(request: Request, entity_id: str, body: UpdateRequest):
        """Merge fields into an existing entity."""
        result = await dispatch(request, "update", {"id": entity_id, "values": body.values})
        if isinstance(result, JSONResponse):
            return result
        return {"data": result}

    @router.delete(
        "/{entity_id}",
        response_model=SuccessResponse[EntityBody | None],
        responses=ERROR_RESPONSES,
    )
    async def delete_entity(request: Request, entity_id: str):
        """Delete an entity; ``data`` is null when nothing existed."""
        result = await dispatch(request, "delete", {"id": entity_id})
        if isinstance(result, JSONResponse):
            return result
        return {"data": result}

    return router


__all__ = ["build_router"]
