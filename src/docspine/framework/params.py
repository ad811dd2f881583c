"""Parameter validation for CRUD actions.

Manifesto:
    Actions must validate inputs before executing.  A malformed request has
    to be rejected before it reaches the adapter, so every action declares
    a pydantic schema and :func:`validate_params` turns schema violations
    into docspine ``ValidationError`` objects with per-field details.

Schemas:
    get     ``id``: scalar id or non-empty list of scalar ids
    find    ``conditions?``, ``limit?`` (positive int), ``orderBy?``
    list    no parameters
    create  ``doc``: object
    update  ``id``: scalar id, ``values``: object
    delete  ``id``: scalar id

A scalar id is a ``str``, an ``int`` (``bool`` is rejected) or a ``UUID``;
UUIDs are normalized to their string form.

Tags:
    docspine, framework, params, validation, pydantic

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Annotated, Any
from uuid import UUID

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PositiveInt,
    StrictInt,
    StrictStr,
)
from pydantic import ValidationError as PydanticValidationError

from docspine.core.errors import ValidationError


def _uuid_to_str(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    return value


EntityId = Annotated[StrictStr | StrictInt, BeforeValidator(_uuid_to_str)]
ConditionParam = tuple[StrictStr, StrictStr, Any]


class ActionParams(BaseModel):
    """Base schema: unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GetParams(ActionParams):
    id: EntityId | Annotated[list[EntityId], Field(min_length=1)]


class FindParams(ActionParams):
    conditions: list[ConditionParam] | None = None
    limit: PositiveInt | None = None
    order_by: list[StrictStr] | None = Field(default=None, alias="orderBy")


class ListParams(ActionParams):
    pass


class CreateParams(ActionParams):
    doc: dict[str, Any]


class UpdateParams(ActionParams):
    id: EntityId
    values: dict[str, Any]


class DeleteParams(ActionParams):
    id: EntityId


ACTION_PARAMS: dict[str, type[ActionParams]] = {
    "get": GetParams,
    "find": FindParams,
    "list": ListParams,
    "create": CreateParams,
    "update": UpdateParams,
    "delete": DeleteParams,
}


def _field_path(loc: tuple[Any, ...]) -> str:
    # Union members show up in ``loc`` as type names; keep field names and indexes.
    parts = [str(p) for p in loc if isinstance(p, int) or p in _FIELD_NAMES]
    return ".".join(parts) if parts else ".".join(str(p) for p in loc)


_FIELD_NAMES = {
    name
    for schema in ACTION_PARAMS.values()
    for field_name, info in schema.model_fields.items()
    for name in (field_name, info.alias)
    if name
}


def validate_params(action: str, params: dict[str, Any] | None) -> dict[str, Any]:
    """Validate raw ``params`` of ``action`` and return them as a plain dict.

    Keys use the Python field names (``orderBy`` becomes ``order_by``).

    Raises:
        ValidationError: unknown action, or params that violate the schema
    """
    schema = ACTION_PARAMS.get(action)
    if schema is None:
        raise ValidationError(f"Unknown action: {action}", field="action").with_context(action=action)

    try:
        model = schema.model_validate(params or {})
    except PydanticValidationError as e:
        errors = [
            {"field": _field_path(err["loc"]), "message": err["msg"], "code": err["type"]}
            for err in e.errors()
        ]
        first = errors[0]["field"] if errors else None
        raise ValidationError(
            f"Invalid parameters for action '{action}': {first}",
            field=first,
            errors=errors,
            cause=e,
        ).with_context(action=action) from e

    return model.model_dump()


__all__ = [
    "EntityId",
    "ActionParams",
    "GetParams",
    "FindParams",
    "ListParams",
    "CreateParams",
    "UpdateParams",
    "DeleteParams",
    "ACTION_PARAMS",
    "validate_params",
]
