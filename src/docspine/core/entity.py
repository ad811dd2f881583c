"""Entity identity normalization.

Services may name their identity field anything (``_id``, ``uuid``,
``slug``...), but adapters only ever see the fixed key ``ID_KEY``.  Before a
document is created it goes through :func:`normalize_entity`, which

1. deep-copies it, so the caller's object is never mutated,
2. generates a globally-unique id when the identity field has no value,
3. moves the value from the service-level field to ``ID_KEY``.

``update`` and ``delete`` operate on caller-supplied identity values and
never pass through here.

Tags:
    docspine, entity, identity, normalization

Doc-Types:
    api-reference
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Callable, Mapping
from typing import Any

ID_KEY = "_id"

UidFactory = Callable[[], str]


def generate_uid() -> str:
    """Return a new random identifier (UUID4, canonical string form)."""
    return str(uuid.uuid4())


def has_identity(value: Any) -> bool:
    """An identity is present unless it is ``None`` or an empty string."""
    return value is not None and value != ""


def normalize_entity(
    doc: Mapping[str, Any],
    id_field: str = ID_KEY,
    uid_factory: UidFactory = generate_uid,
) -> dict[str, Any]:
    """Return a copy of ``doc`` carrying a unique identity under ``ID_KEY``.

    Args:
        doc: Raw input document
        id_field: Service-level name of the identity field
        uid_factory: Generator used when the document has no identity

    Example:
        >>> normalize_entity({"uuid": "a1", "title": "x"}, id_field="uuid")
        {'title': 'x', '_id': 'a1'}
    """
    entity = copy.deepcopy(dict(doc))

    if not has_identity(entity.get(id_field)):
        entity[id_field] = uid_factory()

    if id_field != ID_KEY:
        entity[ID_KEY] = entity.pop(id_field)

    return entity


__all__ = [
    "ID_KEY",
    "UidFactory",
    "generate_uid",
    "has_identity",
    "normalize_entity",
]
