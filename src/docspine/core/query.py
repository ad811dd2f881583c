"""Query model shared by the CRUD service and every adapter.

A ``Query`` is a conjunction of ``Condition`` triples, an optional limit and
an optional list of ascending sort keys.  Adapters backed by a real query
engine translate it into native calls; adapters without one (the in-memory
driver) evaluate it with :func:`evaluate` and :func:`apply_query`, which
follow Cloud Firestore semantics:

- a document that lacks a filtered field never matches that condition
- a document that lacks an ordering field is excluded from ordered results
- conditions are applied first, then ordering, then the limit

Result sets are ``dict`` objects keyed by identity.  Consumers that need an
order must not rely on mapping iteration and should rebuild a sequence with
:func:`order_results`.

Tags:
    docspine, query, conditions, ordering, firestore-semantics

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, NamedTuple

from docspine.core.errors import StoreError, ValidationError

Entity = dict[str, Any]
ResultSet = dict[Any, Entity]

_MISSING = object()


class Operator(str, Enum):
    """Comparison operators understood by document stores."""

    LT = "<"
    LTE = "<="
    EQ = "=="
    NEQ = "!="
    GTE = ">="
    GT = ">"
    IN = "in"
    NOT_IN = "not-in"
    ARRAY_CONTAINS = "array-contains"
    ARRAY_CONTAINS_ANY = "array-contains-any"


class Condition(NamedTuple):
    """A ``(field, operator, value)`` filter."""

    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class Query:
    """Conditions (AND-combined), optional positive limit, ascending sort keys."""

    conditions: tuple[Condition, ...] = ()
    limit: int | None = None
    order_by: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.limit is not None and (isinstance(self.limit, bool) or self.limit <= 0):
            raise ValidationError(
                f"limit must be a positive integer, got {self.limit!r}",
                field="limit",
            )

    @classmethod
    def build(
        cls,
        conditions: Iterable[Sequence[Any]] | None = None,
        limit: int | None = None,
        order_by: Iterable[str] | None = None,
    ) -> Query:
        """Build a query from loosely-typed action parameters."""
        built = []
        for raw in conditions or ():
            if len(raw) != 3:
                raise ValidationError(
                    f"a condition is a (field, operator, value) triple, got {raw!r}",
                    field="conditions",
                )
            built.append(Condition(*raw))
        return cls(
            conditions=tuple(built),
            limit=limit,
            order_by=tuple(order_by or ()),
        )

    @property
    def is_empty(self) -> bool:
        return not self.conditions and self.limit is None and not self.order_by


def _lookup(entity: Mapping[str, Any], path: str) -> Any:
    """Resolve a dotted field path, returning ``_MISSING`` when absent."""
    value: Any = entity
    for part in path.split("."):
        if not isinstance(value, Mapping) or part not in value:
            return _MISSING
        value = value[part]
    return value


def _rank(value: Any) -> int:
    # Cross-type ordering: null < bool < number < timestamp < string < bytes < array < map
    if value is None:
        return 0
    if isinstance(value, bool):
        return 1
    if isinstance(value, (int, float)):
        return 2
    if isinstance(value, datetime):
        return 3
    if isinstance(value, str):
        return 4
    if isinstance(value, bytes):
        return 5
    if isinstance(value, (list, tuple)):
        return 6
    if isinstance(value, Mapping):
        return 7
    return 8


def _equal(left: Any, right: Any) -> bool:
    """Equality that never matches across types (``True`` is not ``1``)."""
    if _rank(left) != _rank(right):
        return False
    if isinstance(left, (list, tuple)):
        return len(left) == len(right) and all(_equal(a, b) for a, b in zip(left, right))
    if isinstance(left, Mapping):
        return left.keys() == right.keys() and all(_equal(left[k], right[k]) for k in left)
    return left == right


def _compare(left: Any, op: str, right: Any) -> bool:
    match op:
        case "==":
            return _equal(left, right)
        case "!=":
            return not _equal(left, right)
        case "<" | "<=" | ">" | ">=":
            # Range filters only match values of the same type.
            if _rank(left) != _rank(right):
                return False
            a, b = _order_value(left), _order_value(right)
            return {"<": a < b, "<=": a <= b, ">": a > b, ">=": a >= b}[op]
    raise StoreError(f"Unsupported operator: {op!r}")


def evaluate(condition: Condition, entity: Mapping[str, Any]) -> bool:
    """Return whether ``entity`` satisfies ``condition``."""
    field, op, value = condition
    actual = _lookup(entity, field)
    if actual is _MISSING:
        return False

    if op in ("in", "not-in", "array-contains-any") and not isinstance(value, (list, tuple, set)):
        raise StoreError(f"Operator {op!r} requires a list value, got {value!r}")

    match op:
        case "in":
            return any(_equal(actual, v) for v in value)
        case "not-in":
            return not any(_equal(actual, v) for v in value)
        case "array-contains":
            return isinstance(actual, list) and any(_equal(item, value) for item in actual)
        case "array-contains-any":
            return isinstance(actual, list) and any(
                _equal(item, v) for item in actual for v in value
            )
    return _compare(actual, op, value)


def _order_value(value: Any) -> tuple:
    """A ``(rank, payload)`` key that compares across any two field values."""
    rank = _rank(value)
    if rank == 0:
        return (rank, 0)
    if rank == 3:
        return (rank, value.timestamp())
    if rank == 6:
        return (rank, tuple(_order_value(v) for v in value))
    if rank == 7:
        return (rank, tuple(sorted((str(k), _order_value(v)) for k, v in value.items())))
    if rank == 8:
        return (rank, type(value).__name__, str(value))
    return (rank, value)


def _sort_key(entity: Mapping[str, Any], keys: Sequence[str]) -> tuple:
    return tuple(_order_value(_lookup(entity, key)) for key in keys)


def order_results(result_set: Mapping[Any, Entity], order_by: Sequence[str]) -> list[Entity]:
    """Rebuild an ordered sequence from a result set.

    Entities lacking any of the ``order_by`` fields are dropped, matching
    how ordered queries behave in the store.
    """
    keys = list(order_by)
    entities = list(result_set.values())
    if not keys:
        return entities
    present = [e for e in entities if all(_lookup(e, k) is not _MISSING for k in keys)]
    return sorted(present, key=lambda e: _sort_key(e, keys))


def apply_query(entities: Iterable[Entity], query: Query, id_key: str) -> ResultSet:
    """Filter, order and limit ``entities`` in memory, returning a result set."""
    matched = [e for e in entities if all(evaluate(c, e) for c in query.conditions)]
    if query.order_by:
        matched = order_results({i: e for i, e in enumerate(matched)}, query.order_by)
    if query.limit is not None:
        matched = matched[: query.limit]
    return {entity[id_key]: entity for entity in matched}


__all__ = [
    "Entity",
    "ResultSet",
    "Operator",
    "Condition",
    "Query",
    "evaluate",
    "order_results",
    "apply_query",
]
