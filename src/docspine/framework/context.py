"""Request context handed to every CRUD method."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from docspine.core.entity import generate_uid


@dataclass
class Context:
    """One action invocation.

    Attributes:
        action: Action name (``get``, ``create``...)
        params: Validated action parameters
        meta: Caller metadata (user, tenant...), passed through untouched
        service: Full name of the service handling the request
        request_id: Unique id, used as correlation id of emitted events
    """

    action: str
    params: dict[str, Any] = field(default_factory=dict)
    meta: dict[str, Any] = field(default_factory=dict)
    service: str | None = None
    request_id: str = field(default_factory=generate_uid)
