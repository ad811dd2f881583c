"""Document adapter registry and factory.

Manifesto:
    Hosts should not hard-code adapter class names.  The registry maps short
    names to adapter classes and ``get_adapter()`` creates an unbound
    instance from keyword arguments, so the choice of store can come from
    configuration.

Features:
    - ``AdapterRegistry`` with pre-registered ``memory`` and ``firestore``
    - ``register()`` for custom / third-party drivers
    - ``get_adapter()`` factory: name + kwargs → adapter

Tags:
    docspine, adapters, registry, factory

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from docspine.core.errors import ConfigurationError

from .base import DocumentAdapter
from .firestore import FirestoreAdapter
from .memory import InMemoryDocumentAdapter


class AdapterRegistry:
    """
    Registry of document adapter classes.

    Pre-registered adapters:
    - ``memory``: :class:`InMemoryDocumentAdapter`
    - ``firestore``: :class:`FirestoreAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DocumentAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["memory"] = InMemoryDocumentAdapter
        self._factories["firestore"] = FirestoreAdapter

    def register(self, name: str, adapter_class: type[DocumentAdapter]) -> None:
        """Register an adapter class under ``name``."""
        self._factories[name.lower()] = adapter_class

    def create(self, name: str, *args: Any, **kwargs: Any) -> DocumentAdapter:
        """Create an adapter by name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigurationError(f"Unknown document adapter: {name}")
        return self._factories[name](*args, **kwargs)

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


adapter_registry = AdapterRegistry()


def get_adapter(name: str, *args: Any, **kwargs: Any) -> DocumentAdapter:
    """
    Get a document adapter by name.

    Usage:
        adapter = get_adapter("memory")
        adapter = get_adapter("firestore", api_key, project_id)
    """
    return adapter_registry.create(name, *args, **kwargs)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
