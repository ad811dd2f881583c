"""Document adapters -- one interface, pluggable document stores.

Manifesto:
    A CRUD service must run identically against an in-memory store (dev,
    tests) and Cloud Firestore (production).  Without a common adapter
    interface every service embeds store-specific calls and switching stores
    becomes a rewrite instead of a config change.

    Drivers are **import-guarded**: the Firestore client library is only
    required when a ``FirestoreAdapter`` is initialized::

        pip install docspine[firestore]   # google-cloud-firestore

Architecture::

    DocumentAdapter (base.py)            Protocol: init/connect/disconnect + CRUD
    BaseDocumentAdapter (base.py)        Shared init, find_by_ids, error wrapping
        |-- InMemoryDocumentAdapter      dict-backed (always available)
        |-- FirestoreAdapter             google-cloud-firestore AsyncClient

    AdapterRegistry (registry.py)        name -> adapter class

Modules
-------
base            Adapter protocol + abstract base class
memory          In-memory adapter
firestore       Cloud Firestore adapter (requires google-cloud-firestore)
registry        AdapterRegistry + get_adapter() factory

Tags:
    docspine, adapters, multi-backend, import-guarded, registry-pattern

Doc-Types:
    package-overview, module-index
"""

from .base import AdapterHost, BaseDocumentAdapter, DocumentAdapter
from .firestore import FirestoreAdapter
from .memory import InMemoryDocumentAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter

__all__ = [
    "AdapterHost",
    "DocumentAdapter",
    "BaseDocumentAdapter",
    "InMemoryDocumentAdapter",
    "FirestoreAdapter",
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
]
