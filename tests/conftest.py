"""
Shared pytest fixtures and configuration for docspine tests.

This module provides:
- Event bus and structlog reset between tests
- A minimal adapter host for driving adapters without a service
- Connected in-memory adapters and services

Usage:
    Fixtures are auto-discovered by pytest::

        @pytest.mark.asyncio
        async def test_something(service):
            await service.call("create", {"doc": {"title": "x"}})
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Generator

import pytest
import pytest_asyncio
import structlog

from docspine.core.adapters import InMemoryDocumentAdapter
from docspine.core.cache import InMemoryCache
from docspine.core.events import set_event_bus
from docspine.core.events.memory import InMemoryEventBus
from docspine.core.settings import DocSpineSettings
from docspine.framework.service import CrudService


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)
        if "integration" in str(test_path):
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Reset the process-wide event bus and structlog configuration."""
    set_event_bus(None)
    yield
    set_event_bus(None)
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop DOCSPINE_* variables leaking in from the developer's shell."""
    for key in list(os.environ):
        if key.startswith("DOCSPINE_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Adapter Fixtures
# =============================================================================


@dataclass
class FakeHost:
    """Stands in for a service when driving adapters directly."""

    collection: str | None = "posts"
    full_name: str = "v1.posts"


@pytest.fixture
def host() -> FakeHost:
    return FakeHost()


@pytest.fixture
def memory_adapter(host: FakeHost) -> InMemoryDocumentAdapter:
    """Initialized and connected in-memory adapter bound to ``posts``."""
    adapter = InMemoryDocumentAdapter()
    adapter.init(host)
    adapter.connect()
    return adapter


# =============================================================================
# Service Fixtures
# =============================================================================


async def _no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def event_bus() -> InMemoryEventBus:
    return InMemoryEventBus()


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache(default_ttl_seconds=None)


@pytest.fixture
def make_service(event_bus: InMemoryEventBus):
    """Factory for services over a fresh in-memory adapter."""

    def _make(**kwargs) -> CrudService:
        kwargs.setdefault("adapter", InMemoryDocumentAdapter())
        kwargs.setdefault("collection", "posts")
        kwargs.setdefault("version", 1)
        kwargs.setdefault("event_bus", event_bus)
        kwargs.setdefault("settings", DocSpineSettings())
        kwargs.setdefault("sleep", _no_sleep)
        return CrudService("posts", **kwargs)

    return _make


@pytest_asyncio.fixture
async def service(make_service) -> CrudService:
    """Started service over an in-memory adapter."""
    svc = make_service()
    await svc.start()
    return svc
