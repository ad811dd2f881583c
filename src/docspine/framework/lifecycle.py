"""Connection lifecycle of a CRUD service.

States::

    UNCONFIGURED --initialize()--> INITIALIZED --start()--> CONNECTED
                                                             |   ^
                                                       stop()|   |start()
                                                             v   |
                                                          DISCONNECTED

``start()`` retries ``adapter.connect()`` forever with a fixed delay.  There
is no backoff growth and no attempt cap: a service that cannot reach its
store never finishes starting.  Cancelling the task that awaits ``start()``
is the only way out.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

from docspine.core.adapters.base import AdapterHost, DocumentAdapter
from docspine.core.errors import ConfigurationError
from docspine.core.logging import get_logger

logger = get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class LifecycleState(str, Enum):
    UNCONFIGURED = "unconfigured"
    INITIALIZED = "initialized"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class ConnectionLifecycle:
    """Drives ``init``/``connect``/``disconnect`` of one adapter."""

    def __init__(
        self,
        adapter: DocumentAdapter | None,
        *,
        reconnect_delay: float = 1.0,
        sleep: Sleep = asyncio.sleep,
    ):
        self.adapter = adapter
        self.reconnect_delay = reconnect_delay
        self.state = LifecycleState.UNCONFIGURED
        self.attempts = 0
        self._sleep = sleep

    def initialize(self, service: AdapterHost) -> None:
        """Bind the adapter to ``service``; a missing adapter is reported by ``start``."""
        if self.adapter is None:
            return
        self.adapter.init(service)
        self.state = LifecycleState.INITIALIZED

    async def start(self) -> None:
        """Connect, retrying until the adapter accepts.

        Raises:
            ConfigurationError: no adapter was configured
        """
        if self.adapter is None:
            raise ConfigurationError("no adapter set: pass a document adapter to the service")

        self.attempts = 0
        while True:
            self.attempts += 1
            try:
                self.adapter.connect()
            except Exception as e:
                logger.error(
                    "connection_error",
                    attempt=self.attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                await self._sleep(self.reconnect_delay)
                logger.warning(
                    "reconnecting",
                    attempt=self.attempts + 1,
                    delay_seconds=self.reconnect_delay,
                )
                continue

            self.state = LifecycleState.CONNECTED
            logger.info("connected", attempts=self.attempts)
            return

    async def stop(self) -> None:
        """Disconnect; no-op without an adapter."""
        if self.adapter is None:
            return
        self.adapter.disconnect()
        self.state = LifecycleState.DISCONNECTED
        logger.info("disconnected")


__all__ = [
    "LifecycleState",
    "ConnectionLifecycle",
]
