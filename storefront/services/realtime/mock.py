"""
Mock Realtime Service

In-process implementation for development and tests. Events reach it
either from ``emit`` directly or from a hub (the sandbox backend's
notification hub) it attaches to on connect.

A hub is any object with ``attach(token, callback) -> detach`` where
``callback(event, payload)`` is awaited for each push.
"""

import logging
from typing import Any, Callable, Optional, Protocol

from storefront.services.realtime.base import BaseRealtimeService

logger = logging.getLogger(__name__)


class RealtimeHub(Protocol):
    def attach(self, token: str, callback: Callable[..., Any]) -> Callable[[], None]:
        ...


class MockRealtimeService(BaseRealtimeService):
    """Realtime channel delivered in-process."""

    def __init__(self, hub: Optional[RealtimeHub] = None):
        super().__init__()
        self._hub = hub
        self._detach: Optional[Callable[[], None]] = None
        self._connected = False

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self, token: str) -> None:
        if self._connected:
            return
        if self._hub is not None:
            try:
                self._detach = self._hub.attach(token, self.emit)
            except PermissionError as exc:
                raise ConnectionError(f"Realtime hub refused the connection: {exc}") from exc
        self._connected = True
        logger.info("Mock realtime connected")

    async def disconnect(self) -> None:
        if self._detach is not None:
            self._detach()
            self._detach = None
        self._connected = False

    async def emit(self, event: str, payload: Any) -> None:
        """Deliver an event as if it came from the server."""
        if not self._connected:
            logger.debug(f"Dropping {event!r}: mock realtime not connected")
            return
        await self._dispatch(event, payload)
