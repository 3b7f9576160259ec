"""
Realtime Service Abstract Base Class

Push channel delivering notification events to the signed-in user.
Both the WebSocket and the in-process mock implementation dispatch the same
events with the same payload shapes:

    new_notification  payload is a Notification body
    unread_count      payload is {"count": n}

Design Pattern: Strategy Pattern
    - Development mode uses MockRealtimeService fed by the sandbox
    - Staging/production use WebSocketRealtimeService
"""

import inspect
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

NEW_NOTIFICATION = "new_notification"
UNREAD_COUNT = "unread_count"

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


class BaseRealtimeService(ABC):
    """
    Abstract base class for realtime services.

    Handlers are registered per event name with ``on`` and removed with
    ``off``; implementations call ``_dispatch`` for every received event.
    """

    def __init__(self):
        self._handlers: dict[str, list[EventHandler]] = {}

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the realtime provider."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        pass

    @abstractmethod
    async def connect(self, token: str) -> None:
        """
        Open the channel for the user owning ``token``.

        Raises:
            ConnectionError: the channel could not be opened
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    def on(self, event: str, handler: EventHandler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Optional[EventHandler] = None) -> None:
        """Remove one handler, or every handler of ``event``."""
        if handler is None:
            self._handlers.pop(event, None)
            return
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    async def _dispatch(self, event: str, payload: Any) -> None:
        handlers = list(self._handlers.get(event, []))
        if not handlers:
            logger.debug(f"Realtime event {event!r} has no handlers")
            return
        for handler in handlers:
            try:
                result = handler(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Realtime handler for {event!r} failed")
