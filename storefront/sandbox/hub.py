"""
Sandbox Notification Hub

Fan-out of realtime events to connected clients, keyed by user id. Clients
attach with their access token (see MockRealtimeService); the sandbox
routes publish ``new_notification`` and ``unread_count`` events here.
"""

import inspect
import logging
from typing import Any, Callable, Optional

from storefront.sandbox.store import SandboxStore
from storefront.schemas import Notification
from storefront.services.realtime.base import NEW_NOTIFICATION, UNREAD_COUNT

logger = logging.getLogger(__name__)

Subscriber = Callable[[str, Any], Any]


class NotificationHub:
    def __init__(self, store: SandboxStore):
        self._store = store
        self._subscribers: dict[int, list[Subscriber]] = {}

    def attach(self, token: str, callback: Subscriber) -> Callable[[], None]:
        """
        Subscribe the owner of ``token``.

        Returns:
            A callable that removes the subscription

        Raises:
            PermissionError: the token is not a valid access token
        """
        user = self._store.user_for_access_token(token)
        if user is None:
            raise PermissionError("invalid or expired token")

        subscribers = self._subscribers.setdefault(user.id, [])
        subscribers.append(callback)
        logger.debug(f"Hub: user #{user.id} attached ({len(subscribers)} connection(s))")

        def detach() -> None:
            if callback in subscribers:
                subscribers.remove(callback)

        return detach

    def connection_count(self, user_id: int) -> int:
        return len(self._subscribers.get(user_id, []))

    async def publish(self, user_id: int, event: str, payload: Any) -> None:
        for callback in list(self._subscribers.get(user_id, [])):
            result = callback(event, payload)
            if inspect.isawaitable(result):
                await result

    async def notify(self, user_id: int, title: str, body: str, data: Optional[dict] = None) -> Notification:
        """Store a notification and push it plus the new unread count."""
        notification = self._store.create_notification(user_id, title, body, data)
        await self.publish(user_id, NEW_NOTIFICATION, notification.model_dump(by_alias=True, mode="json"))
        await self.publish_unread_count(user_id)
        return notification

    async def publish_unread_count(self, user_id: int) -> None:
        await self.publish(user_id, UNREAD_COUNT, {"count": self._store.unread_count(user_id)})
