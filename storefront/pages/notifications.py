"""
Notifications Panel

Loads the signed-in user's notifications and keeps the list and the unread
badge current from realtime events while open.
"""

import logging
from typing import Any

from storefront.api import notifications as notifications_api
from storefront.core.errors import StorefrontError
from storefront.pages.base import BasePage
from storefront.schemas import Notification
from storefront.services.realtime import NEW_NOTIFICATION, UNREAD_COUNT

logger = logging.getLogger(__name__)


class NotificationsPanel(BasePage):
    def __init__(self, storefront):
        super().__init__(storefront)
        self.notifications: list[Notification] = []
        self.unread_count = 0
        self._listening = False

    @property
    def badge(self) -> str:
        if self.unread_count <= 0:
            return ""
        return "9+" if self.unread_count > 9 else str(self.unread_count)

    async def open(self) -> bool:
        if not self.session.is_authenticated:
            return False
        if not self._listening:
            self.storefront.realtime.on(NEW_NOTIFICATION, self._on_new_notification)
            self.storefront.realtime.on(UNREAD_COUNT, self._on_unread_count)
            self._listening = True
        return await self.load()

    def close(self) -> None:
        if self._listening:
            self.storefront.realtime.off(NEW_NOTIFICATION, self._on_new_notification)
            self.storefront.realtime.off(UNREAD_COUNT, self._on_unread_count)
            self._listening = False

    async def load(self) -> bool:
        try:
            self.notifications = await notifications_api.fetch_notifications(self.client)
        except StorefrontError as exc:
            self.report(exc, "Could not load notifications")
            return False
        self.unread_count = sum(1 for n in self.notifications if not n.read)
        return True

    async def mark_as_read(self, notification_id: int) -> bool:
        target = next((n for n in self.notifications if n.id == notification_id), None)
        if target is not None and target.read:
            return True

        try:
            await notifications_api.mark_notification_as_read(self.client, notification_id)
        except StorefrontError as exc:
            self.report(exc, "Could not update the notification")
            return False

        self.notifications = [
            n.model_copy(update={"read": True}) if n.id == notification_id else n
            for n in self.notifications
        ]
        # the hub may already have pushed the new count while the request ran
        self.unread_count = sum(1 for n in self.notifications if not n.read)
        return True

    async def mark_all_as_read(self) -> bool:
        try:
            await notifications_api.mark_all_notifications_as_read(self.client)
        except StorefrontError as exc:
            self.report(exc, "Could not update notifications")
            return False

        self.notifications = [n.model_copy(update={"read": True}) for n in self.notifications]
        self.unread_count = 0
        return True

    def _on_new_notification(self, payload: Any) -> None:
        notification = Notification.model_validate(payload)
        self.notifications.insert(0, notification)
        self.unread_count += 1

    def _on_unread_count(self, payload: Any) -> None:
        self.unread_count = int(payload.get("count", 0))
