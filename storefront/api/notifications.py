"""Notification API: listing and read receipts."""

from storefront.api.client import ApiClient
from storefront.core.errors import translate_errors
from storefront.schemas import Notification


@translate_errors
async def fetch_notifications(client: ApiClient) -> list[Notification]:
    response = await client.get("/notifications")
    return [Notification.model_validate(n) for n in response.json()["notifications"]]


@translate_errors
async def mark_notification_as_read(client: ApiClient, notification_id: int) -> dict:
    response = await client.post("/notifications/read", json={"id": notification_id})
    return response.json()


@translate_errors
async def mark_all_notifications_as_read(client: ApiClient) -> dict:
    response = await client.post("/notifications/read-all")
    return response.json()
