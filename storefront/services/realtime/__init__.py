"""
Realtime Service Factory

Returns the mock or the WebSocket realtime service based on ENV_MODE.

Usage:
    from storefront.services.realtime import get_realtime_service

    realtime = get_realtime_service()
    realtime.on("new_notification", handler)
    await realtime.connect(token)
"""

import logging
from typing import Optional

from storefront.core.config import Settings, get_settings
from storefront.services.realtime.base import (
    BaseRealtimeService,
    NEW_NOTIFICATION,
    UNREAD_COUNT,
)
from storefront.services.realtime.mock import MockRealtimeService, RealtimeHub
from storefront.services.realtime.websocket import WebSocketRealtimeService

logger = logging.getLogger(__name__)


def get_realtime_service(
    settings: Optional[Settings] = None,
    hub: Optional[RealtimeHub] = None,
) -> BaseRealtimeService:
    """
    Build the realtime service for the current environment.

    Each Storefront owns its own channel, so instances are not cached.

    Args:
        settings: Settings to use (defaults to the cached settings)
        hub: In-process hub feeding the mock service in development mode

    Returns:
        BaseRealtimeService: Configured realtime service
    """
    settings = settings or get_settings()

    if settings.use_sandbox:
        logger.info("Realtime Service: Using MockRealtimeService (development mode)")
        return MockRealtimeService(hub=hub)

    logger.info(
        f"Realtime Service: Using WebSocketRealtimeService "
        f"({settings.env_mode.value} mode)"
    )
    return WebSocketRealtimeService(
        settings.resolved_realtime_url,
        heartbeat=settings.realtime_heartbeat,
    )


__all__ = [
    "get_realtime_service",
    "BaseRealtimeService",
    "MockRealtimeService",
    "WebSocketRealtimeService",
    "NEW_NOTIFICATION",
    "UNREAD_COUNT",
]
