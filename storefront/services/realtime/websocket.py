"""
WebSocket Realtime Service

Production implementation on an aiohttp WebSocket. The server sends JSON
text frames shaped ``{"type": <event>, "payload": {...}}``; the access token
travels as the ``token`` query parameter.
"""

import asyncio
import json
import logging
from typing import Optional

import aiohttp

from storefront.services.realtime.base import BaseRealtimeService

logger = logging.getLogger(__name__)


class WebSocketRealtimeService(BaseRealtimeService):
    """Realtime notifications over an aiohttp WebSocket."""

    def __init__(self, url: str, heartbeat: float = 30.0):
        super().__init__()
        self.url = url
        self.heartbeat = heartbeat
        self._session: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._reader: Optional[asyncio.Task] = None

    @property
    def provider_name(self) -> str:
        return "websocket"

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and not self._ws.closed

    async def connect(self, token: str) -> None:
        if self.is_connected:
            return
        # the server may have dropped a previous connection
        await self._release()

        self._session = aiohttp.ClientSession()
        try:
            self._ws = await self._session.ws_connect(
                self.url,
                params={"token": token},
                heartbeat=self.heartbeat,
            )
        except aiohttp.ClientError as exc:
            await self._session.close()
            self._session = None
            raise ConnectionError(f"Realtime connection to {self.url} failed: {exc}") from exc

        logger.info(f"Realtime connected ({self.url})")
        self._reader = asyncio.create_task(self._read_loop())

    async def _read_loop(self) -> None:
        assert self._ws is not None
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                try:
                    frame = json.loads(msg.data)
                except ValueError:
                    logger.warning(f"Ignoring malformed realtime frame: {msg.data[:80]!r}")
                    continue
                if not isinstance(frame, dict) or "type" not in frame:
                    logger.warning("Ignoring realtime frame without a type")
                    continue
                await self._dispatch(frame["type"], frame.get("payload"))
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.error(f"Realtime connection error: {self._ws.exception()}")
                break
        logger.info("Realtime disconnected")

    async def disconnect(self) -> None:
        await self._release()

    async def _release(self) -> None:
        """Stop the reader and close the socket and HTTP session, if any."""
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        if self._session is not None:
            await self._session.close()
            self._session = None
