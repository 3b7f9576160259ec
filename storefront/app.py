"""
Storefront Application Container

Wires the shared pieces every page needs: settings, token store, API
client, auth session, cart, toaster, navigator and realtime service.

In development mode the API client talks to an in-process sandbox backend
through httpx.ASGITransport and realtime events come from the sandbox hub;
otherwise the client targets API_BASE_URL and realtime uses WebSockets.

Usage:
    async with create_storefront() as storefront:
        await storefront.session.login("user@example.com", "secret")
        menu = MenuPage(storefront)
        await menu.load()
"""

import logging
from typing import Any, Callable, Optional

import httpx

from storefront.api.client import ApiClient
from storefront.auth.session import AuthSession, SessionState
from storefront.auth.token_store import BaseStorage, FileStorage, TokenStore
from storefront.core.config import Settings, get_settings
from storefront.sandbox import Sandbox, create_sandbox
from storefront.services.cart import Cart
from storefront.services.realtime import BaseRealtimeService, get_realtime_service
from storefront.ui import navigation
from storefront.ui.navigation import Navigator
from storefront.ui.toasts import Toast, Toaster

logger = logging.getLogger(__name__)


class Storefront:
    """
    One running storefront: a single user-facing session.

    Attributes:
        settings: Active settings
        client: Shared authenticated API client
        session: Who is signed in
        cart: Transient shopping cart
        toaster: Outcome messages shown to the user
        navigator: Current page path
        realtime: Push channel for notifications
        sandbox: In-process backend (development mode only)
    """

    def __init__(
        self,
        settings: Settings,
        client: ApiClient,
        token_store: TokenStore,
        realtime: BaseRealtimeService,
        sandbox: Optional[Sandbox] = None,
        toast_sink: Optional[Callable[[Toast], None]] = None,
    ):
        self.settings = settings
        self.client = client
        self.token_store = token_store
        self.realtime = realtime
        self.sandbox = sandbox

        self.session = AuthSession(client, token_store)
        self.cart = Cart()
        self.toaster = Toaster(sink=toast_sink)
        self.navigator = Navigator()

        client.on_session_expired(self._handle_session_expired)
        self.session.subscribe(self._sync_realtime)

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    async def start(self) -> SessionState:
        """Restore a stored session; connects realtime when signed in."""
        logger.info(f"Starting {self.settings.app_name} ({self.settings.env_mode.value} mode)")
        if not self.settings.use_sandbox:
            missing = self.settings.validate_production_config()
            if missing:
                logger.warning(f"⚠️ Missing {self.settings.env_mode.value} config: {missing}")
        return await self.session.restore()

    async def close(self) -> None:
        await self.realtime.disconnect()
        await self.client.aclose()

    async def __aenter__(self) -> "Storefront":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def format_price(self, amount: float) -> str:
        return f"{self.settings.currency_symbol} {amount:.2f}"

    # ==========================================================================
    # LISTENERS
    # ==========================================================================

    async def _sync_realtime(self, session: AuthSession) -> None:
        if session.is_authenticated and not self.realtime.is_connected:
            token = self.token_store.get()
            if not token:
                return
            try:
                await self.realtime.connect(token)
            except ConnectionError as exc:
                logger.warning(f"Realtime unavailable: {exc}")
        elif session.state == SessionState.ANONYMOUS and self.realtime.is_connected:
            await self.realtime.disconnect()

    async def _handle_session_expired(self) -> None:
        self.toaster.error("Session expired", "Please sign in again")
        self.navigator.navigate(navigation.AUTH)


def create_storefront(
    settings: Optional[Settings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    storage: Optional[BaseStorage] = None,
    toast_sink: Optional[Callable[[Toast], None]] = None,
) -> Storefront:
    """
    Build a Storefront for the configured environment.

    Args:
        settings: Settings to use (defaults to the cached settings)
        transport: httpx transport override (tests); disables the sandbox
        storage: Token storage override; defaults to the storage file
        toast_sink: Called with every toast as it is shown

    Returns:
        Storefront: Ready to ``start()``
    """
    settings = settings or get_settings()

    sandbox = None
    if transport is None and settings.use_sandbox:
        sandbox = create_sandbox(settings)
        transport = sandbox.transport()
        logger.info("API Client: Using in-process sandbox backend (development mode)")
    else:
        logger.info(f"API Client: Using {settings.base_url}{settings.api_prefix}")

    if storage is None:
        storage = FileStorage(settings.storage_path, lock_timeout=settings.storage_lock_timeout)
    token_store = TokenStore(storage, key=settings.token_storage_key)

    client = ApiClient(
        settings.base_url,
        token_store,
        prefix=settings.api_prefix,
        timeout=settings.request_timeout,
        transport=transport,
    )
    realtime = get_realtime_service(settings, hub=sandbox.hub if sandbox else None)

    return Storefront(settings, client, token_store, realtime, sandbox, toast_sink)
