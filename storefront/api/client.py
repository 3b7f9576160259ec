"""
Authenticated HTTP Client

A single shared ``httpx.AsyncClient`` with two cross-cutting behaviors:

    - Outbound: an async request event hook attaches the current access
      token as a bearer credential on every request
    - Inbound: a 401 on a request that is not flagged ``skip_auth_refresh``
      triggers one refresh-and-replay; if the refresh fails (or the replay
      is rejected again) the session is expired: best-effort server logout,
      token cleared, session-expired listeners notified

At most one retry happens per original request, so repeated 401s never
turn into a refresh storm. Simultaneous 401s from different requests each
run their own refresh.

Usage:
    client = ApiClient("https://api.example.com", token_store)
    response = await client.get("/items")
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

import httpx
from pydantic import ValidationError

from storefront.auth.token_store import TokenStore
from storefront.schemas import AuthResult

logger = logging.getLogger(__name__)

LOGIN_PATH = "/auth/login"
REFRESH_PATH = "/auth/refresh"
LOGOUT_PATH = "/auth/logout"
PROFILE_PATH = "/auth/profile"

SessionExpiredListener = Callable[[], Union[None, Awaitable[None]]]


class ApiClient:
    """
    REST client with bearer authentication and transparent token refresh.

    Attributes:
        token_store: Where the access token is read from and written to
        prefix: Path prefix prepended to every endpoint (e.g. "/api")
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        *,
        prefix: str = "",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token_store = token_store
        self.prefix = prefix
        self._session_expired_listeners: list[SessionExpiredListener] = []
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            event_hooks={"request": [self._attach_token]},
        )

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def on_session_expired(self, listener: SessionExpiredListener) -> None:
        """Register a callback run after a forced logout."""
        self._session_expired_listeners.append(listener)

    # ==========================================================================
    # INTERCEPTORS
    # ==========================================================================

    async def _attach_token(self, request: httpx.Request) -> None:
        token = self.token_store.get()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"

    async def refresh_access_token(self) -> AuthResult:
        """
        Exchange the refresh cookie for a new access token and store it.

        Raises:
            httpx.HTTPError: refresh endpoint rejected the call or was unreachable
            pydantic.ValidationError: response body had no access token
        """
        response = await self._http.post(self.url(REFRESH_PATH), json={})
        response.raise_for_status()
        result = AuthResult.model_validate(response.json())
        self.token_store.set(result.access_token)
        logger.info("Access token refreshed")
        return result

    async def expire_session(self) -> None:
        """Force a logout after the session could not be renewed."""
        logger.warning("Session expired, logging out")
        try:
            await self._http.post(self.url(LOGOUT_PATH), json={})
        except httpx.HTTPError as exc:
            logger.warning(f"Logout call failed during session expiry: {exc}")
        self.token_store.clear()

        for listener in list(self._session_expired_listeners):
            result = listener()
            if inspect.isawaitable(result):
                await result

    # ==========================================================================
    # REQUESTS
    # ==========================================================================

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        skip_auth_refresh: bool = False,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Send a request, refreshing the access token once on a 401.

        Args:
            method: HTTP method
            path: Endpoint path, without the configured prefix
            skip_auth_refresh: Reject immediately on errors (auth endpoints)
            **kwargs: Passed through to httpx (json, params, ...)

        Returns:
            httpx.Response: A successful response

        Raises:
            httpx.HTTPStatusError: The request (or its replay) failed
            httpx.RequestError: Transport failure
        """
        url = self.url(path)
        response = await self._http.request(method, url, **kwargs)
        if response.is_success:
            return response

        if skip_auth_refresh or response.status_code != 401:
            response.raise_for_status()

        logger.info(f"{method} {url} returned 401, refreshing access token")
        try:
            await self.refresh_access_token()
        except (httpx.HTTPError, ValidationError) as exc:
            logger.warning(f"Token refresh failed: {exc}")
            await self.expire_session()
            response.raise_for_status()

        retried = await self._http.request(method, url, **kwargs)
        if retried.status_code == 401:
            await self.expire_session()
        retried.raise_for_status()
        return retried

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)
