"""
Auth Session

Application-wide authentication state: the current user and a loading flag,
with login/logout/signup as the only mutating operations.

States:
    RESTORING      initial, a stored token exists but identity is unknown
    AUTHENTICATED  user loaded
    ANONYMOUS      no user

Transitions:
    start + stored token  -> RESTORING -> profile ok   -> AUTHENTICATED
                                       -> profile fails -> token cleared, ANONYMOUS
    start + no token      -> ANONYMOUS
    login ok              -> AUTHENTICATED (token stored)
    logout / forced logout-> ANONYMOUS (token cleared)
"""

import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from storefront.api import auth as auth_api
from storefront.api.client import ApiClient
from storefront.auth.token_store import TokenStore
from storefront.core.errors import StorefrontError
from storefront.schemas import User

logger = logging.getLogger(__name__)

SessionListener = Callable[["AuthSession"], Union[None, Awaitable[None]]]


class SessionState(str, Enum):
    RESTORING = "restoring"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class AuthSession:
    """
    Holds who is signed in.

    Attributes:
        user: The signed-in user, or None
        is_loading: True while a restore, login or signup is in flight
        state: Current SessionState
    """

    def __init__(self, client: ApiClient, token_store: TokenStore):
        self.client = client
        self.token_store = token_store
        self.user: Optional[User] = None
        self.is_loading = False
        self.state = SessionState.RESTORING if token_store.has_token else SessionState.ANONYMOUS
        self._listeners: list[SessionListener] = []

        client.on_session_expired(self._handle_session_expired)

    @property
    def is_authenticated(self) -> bool:
        return self.state == SessionState.AUTHENTICATED

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.is_admin

    def subscribe(self, listener: SessionListener) -> None:
        """Be told about every state change."""
        self._listeners.append(listener)

    async def _notify(self) -> None:
        for listener in list(self._listeners):
            result = listener(self)
            if inspect.isawaitable(result):
                await result

    async def _set(self, state: SessionState, user: Optional[User]) -> None:
        self.state = state
        self.user = user
        await self._notify()

    # ==========================================================================
    # OPERATIONS
    # ==========================================================================

    async def restore(self) -> SessionState:
        """
        Restore identity from a stored token at startup.

        Returns:
            SessionState: AUTHENTICATED or ANONYMOUS, never anything else
        """
        if not self.token_store.has_token:
            await self._set(SessionState.ANONYMOUS, None)
            return self.state

        self.is_loading = True
        self.state = SessionState.RESTORING
        try:
            user = await auth_api.fetch_profile(self.client)
        except StorefrontError as exc:
            logger.info(f"Stored session could not be restored: {exc}")
            self.token_store.clear()
            await self._set(SessionState.ANONYMOUS, None)
        else:
            logger.info(f"Session restored for user #{user.id}")
            await self._set(SessionState.AUTHENTICATED, user)
        finally:
            self.is_loading = False
        return self.state

    async def login(self, email: str, password: str) -> User:
        """
        Sign in with credentials.

        Raises:
            StorefrontError: credentials rejected or backend unreachable
        """
        self.is_loading = True
        try:
            result = await auth_api.login_request(self.client, email, password)
            self.token_store.set(result.access_token)
            user = result.user
            if user is None:
                try:
                    user = await auth_api.fetch_profile(self.client)
                except StorefrontError:
                    self.token_store.clear()
                    raise
            logger.info(f"User #{user.id} signed in")
            await self._set(SessionState.AUTHENTICATED, user)
            return user
        finally:
            self.is_loading = False

    async def logout(self) -> None:
        """Sign out; local state is cleared even if the server call fails."""
        try:
            await auth_api.logout_request(self.client)
        except StorefrontError as exc:
            logger.warning(f"Logout request failed, clearing local session anyway: {exc}")
        finally:
            self.token_store.clear()
            await self._set(SessionState.ANONYMOUS, None)

    async def signup(self, email: str, password: str, name: str, phone: str) -> User:
        """Create a client account; does not sign in."""
        self.is_loading = True
        try:
            user = await auth_api.signup_request(self.client, email, password, name, phone)
            logger.info(f"Account created for user #{user.id}")
            return user
        finally:
            self.is_loading = False

    async def reload_profile(self) -> Optional[User]:
        """Refetch the signed-in user after a profile or address change."""
        if not self.is_authenticated:
            return None
        user = await auth_api.fetch_profile(self.client)
        await self._set(SessionState.AUTHENTICATED, user)
        return user

    async def _handle_session_expired(self) -> None:
        logger.info("Server ended the session")
        await self._set(SessionState.ANONYMOUS, None)
