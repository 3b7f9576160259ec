"""Refresh-and-replay rules of the authenticated client, against httpx.MockTransport."""
from __future__ import annotations

import httpx
import pytest

from storefront.api import auth as auth_api
from storefront.api import items as items_api
from storefront.api.client import ApiClient
from storefront.auth.token_store import MemoryStorage, TokenStore
from storefront.core.errors import ApiFailure


class Backend:
    """Scripted backend recording every call."""

    def __init__(self, valid_token: str = "new", refresh_ok: bool = True, issued_token: str | None = None):
        self.valid_token = valid_token
        self.issued_token = issued_token or valid_token
        self.refresh_ok = refresh_ok
        self.calls: list[tuple[str, str, str | None]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        auth = request.headers.get("Authorization")
        self.calls.append((request.method, request.url.path, auth))
        path = request.url.path

        if path.endswith("/auth/refresh"):
            if not self.refresh_ok:
                return httpx.Response(401, json={"message": "Session expired"})
            return httpx.Response(200, json={"accessToken": self.issued_token})
        if path.endswith("/auth/logout"):
            return httpx.Response(200, json={"message": "Logged out"})
        if path.endswith("/auth/login"):
            return httpx.Response(401, json={"message": "Invalid email or password"})
        if path.endswith("/items"):
            if auth != f"Bearer {self.valid_token}":
                return httpx.Response(401, json={"message": "Invalid or expired token"})
            return httpx.Response(200, json={"items": [
                {"id": 1, "name": "Soda", "unitPrice": 6.0, "categoryId": 1}
            ]})
        if path.endswith("/boom"):
            return httpx.Response(500, json={"message": "Server exploded"})
        return httpx.Response(404, json={"message": "Not found"})

    @property
    def paths(self) -> list[str]:
        return [path for _, path, _ in self.calls]


def make_client(backend: Backend, token: str | None = "old", prefix: str = "") -> ApiClient:
    initial = {"accessToken": token} if token else {}
    store = TokenStore(MemoryStorage(initial))
    return ApiClient("http://api.test", store, prefix=prefix, transport=httpx.MockTransport(backend))


@pytest.mark.asyncio
async def test_bearer_token_is_attached() -> None:
    backend = Backend(valid_token="old")
    async with make_client(backend) as client:
        await client.get("/items")
    assert backend.calls == [("GET", "/items", "Bearer old")]


@pytest.mark.asyncio
async def test_no_header_without_token() -> None:
    backend = Backend()
    async with make_client(backend, token=None) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.get("/items", skip_auth_refresh=True)
    assert backend.calls == [("GET", "/items", None)]


@pytest.mark.asyncio
async def test_single_401_is_refreshed_and_replayed_once() -> None:
    backend = Backend(valid_token="new")
    async with make_client(backend) as client:
        menu = await items_api.fetch_items(client)

        assert [i.name for i in menu] == ["Soda"]
        assert backend.paths == ["/items", "/auth/refresh", "/items"]
        assert backend.calls[-1][2] == "Bearer new"
        assert client.token_store.get() == "new"


@pytest.mark.asyncio
async def test_second_401_logs_out_without_looping() -> None:
    # refresh succeeds but hands out a token the endpoint still rejects
    backend = Backend(valid_token="new", issued_token="still-bad")
    expired = []

    async with make_client(backend) as client:
        client.on_session_expired(lambda: expired.append(True))

        with pytest.raises(ApiFailure) as info:
            await items_api.fetch_items(client)

        assert info.value.status_code == 401
        assert backend.paths == ["/items", "/auth/refresh", "/items", "/auth/logout"]
        assert client.token_store.get() is None
        assert expired == [True]


@pytest.mark.asyncio
async def test_failed_refresh_logs_out_and_rejects_with_original_error() -> None:
    backend = Backend(refresh_ok=False)
    expired = []

    async with make_client(backend) as client:
        client.on_session_expired(lambda: expired.append(True))

        with pytest.raises(ApiFailure) as info:
            await items_api.fetch_items(client)

        assert info.value.message == "Invalid or expired token"
        assert backend.paths == ["/items", "/auth/refresh", "/auth/logout"]
        assert client.token_store.get() is None
        assert expired == [True]


@pytest.mark.asyncio
async def test_skip_auth_refresh_never_refreshes() -> None:
    backend = Backend()
    async with make_client(backend) as client:
        with pytest.raises(ApiFailure) as info:
            await auth_api.login_request(client, "ana@example.com", "wrong-password")

        assert info.value.message == "Invalid email or password"
        assert backend.paths == ["/auth/login"]
        assert client.token_store.get() == "old"


@pytest.mark.asyncio
async def test_non_401_errors_are_not_refreshed() -> None:
    backend = Backend()
    async with make_client(backend) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await client.get("/boom")
    assert backend.paths == ["/boom"]


@pytest.mark.asyncio
async def test_async_session_expired_listener_is_awaited() -> None:
    backend = Backend(refresh_ok=False)
    seen = []

    async def listener() -> None:
        seen.append("expired")

    async with make_client(backend) as client:
        client.on_session_expired(listener)
        with pytest.raises(httpx.HTTPStatusError):
            await client.get("/items")
    assert seen == ["expired"]


@pytest.mark.asyncio
async def test_prefix_is_prepended_to_every_path() -> None:
    backend = Backend(valid_token="new")
    async with make_client(backend, prefix="/api") as client:
        await client.get("/items")
    assert backend.paths == ["/api/items", "/api/auth/refresh", "/api/items"]
