"""
Auth API

Login, refresh, logout, signup and profile fetch. Every call here is sent
with ``skip_auth_refresh`` so a failing auth endpoint can never trigger the
refresh branch it is part of.
"""

from storefront.api.client import ApiClient, LOGIN_PATH, LOGOUT_PATH, PROFILE_PATH
from storefront.core.errors import translate_errors
from storefront.schemas import AuthResult, User, UserCreate


@translate_errors
async def login_request(client: ApiClient, email: str, password: str) -> AuthResult:
    response = await client.post(
        LOGIN_PATH,
        json={"email": email, "password": password},
        skip_auth_refresh=True,
    )
    return AuthResult.model_validate(response.json())


@translate_errors
async def refresh_request(client: ApiClient) -> AuthResult:
    return await client.refresh_access_token()


@translate_errors
async def logout_request(client: ApiClient) -> None:
    await client.post(LOGOUT_PATH, json={}, skip_auth_refresh=True)


@translate_errors
async def signup_request(client: ApiClient, email: str, password: str, name: str, phone: str) -> User:
    payload = UserCreate(email=email, password=password, name=name, phone=phone)
    response = await client.post("/users", json=payload.to_payload(), skip_auth_refresh=True)
    return User.model_validate(response.json()["user"])


@translate_errors
async def fetch_profile(client: ApiClient) -> User:
    """Fetch the user owning the stored token (session restore)."""
    response = await client.get(PROFILE_PATH, skip_auth_refresh=True)
    return User.model_validate(response.json()["user"])
