"""
User API

``update_user`` and ``delete_user`` act on the signed-in user (the backend
resolves it from the bearer token); deleting is irreversible.
"""

from typing import Optional

from storefront.api.client import ApiClient
from storefront.core.errors import translate_errors
from storefront.schemas import User, UserCreate, UserUpdate


@translate_errors
async def fetch_users(
    client: ApiClient,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> list[User]:
    params = {}
    if page is not None:
        params["page"] = page
    if page_size is not None:
        params["pageSize"] = page_size
    response = await client.get("/users", params=params)
    return [User.model_validate(u) for u in response.json()["users"]]


@translate_errors
async def fetch_user_by_id(client: ApiClient, user_id: int) -> User:
    response = await client.get(f"/users/{user_id}")
    return User.model_validate(response.json()["user"])


@translate_errors
async def fetch_user_with_relations(client: ApiClient, user_id: int, relations: list[str]) -> User:
    response = await client.get(
        f"/users/{user_id}/relations",
        params={"include": ",".join(relations)},
    )
    return User.model_validate(response.json()["user"])


@translate_errors
async def create_user(client: ApiClient, user: UserCreate) -> User:
    response = await client.post("/users", json=user.to_payload())
    return User.model_validate(response.json()["user"])


@translate_errors
async def register_admin_user(client: ApiClient, user: UserCreate) -> User:
    """Create an administrator; only admins may call this."""
    response = await client.post("/users/admin", json=user.to_payload())
    return User.model_validate(response.json()["user"])


@translate_errors
async def update_user(client: ApiClient, user: UserUpdate) -> User:
    response = await client.patch("/users", json=user.to_payload())
    return User.model_validate(response.json()["user"])


@translate_errors
async def delete_user(client: ApiClient) -> None:
    await client.delete("/users")
