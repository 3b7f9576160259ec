"""Menu item API."""

from storefront.api.client import ApiClient
from storefront.core.errors import translate_errors
from storefront.schemas import Item, ItemCreate, ItemUpdate


@translate_errors
async def fetch_items(client: ApiClient) -> list[Item]:
    response = await client.get("/items")
    return [Item.model_validate(i) for i in response.json()["items"]]


@translate_errors
async def fetch_item_by_id(client: ApiClient, item_id: int) -> Item:
    response = await client.get(f"/items/{item_id}")
    return Item.model_validate(response.json()["item"])


@translate_errors
async def create_item(client: ApiClient, item: ItemCreate) -> Item:
    response = await client.post("/items", json=item.to_payload())
    return Item.model_validate(response.json()["item"])


@translate_errors
async def update_item(client: ApiClient, item_id: int, item: ItemUpdate) -> Item:
    response = await client.patch(f"/items/{item_id}", json=item.to_payload())
    return Item.model_validate(response.json()["item"])


@translate_errors
async def delete_item(client: ApiClient, item_id: int) -> None:
    await client.delete(f"/items/{item_id}")
