"""Category API."""

from storefront.api.client import ApiClient
from storefront.core.errors import translate_errors
from storefront.schemas import Category, CategoryCreate, CategoryUpdate


@translate_errors
async def fetch_categories(client: ApiClient) -> list[Category]:
    response = await client.get("/categories")
    return [Category.model_validate(c) for c in response.json()["categories"]]


@translate_errors
async def create_category(client: ApiClient, category: CategoryCreate) -> Category:
    response = await client.post("/categories", json=category.to_payload())
    return Category.model_validate(response.json()["category"])


@translate_errors
async def update_category(client: ApiClient, category_id: int, category: CategoryUpdate) -> Category:
    response = await client.patch(f"/categories/{category_id}", json=category.to_payload())
    return Category.model_validate(response.json()["category"])


@translate_errors
async def delete_category(client: ApiClient, category_id: int) -> None:
    await client.delete(f"/categories/{category_id}")
