"""
Order API

Listings are paginated (``{"data": [...], "meta": {"total": n}}``); single
orders come wrapped as ``{"order": {...}}``.
"""

from typing import Optional

from storefront.api.client import ApiClient
from storefront.core.errors import translate_errors
from storefront.schemas import CreateOrderRequest, Order, Page, UpdateOrderRequest


def _page_params(page: Optional[int], page_size: Optional[int]) -> dict[str, int]:
    params = {}
    if page is not None:
        params["page"] = page
    if page_size is not None:
        params["pageSize"] = page_size
    return params


@translate_errors
async def fetch_all_orders(
    client: ApiClient,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Page[Order]:
    response = await client.get("/orders", params=_page_params(page, page_size))
    return Page[Order].model_validate(response.json())


@translate_errors
async def fetch_order_by_id(client: ApiClient, order_id: int) -> Order:
    response = await client.get(f"/orders/{order_id}")
    return Order.model_validate(response.json()["order"])


@translate_errors
async def fetch_orders_by_client_id(
    client: ApiClient,
    client_id: int,
    page: Optional[int] = None,
    page_size: Optional[int] = None,
) -> Page[Order]:
    response = await client.get(
        f"/orders/client/{client_id}",
        params=_page_params(page, page_size),
    )
    return Page[Order].model_validate(response.json())


@translate_errors
async def create_order(client: ApiClient, order: CreateOrderRequest) -> Order:
    response = await client.post("/orders", json=order.to_payload())
    return Order.model_validate(response.json()["order"])


@translate_errors
async def update_order(client: ApiClient, order_id: int, data: UpdateOrderRequest) -> Order:
    response = await client.patch(f"/orders/{order_id}", json=data.to_payload())
    return Order.model_validate(response.json()["order"])


@translate_errors
async def delete_order(client: ApiClient, order_id: int) -> None:
    await client.delete(f"/orders/{order_id}")
