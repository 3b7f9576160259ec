"""Address API: the signed-in user's delivery addresses."""

from storefront.api.client import ApiClient
from storefront.core.errors import translate_errors
from storefront.schemas import Address, AddressCreate, AddressUpdate


@translate_errors
async def fetch_addresses(client: ApiClient) -> list[Address]:
    response = await client.get("/addresses")
    return [Address.model_validate(a) for a in response.json()["addresses"]]


@translate_errors
async def create_address(client: ApiClient, address: AddressCreate) -> Address:
    response = await client.post("/addresses", json=address.to_payload())
    return Address.model_validate(response.json()["address"])


@translate_errors
async def update_address(client: ApiClient, address_id: int, address: AddressUpdate) -> Address:
    response = await client.patch(f"/addresses/{address_id}", json=address.to_payload())
    return Address.model_validate(response.json()["address"])


@translate_errors
async def delete_address(client: ApiClient, address_id: int) -> None:
    await client.delete(f"/addresses/{address_id}")
