from __future__ import annotations

import httpx
import pytest

from storefront.api.client import ApiClient
from storefront.auth.token_store import MemoryStorage, TokenStore
from storefront.core.errors import ApiFailure, ValidationFailure
from storefront.schemas import OrderStatus, PaymentMethod
from storefront.services.cart import Cart
from storefront.services.checkout import EMPTY_CART_MESSAGE, MISSING_ADDRESS_MESSAGE, place_order


def recording_client(handler) -> tuple[ApiClient, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def transport(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    store = TokenStore(MemoryStorage({"accessToken": "tok"}))
    return ApiClient("http://api.test", store, transport=httpx.MockTransport(transport)), seen


def created_order(request: httpx.Request) -> httpx.Response:
    return httpx.Response(201, json={"order": {
        "id": 42,
        "clientId": 7,
        "addressId": 3,
        "paymentMethod": "PIX",
        "status": "PENDING",
        "totalAmount": 25.5,
        "items": [],
    }})


@pytest.mark.asyncio
async def test_missing_address_is_rejected_before_any_request() -> None:
    client, seen = recording_client(created_order)
    cart = Cart()
    cart.add_item(1, "Margherita", 10.00, quantity=2)

    with pytest.raises(ValidationFailure) as info:
        await place_order(client, cart, client_id=7, address_id=None, payment_method=PaymentMethod.PIX)

    assert info.value.messages == [MISSING_ADDRESS_MESSAGE]
    assert seen == []
    assert cart.count == 2
    await client.aclose()


@pytest.mark.asyncio
async def test_empty_cart_is_rejected_before_any_request() -> None:
    client, seen = recording_client(created_order)

    with pytest.raises(ValidationFailure) as info:
        await place_order(client, Cart(), client_id=7, address_id=3, payment_method=PaymentMethod.CASH)

    assert info.value.messages == [EMPTY_CART_MESSAGE]
    assert seen == []
    await client.aclose()


@pytest.mark.asyncio
async def test_successful_checkout_sends_one_request_and_empties_cart() -> None:
    client, seen = recording_client(created_order)
    cart = Cart()
    cart.add_item(1, "Margherita", 10.00, quantity=2)
    cart.add_item(2, "Orange Juice", 5.50)

    order = await place_order(client, cart, client_id=7, address_id=3, payment_method=PaymentMethod.PIX)

    assert order.id == 42
    assert order.status == OrderStatus.PENDING
    assert cart.is_empty
    assert len(seen) == 1

    body = httpx.Response(200, content=seen[0].content).json()
    assert seen[0].method == "POST"
    assert seen[0].url.path == "/orders"
    assert body == {
        "clientId": 7,
        "addressId": 3,
        "paymentMethod": "PIX",
        "totalAmount": 25.5,
        "items": [
            {"itemId": 1, "quantity": 2, "unitPrice": 10.0, "subtotal": 20.0},
            {"itemId": 2, "quantity": 1, "unitPrice": 5.5, "subtotal": 5.5},
        ],
    }
    await client.aclose()


@pytest.mark.asyncio
async def test_failed_checkout_leaves_cart_untouched() -> None:
    client, seen = recording_client(lambda r: httpx.Response(400, json={"message": "Soda is not available"}))
    cart = Cart()
    cart.add_item(5, "Soda", 6.00, quantity=2)

    with pytest.raises(ApiFailure) as info:
        await place_order(client, cart, client_id=7, address_id=3, payment_method=PaymentMethod.DEBIT)

    assert info.value.message == "Soda is not available"
    assert len(seen) == 1
    assert cart.count == 2
    await client.aclose()
