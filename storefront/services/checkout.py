"""
Checkout / Order Placement

Single-shot: validate locally, send one order-creation request, clear the
cart only if it succeeded. The server is the transactional boundary; from
the client's side checkout is all-or-nothing.
"""

import logging
from typing import Optional

from storefront.api import orders as orders_api
from storefront.api.client import ApiClient
from storefront.core.errors import ValidationFailure
from storefront.schemas import CreateOrderRequest, Order, PaymentMethod
from storefront.services.cart import Cart

logger = logging.getLogger(__name__)

MISSING_ADDRESS_MESSAGE = "Select a delivery address"
EMPTY_CART_MESSAGE = "Your cart is empty"


def build_order_request(
    cart: Cart,
    client_id: int,
    address_id: int,
    payment_method: PaymentMethod,
) -> CreateOrderRequest:
    return CreateOrderRequest(
        client_id=client_id,
        address_id=address_id,
        payment_method=payment_method,
        total_amount=cart.total,
        items=cart.order_lines(),
    )


async def place_order(
    client: ApiClient,
    cart: Cart,
    *,
    client_id: int,
    address_id: Optional[int],
    payment_method: PaymentMethod,
) -> Order:
    """
    Submit the cart as an order.

    Args:
        client: API client
        cart: Cart to submit; emptied on success only
        client_id: Ordering user
        address_id: Selected delivery address
        payment_method: Chosen payment method

    Returns:
        Order: The created order

    Raises:
        ValidationFailure: no address selected or empty cart (no request sent)
        StorefrontError: the backend rejected the order (cart left intact)
    """
    problems = []
    if address_id is None:
        problems.append(MISSING_ADDRESS_MESSAGE)
    if cart.is_empty:
        problems.append(EMPTY_CART_MESSAGE)
    if problems:
        raise ValidationFailure(problems)

    request = build_order_request(cart, client_id, address_id, payment_method)
    logger.info(
        f"Placing order: {len(request.items)} line(s), total {request.total_amount:.2f}, "
        f"payment {payment_method.value}"
    )

    order = await orders_api.create_order(client, request)

    cart.clear()
    logger.info(f"Order #{order.id} placed")
    return order
