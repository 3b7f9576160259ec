"""
Services Module

Client-side business logic:
    - cart: transient shopping cart
    - checkout: order placement
    - realtime: push notifications (mock or WebSocket, chosen by ENV_MODE)
"""

from storefront.services.cart import Cart, CartLine
from storefront.services.checkout import place_order

__all__ = ["Cart", "CartLine", "place_order"]
