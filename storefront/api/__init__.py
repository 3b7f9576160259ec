"""
REST API Module

One module per backend resource, each a set of thin async functions taking
the shared ApiClient first and returning parsed models:

    - auth: login, refresh, logout, signup, profile
    - addresses, categories, items, orders, users, notifications

Usage:
    from storefront.api import items

    menu = await items.fetch_items(client)
"""

from storefront.api.client import ApiClient
from storefront.api import addresses, auth, categories, items, notifications, orders, users

__all__ = [
    "ApiClient",
    "addresses",
    "auth",
    "categories",
    "items",
    "notifications",
    "orders",
    "users",
]
