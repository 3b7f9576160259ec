"""
Menu Page

Categories plus available items, optionally filtered by category. Adding
to the cart requires a signed-in user.
"""

import asyncio
import logging
from typing import Optional

from storefront.api import categories as categories_api
from storefront.api import items as items_api
from storefront.core.errors import StorefrontError
from storefront.pages.base import BasePage
from storefront.schemas import Category, Item
from storefront.ui import navigation

logger = logging.getLogger(__name__)


class MenuPage(BasePage):
    def __init__(self, storefront):
        super().__init__(storefront)
        self.categories: list[Category] = []
        self.items: list[Item] = []
        self.selected_category: Optional[int] = None

    async def load(self) -> bool:
        self.is_loading = True
        try:
            categories, items = await asyncio.gather(
                categories_api.fetch_categories(self.client),
                items_api.fetch_items(self.client),
            )
        except StorefrontError as exc:
            self.report(exc, "Could not load the menu")
            return False
        finally:
            self.is_loading = False

        self.categories = sorted(categories, key=lambda c: c.name.lower())
        self.items = sorted((i for i in items if i.available), key=lambda i: i.name.lower())
        return True

    def select_category(self, category_id: Optional[int]) -> None:
        self.selected_category = category_id

    @property
    def visible_items(self) -> list[Item]:
        if self.selected_category is None:
            return list(self.items)
        return [i for i in self.items if i.category_id == self.selected_category]

    def add_to_cart(self, item_id: int, quantity: int = 1) -> bool:
        if not self.session.is_authenticated:
            self.toaster.success("Sign in to add items", "You need to be signed in to place orders")
            self.navigator.navigate(navigation.AUTH)
            return False

        if quantity < 1:
            self.toaster.error("Invalid quantity", "Quantity must be at least 1")
            return False

        item = next((i for i in self.items if i.id == item_id), None)
        if item is None:
            return False

        self.cart.add_menu_item(item, quantity)
        self.toaster.success("Item added!", f"{item.name} was added to the cart")
        return True
