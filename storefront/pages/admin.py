"""
Admin Dashboard

Administrators only. Manages categories and items, moves orders through
their status workflow and registers further administrators.

Order status changes are applied to the local list only after the backend
accepted them.
"""

import asyncio
import logging
import math
from typing import Optional

from storefront.api import categories as categories_api
from storefront.api import items as items_api
from storefront.api import orders as orders_api
from storefront.api import users as users_api
from storefront.core.errors import StorefrontError
from storefront.pages.base import BasePage
from storefront.schemas import (
    AdminSignupForm,
    Category,
    CategoryCreate,
    CategoryForm,
    CategoryUpdate,
    Item,
    ItemForm,
    ItemUpdate,
    Order,
    OrderStatus,
    STATUS_LABELS,
    UpdateOrderRequest,
    User,
    UserCreate,
    validate_form,
)
from storefront.ui import navigation

logger = logging.getLogger(__name__)

ORDERS_PAGE_SIZE = 10


class AdminDashboardPage(BasePage):
    def __init__(self, storefront, page_size: int = ORDERS_PAGE_SIZE):
        super().__init__(storefront)
        self.categories: list[Category] = []
        self.items: list[Item] = []
        self.orders: list[Order] = []
        self.page = 1
        self.page_size = page_size
        self.total_orders = 0

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total_orders / self.page_size))

    async def open(self) -> bool:
        if not self.require_user():
            return False
        if not self.session.is_admin:
            self.toaster.error("Access denied", "You do not have permission to access this page")
            self.navigator.navigate(navigation.HOME)
            return False
        return await self.load()

    async def load(self) -> bool:
        self.is_loading = True
        try:
            categories, items, orders = await asyncio.gather(
                categories_api.fetch_categories(self.client),
                items_api.fetch_items(self.client),
                orders_api.fetch_all_orders(self.client, page=self.page, page_size=self.page_size),
            )
        except StorefrontError as exc:
            self.report(exc, "Could not load the dashboard")
            return False
        finally:
            self.is_loading = False

        self.categories = sorted(categories, key=lambda c: c.name.lower())
        self.items = sorted(items, key=lambda i: i.name.lower())
        self.orders = orders.data
        self.total_orders = orders.total
        return True

    def category_name(self, category_id: int) -> str:
        category = next((c for c in self.categories if c.id == category_id), None)
        return category.name if category else "-"

    # ==========================================================================
    # CATEGORIES
    # ==========================================================================

    async def save_category(
        self,
        name: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
    ) -> Optional[Category]:
        try:
            form = validate_form(CategoryForm, name=name, description=description)
            if category_id is None:
                category = await categories_api.create_category(
                    self.client, CategoryCreate(**form.model_dump())
                )
            else:
                category = await categories_api.update_category(
                    self.client, category_id, CategoryUpdate(**form.model_dump())
                )
            self.categories = sorted(
                await categories_api.fetch_categories(self.client), key=lambda c: c.name.lower()
            )
        except StorefrontError as exc:
            self.report(exc, "Could not save the category")
            return None

        self.toaster.success("Category updated!" if category_id else "Category created!")
        return category

    async def delete_category(self, category_id: int) -> bool:
        try:
            await categories_api.delete_category(self.client, category_id)
        except StorefrontError as exc:
            self.report(exc, "Could not delete the category")
            return False

        self.categories = [c for c in self.categories if c.id != category_id]
        self.toaster.success("Category deleted!")
        return True

    # ==========================================================================
    # ITEMS
    # ==========================================================================

    async def save_item(
        self,
        name: str,
        unit_price: float,
        category_id: Optional[int],
        description: str = "",
        available: bool = True,
        image_url: Optional[str] = None,
        item_id: Optional[int] = None,
    ) -> Optional[Item]:
        try:
            form = validate_form(
                ItemForm,
                name=name,
                description=description,
                unit_price=unit_price,
                category_id=category_id,
                available=available,
                image_url=image_url,
            )
            if item_id is None:
                item = await items_api.create_item(self.client, form.to_create())
            else:
                item = await items_api.update_item(self.client, item_id, ItemUpdate(**form.model_dump()))
        except StorefrontError as exc:
            self.report(exc, "Could not save the item")
            return None

        self.items = sorted([i for i in self.items if i.id != item.id] + [item], key=lambda i: i.name.lower())
        self.toaster.success("Item updated!" if item_id else "Item created!")
        return item

    async def delete_item(self, item_id: int) -> bool:
        try:
            await items_api.delete_item(self.client, item_id)
        except StorefrontError as exc:
            self.report(exc, "Could not delete the item")
            return False

        self.items = [i for i in self.items if i.id != item_id]
        self.toaster.success("Item deleted!")
        return True

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    async def load_orders(self, page: int) -> bool:
        try:
            result = await orders_api.fetch_all_orders(self.client, page=page, page_size=self.page_size)
        except StorefrontError as exc:
            self.report(exc, "Could not load orders")
            return False

        self.orders = result.data
        self.total_orders = result.total
        self.page = page
        return True

    async def next_page(self) -> bool:
        if self.page >= self.total_pages:
            return False
        return await self.load_orders(self.page + 1)

    async def previous_page(self) -> bool:
        if self.page <= 1:
            return False
        return await self.load_orders(self.page - 1)

    async def update_order_status(self, order_id: int, status: OrderStatus) -> bool:
        status = OrderStatus(status)
        admin = self.session.user
        try:
            updated = await orders_api.update_order(
                self.client,
                order_id,
                UpdateOrderRequest(status=status, confirmed_by_user_id=admin.id if admin else None),
            )
        except StorefrontError as exc:
            self.report(exc, "Could not update the order")
            return False

        self.orders = [
            o.model_copy(update={"status": updated.status, "updated_at": updated.updated_at})
            if o.id == order_id else o
            for o in self.orders
        ]
        self.toaster.success("Order status updated!", f"Order #{order_id}: {STATUS_LABELS[updated.status]}")
        return True

    # ==========================================================================
    # ADMINISTRATORS
    # ==========================================================================

    async def create_admin(
        self,
        name: str,
        phone: str,
        email: str,
        password: str,
        confirm_password: str,
    ) -> Optional[User]:
        try:
            form = validate_form(
                AdminSignupForm,
                name=name,
                phone=phone,
                email=email,
                password=password,
                confirm_password=confirm_password,
            )
            user = await users_api.register_admin_user(
                self.client,
                UserCreate(name=form.name, phone=form.phone, email=form.email, password=form.password),
            )
        except StorefrontError as exc:
            self.report(exc, "Could not create the administrator")
            return None

        self.toaster.success("Administrator created!", "The new administrative user was registered.")
        return user
