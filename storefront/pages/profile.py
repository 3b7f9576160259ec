"""
Profile Page

Personal data, delivery addresses and a paginated order history, plus
sign-out and account deletion.
"""

import logging
import math
from typing import Optional

from storefront.api import addresses as addresses_api
from storefront.api import orders as orders_api
from storefront.api import users as users_api
from storefront.core.errors import StorefrontError
from storefront.pages.base import BasePage
from storefront.schemas import (
    Address,
    AddressForm,
    AddressUpdate,
    Order,
    ProfileForm,
    UserUpdate,
    validate_form,
)
from storefront.ui import navigation

logger = logging.getLogger(__name__)

ORDERS_PAGE_SIZE = 5


def describe_order(order: Order, currency: str = "R$") -> list[str]:
    """Human-readable lines for one order in the history."""
    created = order.created_at.strftime("%d/%m/%Y %H:%M") if order.created_at else "-"
    lines = [f"Order #{order.id} - {order.status_label} - {created}"]
    for entry in order.items:
        name = entry.item.name if entry.item else f"Item #{entry.item_id}"
        lines.append(f"  {entry.quantity}x {name}  {currency} {entry.subtotal:.2f}")
    lines.append(f"  Payment: {order.payment_label}  Total: {currency} {order.total_amount:.2f}")
    return lines


class ProfilePage(BasePage):
    def __init__(self, storefront, page_size: int = ORDERS_PAGE_SIZE):
        super().__init__(storefront)
        self.addresses: list[Address] = []
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
        user = self.session.user
        self.addresses = list(user.addresses or [])
        return await self.load_orders(1)

    async def load_orders(self, page: int = 1) -> bool:
        user = self.session.user
        if user is None:
            return False

        self.is_loading = True
        try:
            result = await orders_api.fetch_orders_by_client_id(
                self.client, user.id, page=page, page_size=self.page_size
            )
        except StorefrontError as exc:
            self.report(exc, "Could not load your orders")
            return False
        finally:
            self.is_loading = False

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

    async def update_profile(self, name: str, phone: str) -> bool:
        try:
            form = validate_form(ProfileForm, name=name, phone=phone)
            await users_api.update_user(self.client, UserUpdate(name=form.name, phone=form.phone))
            await self.session.reload_profile()
        except StorefrontError as exc:
            self.report(exc, "Could not save your data")
            return False

        self.toaster.success("Profile updated", "Your information was saved.")
        return True

    async def save_address(self, address_id: Optional[int] = None, **fields: str) -> Optional[Address]:
        """Create an address, or update ``address_id`` when given."""
        try:
            form = validate_form(AddressForm, **fields)
            if address_id is None:
                address = await addresses_api.create_address(self.client, form.to_create())
            else:
                address = await addresses_api.update_address(
                    self.client, address_id, AddressUpdate(**form.model_dump())
                )
        except StorefrontError as exc:
            self.report(exc, "Could not save the address")
            return None

        self.addresses = [a for a in self.addresses if a.id != address.id] + [address]
        self.toaster.success("Address updated" if address_id else "Address created", address.label)
        return address

    async def delete_address(self, address_id: int) -> bool:
        try:
            await addresses_api.delete_address(self.client, address_id)
        except StorefrontError as exc:
            self.report(exc, "Could not delete the address")
            return False

        self.addresses = [a for a in self.addresses if a.id != address_id]
        self.toaster.success("Address removed")
        return True

    async def logout(self) -> None:
        await self.session.logout()
        self.toaster.success("Signed out", "You have been signed out")
        self.navigator.navigate(navigation.AUTH)

    async def delete_account(self) -> bool:
        try:
            await users_api.delete_user(self.client)
        except StorefrontError as exc:
            self.report(exc, "Could not delete the account")
            return False

        self.cart.clear()
        await self.session.logout()
        self.toaster.success("Account deleted")
        self.navigator.navigate(navigation.AUTH)
        return True

    def order_lines(self) -> list[str]:
        currency = self.storefront.settings.currency_symbol
        lines = []
        for order in self.orders:
            lines.extend(describe_order(order, currency))
        return lines
