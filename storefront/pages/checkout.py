"""
Checkout Page

Pick a delivery address and a payment method (PIX by default), then place
the order. Needs a signed-in user and a non-empty cart.
"""

import logging
from typing import Optional

from storefront.api import addresses as addresses_api
from storefront.core.errors import StorefrontError
from storefront.pages.base import BasePage
from storefront.schemas import Address, AddressForm, Order, PaymentMethod, PAYMENT_LABELS, validate_form
from storefront.services.checkout import place_order
from storefront.ui import navigation

logger = logging.getLogger(__name__)


class CheckoutPage(BasePage):
    def __init__(self, storefront):
        super().__init__(storefront)
        self.addresses: list[Address] = []
        self.selected_address_id: Optional[int] = None
        self.payment_method = PaymentMethod.PIX
        self.is_submitting = False

    async def open(self) -> bool:
        if not self.require_user():
            return False
        if self.cart.is_empty:
            self.navigator.navigate(navigation.HOME)
            return False
        return await self.load_addresses()

    async def load_addresses(self) -> bool:
        self.is_loading = True
        try:
            self.addresses = await addresses_api.fetch_addresses(self.client)
        except StorefrontError as exc:
            self.report(exc, "Could not load addresses")
            return False
        finally:
            self.is_loading = False

        known = {a.id for a in self.addresses}
        if self.selected_address_id not in known:
            self.selected_address_id = self.addresses[0].id if self.addresses else None
        return True

    @property
    def payment_options(self) -> dict[PaymentMethod, str]:
        return dict(PAYMENT_LABELS)

    def select_address(self, address_id: int) -> None:
        self.selected_address_id = address_id

    def select_payment(self, method: PaymentMethod) -> None:
        self.payment_method = PaymentMethod(method)

    async def add_address(self, **fields: str) -> Optional[Address]:
        try:
            form = validate_form(AddressForm, **fields)
            address = await addresses_api.create_address(self.client, form.to_create())
        except StorefrontError as exc:
            self.report(exc, "Could not save the address")
            return None

        self.addresses.append(address)
        self.selected_address_id = address.id
        self.toaster.success("Address added", address.label)
        return address

    async def submit(self) -> Optional[Order]:
        user = self.session.user
        if user is None:
            self.navigator.navigate(navigation.AUTH)
            return None

        self.is_submitting = True
        try:
            order = await place_order(
                self.client,
                self.cart,
                client_id=user.id,
                address_id=self.selected_address_id,
                payment_method=self.payment_method,
            )
        except StorefrontError as exc:
            self.report(exc, "Could not place the order")
            return None
        finally:
            self.is_submitting = False

        self.toaster.success(
            "Order placed!",
            f"Your order #{order.id} was received and is being prepared.",
        )
        self.navigator.navigate(navigation.PROFILE)
        return order
