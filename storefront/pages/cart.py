"""Cart Page: review lines, change quantities, continue to checkout."""

from storefront.pages.base import BasePage
from storefront.services.cart import CartLine
from storefront.ui import navigation


class CartPage(BasePage):

    def open(self) -> bool:
        return self.require_user()

    @property
    def lines(self) -> list[CartLine]:
        return self.cart.lines

    @property
    def summary(self) -> str:
        count = self.cart.count
        if count == 0:
            return "Your cart is empty"
        return f"{count} {'item' if count == 1 else 'items'} in the cart"

    @property
    def total_label(self) -> str:
        return self.storefront.format_price(self.cart.total)

    def increment(self, item_id: int) -> None:
        line = self.cart.get(item_id)
        if line is not None:
            self.cart.update_quantity(item_id, line.quantity + 1)

    def decrement(self, item_id: int) -> None:
        line = self.cart.get(item_id)
        if line is not None:
            self.cart.update_quantity(item_id, line.quantity - 1)

    def remove(self, item_id: int) -> None:
        self.cart.remove_item(item_id)

    def checkout(self) -> bool:
        if self.cart.is_empty:
            return False
        self.navigator.navigate(navigation.CHECKOUT)
        return True
