"""
Shopping Cart

Transient, in-memory collection of cart lines keyed by item id, in the
order items were first added. Nothing is persisted; the cart lives as long
as the Storefront instance and is cleared after a successful checkout.

Invariants:
    - every line has quantity >= 1 (setting 0 or less removes the line)
    - adding an item already in the cart increments its quantity
    - total == sum(price * quantity), count == sum(quantity)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from storefront.schemas import Item, OrderLine

logger = logging.getLogger(__name__)


@dataclass
class CartLine:
    """One (item, quantity) pair held before an order is placed."""
    id: int
    name: str
    price: float
    quantity: int = 1
    image_url: Optional[str] = None

    @property
    def subtotal(self) -> float:
        return round(self.price * self.quantity, 2)


class Cart:
    """Ordered cart lines with derived total and count."""

    def __init__(self):
        self._lines: dict[int, CartLine] = {}

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines.values())

    @property
    def total(self) -> float:
        return round(sum(line.price * line.quantity for line in self._lines.values()), 2)

    @property
    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, item_id: int) -> bool:
        return item_id in self._lines

    def get(self, item_id: int) -> Optional[CartLine]:
        return self._lines.get(item_id)

    def add_item(
        self,
        item_id: int,
        name: str,
        price: float,
        quantity: int = 1,
        image_url: Optional[str] = None,
    ) -> CartLine:
        """Add an item, or bump its quantity if it is already in the cart."""
        if quantity < 1:
            raise ValueError("quantity must be at least 1")

        line = self._lines.get(item_id)
        if line is None:
            line = CartLine(id=item_id, name=name, price=price, quantity=quantity, image_url=image_url)
            self._lines[item_id] = line
        else:
            line.quantity += quantity
        logger.debug(f"Cart: item #{item_id} now x{line.quantity}")
        return line

    def add_menu_item(self, item: Item, quantity: int = 1) -> CartLine:
        return self.add_item(
            item_id=item.id,
            name=item.name,
            price=item.unit_price,
            quantity=quantity,
            image_url=item.image_url,
        )

    def update_quantity(self, item_id: int, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line."""
        if item_id not in self._lines:
            return
        if quantity <= 0:
            self.remove_item(item_id)
            return
        self._lines[item_id].quantity = quantity

    def remove_item(self, item_id: int) -> None:
        self._lines.pop(item_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def order_lines(self) -> list[OrderLine]:
        """Snapshot of the cart as order line items."""
        return [
            OrderLine(
                item_id=line.id,
                quantity=line.quantity,
                unit_price=line.price,
                subtotal=line.subtotal,
            )
            for line in self._lines.values()
        ]
