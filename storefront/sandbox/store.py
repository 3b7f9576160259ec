"""
Sandbox Data Store

In-memory backend state for the sandbox server: users, credentials,
tokens, catalog, addresses, orders and notifications. Seeded with one
administrator and a small menu so a fresh sandbox is immediately usable.

Every failure is raised as SandboxError carrying the HTTP status the
server should answer with.
"""

import hashlib
import logging
import secrets
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

from storefront.schemas import (
    Address,
    Category,
    Item,
    Notification,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    User,
    UserType,
    can_transition,
)

logger = logging.getLogger(__name__)


class SandboxError(Exception):
    """Business error with the HTTP status to answer with."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


@dataclass
class AccessGrant:
    user_id: int
    expires_at: float


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _hash_password(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt.encode("utf-8"), 100_000).hex()


SEED_CATEGORIES = [
    ("Pizzas", "Wood-fired pizzas"),
    ("Drinks", "Cold drinks and juices"),
    ("Desserts", "Sweet endings"),
]

SEED_ITEMS = [
    ("Margherita", "Tomato, mozzarella and basil", 42.90, "Pizzas", True),
    ("Pepperoni", "Pepperoni and mozzarella", 48.50, "Pizzas", True),
    ("Four Cheese", "Mozzarella, gorgonzola, parmesan, provolone", 52.00, "Pizzas", False),
    ("Orange Juice", "Freshly squeezed, 500ml", 9.50, "Drinks", True),
    ("Soda", "Can, 350ml", 6.00, "Drinks", True),
    ("Brownie", "Chocolate brownie with nuts", 14.00, "Desserts", True),
]


class SandboxStore:
    """
    All sandbox state, keyed by integer ids.

    Attributes:
        access_token_ttl: Seconds an access token stays valid
    """

    def __init__(self, access_token_ttl: int = 900):
        self.access_token_ttl = access_token_ttl

        self.users: dict[int, User] = {}
        self._credentials: dict[int, tuple[str, str]] = {}
        self._access_tokens: dict[str, AccessGrant] = {}
        self._refresh_tokens: dict[str, int] = {}

        self.categories: dict[int, Category] = {}
        self.items: dict[int, Item] = {}
        self.addresses: dict[int, Address] = {}
        self.orders: dict[int, Order] = {}
        self.notifications: dict[int, Notification] = {}
        self._notification_owner: dict[int, int] = {}

        self._sequences: dict[str, int] = {}

    def _next_id(self, name: str) -> int:
        self._sequences[name] = self._sequences.get(name, 0) + 1
        return self._sequences[name]

    # ==========================================================================
    # SEEDING
    # ==========================================================================

    def seed(self, admin_email: str, admin_password: str) -> None:
        """Create the administrator and the demo menu."""
        self.create_user("Administrator", admin_email, admin_password, "00000000000", UserType.ADMIN)

        by_name = {}
        for name, description in SEED_CATEGORIES:
            by_name[name] = self.create_category(name, description)

        for name, description, price, category, available in SEED_ITEMS:
            self.create_item(
                name=name,
                description=description,
                unit_price=price,
                category_id=by_name[category].id,
                available=available,
            )
        logger.info(
            f"Sandbox seeded: {len(self.users)} user(s), {len(self.categories)} categories, "
            f"{len(self.items)} items"
        )

    # ==========================================================================
    # USERS & CREDENTIALS
    # ==========================================================================

    def find_user_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        for user in self.users.values():
            if user.email.lower() == email:
                return user
        return None

    def get_user(self, user_id: int) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise SandboxError(404, f"User #{user_id} not found")
        return user

    def create_user(
        self,
        name: str,
        email: str,
        password: str,
        phone: str,
        user_type: UserType = UserType.CLIENT,
    ) -> User:
        if self.find_user_by_email(email) is not None:
            raise SandboxError(409, "Email already registered")

        now = _now()
        user = User(
            id=self._next_id("user"),
            name=name,
            email=email,
            phone=phone,
            type=user_type,
            created_at=now,
            updated_at=now,
        )
        salt = secrets.token_hex(8)
        self.users[user.id] = user
        self._credentials[user.id] = (salt, _hash_password(password, salt))
        return user

    def update_user(self, user_id: int, **changes: Optional[str]) -> User:
        user = self.get_user(user_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        if "email" in changes:
            other = self.find_user_by_email(changes["email"])
            if other is not None and other.id != user_id:
                raise SandboxError(409, "Email already registered")
        updated = user.model_copy(update={**changes, "updated_at": _now()})
        self.users[user_id] = updated
        return updated

    def delete_user(self, user_id: int) -> None:
        self.get_user(user_id)
        del self.users[user_id]
        self._credentials.pop(user_id, None)
        self.revoke_user_tokens(user_id)
        for address_id in [a.id for a in self.addresses.values() if a.user_id == user_id]:
            del self.addresses[address_id]

    def user_with_addresses(self, user: User) -> User:
        return user.model_copy(update={"addresses": self.list_addresses(user.id)})

    def authenticate(self, email: str, password: str) -> User:
        user = self.find_user_by_email(email)
        if user is not None:
            salt, digest = self._credentials[user.id]
            if secrets.compare_digest(digest, _hash_password(password, salt)):
                return user
        raise SandboxError(401, "Invalid email or password")

    # ==========================================================================
    # TOKENS
    # ==========================================================================

    def issue_tokens(self, user_id: int) -> tuple[str, str]:
        """Return a new (access_token, refresh_token) pair."""
        access = secrets.token_urlsafe(24)
        refresh = secrets.token_urlsafe(32)
        self._access_tokens[access] = AccessGrant(user_id, time.time() + self.access_token_ttl)
        self._refresh_tokens[refresh] = user_id
        return access, refresh

    def user_for_access_token(self, token: Optional[str]) -> Optional[User]:
        if not token:
            return None
        grant = self._access_tokens.get(token)
        if grant is None:
            return None
        if grant.expires_at <= time.time():
            del self._access_tokens[token]
            return None
        return self.users.get(grant.user_id)

    def rotate_refresh_token(self, refresh_token: Optional[str]) -> tuple[User, str, str]:
        """Exchange a refresh token for a new token pair."""
        user_id = self._refresh_tokens.pop(refresh_token, None) if refresh_token else None
        if user_id is None or user_id not in self.users:
            raise SandboxError(401, "Session expired, please sign in again")
        access, refresh = self.issue_tokens(user_id)
        return self.users[user_id], access, refresh

    def revoke(self, access_token: Optional[str], refresh_token: Optional[str]) -> None:
        if access_token:
            self._access_tokens.pop(access_token, None)
        if refresh_token:
            self._refresh_tokens.pop(refresh_token, None)

    def revoke_user_tokens(self, user_id: int) -> None:
        for token in [t for t, g in self._access_tokens.items() if g.user_id == user_id]:
            del self._access_tokens[token]
        for token in [t for t, uid in self._refresh_tokens.items() if uid == user_id]:
            del self._refresh_tokens[token]

    def expire_access_tokens(self) -> None:
        """Invalidate every access token, keeping refresh tokens."""
        self._access_tokens.clear()

    # ==========================================================================
    # ADDRESSES
    # ==========================================================================

    def list_addresses(self, user_id: int) -> list[Address]:
        return [a for a in self.addresses.values() if a.user_id == user_id]

    def get_address(self, user_id: int, address_id: int) -> Address:
        address = self.addresses.get(address_id)
        if address is None or address.user_id != user_id:
            raise SandboxError(404, f"Address #{address_id} not found")
        return address

    def create_address(self, user_id: int, **fields: str) -> Address:
        now = _now()
        address = Address(id=self._next_id("address"), user_id=user_id, created_at=now, updated_at=now, **fields)
        self.addresses[address.id] = address
        return address

    def update_address(self, user_id: int, address_id: int, **changes: Optional[str]) -> Address:
        address = self.get_address(user_id, address_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        updated = address.model_copy(update={**changes, "updated_at": _now()})
        self.addresses[address_id] = updated
        return updated

    def delete_address(self, user_id: int, address_id: int) -> None:
        self.get_address(user_id, address_id)
        del self.addresses[address_id]

    # ==========================================================================
    # CATALOG
    # ==========================================================================

    def get_category(self, category_id: int) -> Category:
        category = self.categories.get(category_id)
        if category is None:
            raise SandboxError(404, f"Category #{category_id} not found")
        return category

    def create_category(self, name: str, description: Optional[str] = None) -> Category:
        now = _now()
        category = Category(id=self._next_id("category"), name=name, description=description,
                            created_at=now, updated_at=now)
        self.categories[category.id] = category
        return category

    def update_category(self, category_id: int, **changes: Optional[str]) -> Category:
        category = self.get_category(category_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        updated = category.model_copy(update={**changes, "updated_at": _now()})
        self.categories[category_id] = updated
        return updated

    def delete_category(self, category_id: int) -> None:
        self.get_category(category_id)
        if any(item.category_id == category_id for item in self.items.values()):
            raise SandboxError(409, "Category still has items")
        del self.categories[category_id]

    def get_item(self, item_id: int) -> Item:
        item = self.items.get(item_id)
        if item is None:
            raise SandboxError(404, f"Item #{item_id} not found")
        return item

    def create_item(self, **fields) -> Item:
        self.get_category(fields["category_id"])
        item = Item(id=self._next_id("item"), **fields)
        self.items[item.id] = item
        return item

    def update_item(self, item_id: int, **changes) -> Item:
        item = self.get_item(item_id)
        changes = {k: v for k, v in changes.items() if v is not None}
        if "category_id" in changes:
            self.get_category(changes["category_id"])
        updated = item.model_copy(update=changes)
        self.items[item_id] = updated
        return updated

    def delete_item(self, item_id: int) -> None:
        self.get_item(item_id)
        del self.items[item_id]

    # ==========================================================================
    # ORDERS
    # ==========================================================================

    def get_order(self, order_id: int) -> Order:
        order = self.orders.get(order_id)
        if order is None:
            raise SandboxError(404, f"Order #{order_id} not found")
        return order

    def list_orders(self, client_id: Optional[int] = None) -> list[Order]:
        orders = [o for o in self.orders.values() if client_id is None or o.client_id == client_id]
        return sorted(orders, key=lambda o: o.id, reverse=True)

    def create_order(
        self,
        client_id: int,
        created_by_user_id: int,
        address_id: int,
        payment_method: PaymentMethod,
        lines: Iterable[tuple[int, int]],
    ) -> Order:
        """
        Create an order from (item_id, quantity) lines.

        Unit prices are taken from the catalog at creation time and frozen
        in the line snapshot.
        """
        client = self.get_user(client_id)
        self.get_address(client.id, address_id)

        order_id = self._next_id("order")
        order_items = []
        for item_id, quantity in lines:
            item = self.get_item(item_id)
            if not item.available:
                raise SandboxError(400, f"{item.name} is not available")
            order_items.append(OrderItem(
                id=self._next_id("order_item"),
                order_id=order_id,
                item_id=item.id,
                item=item.model_copy(),
                quantity=quantity,
                unit_price=item.unit_price,
                subtotal=round(item.unit_price * quantity, 2),
            ))
        if not order_items:
            raise SandboxError(400, "Order has no items")

        now = _now()
        order = Order(
            id=order_id,
            client_id=client.id,
            created_by_user_id=created_by_user_id,
            address_id=address_id,
            payment_method=payment_method,
            status=OrderStatus.PENDING,
            items=order_items,
            total_amount=round(sum(i.subtotal for i in order_items), 2),
            created_at=now,
            updated_at=now,
        )
        self.orders[order.id] = order
        return order

    def update_order_status(self, order_id: int, status: OrderStatus) -> Order:
        order = self.get_order(order_id)
        if order.status != status and not can_transition(order.status, status):
            raise SandboxError(400, f"Cannot change order from {order.status.value} to {status.value}")
        updated = order.model_copy(update={"status": status, "updated_at": _now()})
        self.orders[order_id] = updated
        return updated

    def delete_order(self, order_id: int) -> None:
        self.get_order(order_id)
        del self.orders[order_id]

    def with_relations(self, order: Order) -> Order:
        return order.model_copy(update={
            "client": self.users.get(order.client_id),
            "created_by": self.users.get(order.created_by_user_id) if order.created_by_user_id else None,
        })

    # ==========================================================================
    # NOTIFICATIONS
    # ==========================================================================

    def admin_ids(self) -> list[int]:
        return [u.id for u in self.users.values() if u.type == UserType.ADMIN]

    def create_notification(self, user_id: int, title: str, body: str, data: Optional[dict] = None) -> Notification:
        notification = Notification(
            id=self._next_id("notification"),
            title=title,
            body=body,
            read=False,
            created_at=_now(),
            data=data,
        )
        self.notifications[notification.id] = notification
        self._notification_owner[notification.id] = user_id
        return notification

    def list_notifications(self, user_id: int) -> list[Notification]:
        owned = [n for n in self.notifications.values() if self._notification_owner.get(n.id) == user_id]
        return sorted(owned, key=lambda n: n.id, reverse=True)

    def unread_count(self, user_id: int) -> int:
        return sum(1 for n in self.list_notifications(user_id) if not n.read)

    def mark_read(self, user_id: int, notification_id: int) -> None:
        if self._notification_owner.get(notification_id) != user_id:
            raise SandboxError(404, f"Notification #{notification_id} not found")
        self.notifications[notification_id] = self.notifications[notification_id].model_copy(update={"read": True})

    def mark_all_read(self, user_id: int) -> None:
        for notification in self.list_notifications(user_id):
            self.notifications[notification.id] = notification.model_copy(update={"read": True})
