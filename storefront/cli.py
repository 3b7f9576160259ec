"""
Storefront Command Line

Drives the storefront pages from a terminal. Run ``storefront --help``.

Examples:
    storefront sandbox --port 8001
    storefront menu
    storefront login user@example.com
    storefront order --item 1:2 --item 4 --address 1 --payment PIX
    storefront orders --page 2

The access token is kept in the storage file between invocations. In
development mode every invocation gets a fresh in-process sandbox, so
commands that need a session accept --email/--password to sign in first.
"""

import argparse
import asyncio
import getpass
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn

from storefront import __version__
from storefront.app import Storefront, create_storefront
from storefront.core.config import get_settings, setup_logging
from storefront.pages import (
    AuthPage,
    CheckoutPage,
    MenuPage,
    NotificationsPanel,
    ProfilePage,
)
from storefront.sandbox import create_sandbox
from storefront.schemas import PaymentMethod
from storefront.ui.toasts import Toast

logger = logging.getLogger(__name__)


def print_toast(toast: Toast) -> None:
    icon = "❌" if toast.is_error else "✅"
    line = f"{icon} {toast.title}"
    if toast.description:
        line += f": {toast.description}"
    print(line, file=sys.stderr if toast.is_error else sys.stdout)


@asynccontextmanager
async def open_storefront(args: argparse.Namespace) -> AsyncIterator[Storefront]:
    async with create_storefront(toast_sink=print_toast) as storefront:
        email = getattr(args, "email", None)
        if email and not storefront.session.is_authenticated:
            password = args.password or getpass.getpass("Password: ")
            await AuthPage(storefront).login(email, password)
        yield storefront


def parse_item(value: str) -> tuple[int, int]:
    """Parse ``ID`` or ``ID:QTY``."""
    item_id, _, quantity = value.partition(":")
    try:
        parsed = int(item_id), int(quantity or 1)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected ID or ID:QTY, got {value!r}")
    if parsed[1] < 1:
        raise argparse.ArgumentTypeError("quantity must be at least 1")
    return parsed


# =============================================================================
# COMMANDS
# =============================================================================

async def cmd_menu(args: argparse.Namespace) -> int:
    async with open_storefront(args) as storefront:
        page = MenuPage(storefront)
        if not await page.load():
            return 1
        page.select_category(args.category)

        print("=" * 60)
        print(f"🍽️  {storefront.settings.app_name} menu")
        print("=" * 60)
        for category in page.categories:
            items = [i for i in page.visible_items if i.category_id == category.id]
            if not items:
                continue
            print(f"\n{category.name} (#{category.id})")
            for item in items:
                print(f"   #{item.id:<4} {item.name:<24} {storefront.format_price(item.unit_price)}")
        return 0


async def cmd_login(args: argparse.Namespace) -> int:
    async with create_storefront(toast_sink=print_toast) as storefront:
        password = args.password or getpass.getpass("Password: ")
        ok = await AuthPage(storefront).login(args.email, password)
        return 0 if ok else 1


async def cmd_logout(args: argparse.Namespace) -> int:
    async with create_storefront(toast_sink=print_toast) as storefront:
        if not storefront.session.is_authenticated:
            print("Not signed in")
            return 0
        await ProfilePage(storefront).logout()
        return 0


async def cmd_whoami(args: argparse.Namespace) -> int:
    async with open_storefront(args) as storefront:
        user = storefront.session.user
        if user is None:
            print("Not signed in")
            return 1
        print(f"👤 {user.name} <{user.email}> ({user.type.value})")
        for address in user.addresses or []:
            print(f"   📍 #{address.id} {address.label}")
        return 0


async def cmd_order(args: argparse.Namespace) -> int:
    async with open_storefront(args) as storefront:
        if not storefront.session.is_authenticated:
            print("❌ Sign in first (storefront login EMAIL)", file=sys.stderr)
            return 1

        menu = MenuPage(storefront)
        if not await menu.load():
            return 1
        for item_id, quantity in args.item:
            if not menu.add_to_cart(item_id, quantity):
                print(f"❌ Item #{item_id} is not on the menu", file=sys.stderr)
                return 1

        checkout = CheckoutPage(storefront)
        if not await checkout.open():
            return 1
        if args.address is not None:
            checkout.select_address(args.address)
        checkout.select_payment(PaymentMethod(args.payment))

        print(f"🛒 {storefront.cart.count} item(s), total {storefront.format_price(storefront.cart.total)}")
        order = await checkout.submit()
        return 0 if order else 1


async def cmd_orders(args: argparse.Namespace) -> int:
    async with open_storefront(args) as storefront:
        page = ProfilePage(storefront)
        if not await page.open():
            print("Not signed in")
            return 1
        if args.page > 1 and not await page.load_orders(args.page):
            return 1

        if not page.orders:
            print("You have not placed any orders yet.")
            return 0
        for line in page.order_lines():
            print(line)
        print(f"\nPage {page.page}/{page.total_pages} ({page.total_orders} orders)")
        return 0


async def cmd_notifications(args: argparse.Namespace) -> int:
    async with open_storefront(args) as storefront:
        panel = NotificationsPanel(storefront)
        if not await panel.open():
            print("Not signed in")
            return 1
        try:
            if args.read_all and not await panel.mark_all_as_read():
                return 1

            print(f"🔔 {panel.unread_count} unread")
            for notification in panel.notifications:
                marker = " " if notification.read else "•"
                print(f" {marker} #{notification.id} {notification.title}: {notification.body}")
            return 0
        finally:
            panel.close()


def cmd_sandbox(args: argparse.Namespace) -> int:
    settings = get_settings()
    sandbox = create_sandbox(settings)
    host = args.host or settings.sandbox_host
    port = args.port or settings.sandbox_port

    print("=" * 60)
    print(f"🧪 Storefront sandbox on http://{host}:{port}{settings.api_prefix}")
    print(f"   Admin: {settings.sandbox_admin_email}")
    print("=" * 60)
    uvicorn.run(sandbox.app, host=host, port=port, log_level="debug" if settings.debug else "info")
    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront", description="Storefront command line")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    sub = parser.add_subparsers(dest="command", required=True)

    credentials = argparse.ArgumentParser(add_help=False)
    credentials.add_argument("--email", help="Sign in with this email before running the command")
    credentials.add_argument("--password", help="Password for --email (prompted if omitted)")

    menu = sub.add_parser("menu", parents=[credentials], help="Show the menu")
    menu.add_argument("--category", type=int, help="Only show this category id")
    menu.set_defaults(handler=cmd_menu)

    login = sub.add_parser("login", help="Sign in and keep the session")
    login.add_argument("email")
    login.add_argument("--password", help="Prompted if omitted")
    login.set_defaults(handler=cmd_login)

    logout = sub.add_parser("logout", help="Sign out")
    logout.set_defaults(handler=cmd_logout)

    whoami = sub.add_parser("whoami", parents=[credentials], help="Show the signed-in user")
    whoami.set_defaults(handler=cmd_whoami)

    order = sub.add_parser("order", parents=[credentials], help="Place an order")
    order.add_argument("--item", type=parse_item, action="append", required=True,
                       metavar="ID[:QTY]", help="Item to order; repeatable")
    order.add_argument("--address", type=int, help="Delivery address id (defaults to the first)")
    order.add_argument("--payment", default=PaymentMethod.PIX.value,
                       choices=[m.value for m in PaymentMethod], help="Payment method")
    order.set_defaults(handler=cmd_order)

    orders = sub.add_parser("orders", parents=[credentials], help="Show your order history")
    orders.add_argument("--page", type=int, default=1)
    orders.set_defaults(handler=cmd_orders)

    notifications = sub.add_parser("notifications", parents=[credentials], help="Show notifications")
    notifications.add_argument("--read-all", action="store_true", help="Mark every notification as read")
    notifications.set_defaults(handler=cmd_notifications)

    sandbox = sub.add_parser("sandbox", help="Run the sandbox backend server")
    sandbox.add_argument("--host")
    sandbox.add_argument("--port", type=int)
    sandbox.set_defaults(handler=cmd_sandbox)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.debug else logging.WARNING)

    if args.handler is cmd_sandbox:
        return cmd_sandbox(args)
    return asyncio.run(args.handler(args))


if __name__ == "__main__":
    sys.exit(main())
