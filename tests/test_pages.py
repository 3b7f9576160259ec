"""Page flows against the in-process sandbox: toasts, navigation and local state."""
from __future__ import annotations

import pytest

from storefront.pages import (
    AdminDashboardPage,
    AuthPage,
    CartPage,
    CheckoutPage,
    MenuPage,
    NotificationsPanel,
    ProfilePage,
)
from storefront.schemas import OrderStatus, PaymentMethod
from storefront.ui import navigation


ADDRESS = dict(
    street="Rua das Flores",
    number="120",
    district="Centro",
    city="Belo Horizonte",
    state="mg",
    zip_code="30110-012",
)


async def place_sample_order(storefront) -> int:
    menu = MenuPage(storefront)
    await menu.load()
    item = menu.items[0]
    menu.add_to_cart(item.id, 2)

    checkout = CheckoutPage(storefront)
    assert await checkout.open()
    order = await checkout.submit()
    assert order is not None
    return order.id


# =============================================================================
# AUTH
# =============================================================================

@pytest.mark.asyncio
async def test_login_failure_shows_exactly_one_toast_and_stays(storefront) -> None:
    storefront.navigator.navigate(navigation.AUTH)
    page = AuthPage(storefront)

    ok = await page.login("ana@example.com", "wrong-password")

    assert not ok
    assert len(storefront.toaster.toasts) == 1
    toast = storefront.toaster.last
    assert toast.is_error
    assert toast.description == "Invalid email or password"
    assert storefront.navigator.current == navigation.AUTH


@pytest.mark.asyncio
async def test_login_with_invalid_form_is_one_toast_without_request(storefront) -> None:
    storefront.navigator.navigate(navigation.AUTH)

    ok = await AuthPage(storefront).login("not-an-email", "123")

    assert not ok
    assert len(storefront.toaster.toasts) == 1
    assert "Invalid email" in storefront.toaster.last.description
    assert storefront.navigator.current == navigation.AUTH


@pytest.mark.asyncio
async def test_signup_then_login_navigates_home(storefront) -> None:
    storefront.navigator.navigate(navigation.AUTH)
    page = AuthPage(storefront)

    assert await page.signup("Ana Souza", "11999998888", "ana@example.com", "secret123")
    assert not storefront.session.is_authenticated
    assert storefront.toaster.last.title == "Account created!"

    assert await page.login("ana@example.com", "secret123")
    assert storefront.session.is_authenticated
    assert storefront.navigator.current == navigation.HOME


@pytest.mark.asyncio
async def test_signup_validation_errors_toast_per_message(storefront) -> None:
    ok = await AuthPage(storefront).signup("Al", "123", "ana@example.com", "secret123")

    assert not ok
    descriptions = [t.description for t in storefront.toaster.toasts]
    assert descriptions == ["Name must have at least 3 characters", "Invalid phone number"]


@pytest.mark.asyncio
async def test_duplicate_signup_reports_api_message(storefront, client_user) -> None:
    ok = await AuthPage(storefront).signup("Ana Souza", "11999998888", "ana@example.com", "secret123")
    assert not ok
    assert storefront.toaster.last.description == "Email already registered"


# =============================================================================
# MENU & CART
# =============================================================================

@pytest.mark.asyncio
async def test_menu_lists_only_available_items_and_filters(storefront) -> None:
    page = MenuPage(storefront)
    assert await page.load()

    names = [i.name for i in page.items]
    assert "Four Cheese" not in names
    assert names == sorted(names, key=str.lower)

    drinks = next(c for c in page.categories if c.name == "Drinks")
    page.select_category(drinks.id)
    assert {i.name for i in page.visible_items} == {"Orange Juice", "Soda"}

    page.select_category(None)
    assert len(page.visible_items) == len(page.items)


@pytest.mark.asyncio
async def test_anonymous_add_to_cart_redirects_to_auth(storefront) -> None:
    page = MenuPage(storefront)
    await page.load()

    assert not page.add_to_cart(page.items[0].id)
    assert storefront.cart.is_empty
    assert storefront.navigator.current == navigation.AUTH


@pytest.mark.asyncio
async def test_add_to_cart_rejects_non_positive_quantity(storefront, client_user) -> None:
    page = MenuPage(storefront)
    await page.load()

    assert not page.add_to_cart(page.items[0].id, 0)
    assert storefront.cart.is_empty
    assert storefront.toaster.last.is_error
    assert storefront.toaster.last.description == "Quantity must be at least 1"


@pytest.mark.asyncio
async def test_cart_page_controls(storefront, client_user) -> None:
    menu = MenuPage(storefront)
    await menu.load()
    soda = next(i for i in menu.items if i.name == "Soda")
    menu.add_to_cart(soda.id)

    page = CartPage(storefront)
    assert page.open()
    assert page.summary == "1 item in the cart"

    page.increment(soda.id)
    assert page.summary == "2 items in the cart"
    assert page.total_label == "R$ 12.00"

    page.decrement(soda.id)
    page.decrement(soda.id)
    assert page.summary == "Your cart is empty"
    assert not page.checkout()


@pytest.mark.asyncio
async def test_cart_page_requires_user(storefront) -> None:
    assert not CartPage(storefront).open()
    assert storefront.navigator.current == navigation.AUTH


# =============================================================================
# CHECKOUT
# =============================================================================

@pytest.mark.asyncio
async def test_checkout_with_empty_cart_goes_home(storefront, client_user) -> None:
    storefront.navigator.navigate(navigation.CHECKOUT)
    assert not await CheckoutPage(storefront).open()
    assert storefront.navigator.current == navigation.HOME


@pytest.mark.asyncio
async def test_checkout_without_address_is_rejected_locally(storefront, client_user) -> None:
    menu = MenuPage(storefront)
    await menu.load()
    menu.add_to_cart(menu.items[0].id)
    orders_before = len(storefront.sandbox.store.orders)

    page = CheckoutPage(storefront)
    assert await page.open()
    assert page.selected_address_id is None

    assert await page.submit() is None
    assert storefront.toaster.last.description == "Select a delivery address"
    assert len(storefront.sandbox.store.orders) == orders_before
    assert not storefront.cart.is_empty


@pytest.mark.asyncio
async def test_checkout_adds_address_and_places_order(storefront, client_user) -> None:
    menu = MenuPage(storefront)
    await menu.load()
    menu.add_to_cart(menu.items[0].id, 2)

    page = CheckoutPage(storefront)
    assert await page.open()
    assert page.payment_method == PaymentMethod.PIX

    address = await page.add_address(**ADDRESS)
    assert address is not None
    assert address.state == "MG"
    assert page.selected_address_id == address.id

    page.select_payment(PaymentMethod.CASH)
    order = await page.submit()

    assert order is not None
    assert order.payment_method == PaymentMethod.CASH
    assert storefront.cart.is_empty
    assert storefront.navigator.current == navigation.PROFILE
    assert storefront.toaster.last.title == "Order placed!"


@pytest.mark.asyncio
async def test_checkout_rejects_invalid_zip(storefront, client_user) -> None:
    page = CheckoutPage(storefront)
    assert await page.add_address(**{**ADDRESS, "zip_code": "123"}) is None
    assert storefront.toaster.last.description == "Invalid zip code"


# =============================================================================
# PROFILE
# =============================================================================

@pytest.mark.asyncio
async def test_profile_shows_paginated_order_history(storefront, client_user, client_address) -> None:
    await storefront.session.reload_profile()
    for _ in range(3):
        await place_sample_order(storefront)

    page = ProfilePage(storefront, page_size=2)
    assert await page.open()

    assert [a.id for a in page.addresses] == [client_address.id]
    assert page.total_orders == 3
    assert page.total_pages == 2
    assert len(page.orders) == 2
    assert page.orders[0].id > page.orders[1].id

    assert await page.next_page()
    assert page.page == 2
    assert len(page.orders) == 1
    assert not await page.next_page()

    lines = page.order_lines()
    assert lines[0].startswith(f"Order #{page.orders[0].id} - Pending")


@pytest.mark.asyncio
async def test_profile_update_and_address_crud(storefront, client_user) -> None:
    page = ProfilePage(storefront)
    assert await page.open()

    assert await page.update_profile("Ana Maria Souza", "31988887777")
    assert storefront.session.user.name == "Ana Maria Souza"

    created = await page.save_address(**ADDRESS)
    assert created is not None
    updated = await page.save_address(created.id, **{**ADDRESS, "number": "999"})
    assert updated.number == "999"
    assert [a.number for a in page.addresses] == ["999"]

    assert await page.delete_address(created.id)
    assert page.addresses == []


@pytest.mark.asyncio
async def test_profile_logout(storefront, client_user) -> None:
    page = ProfilePage(storefront)
    await page.logout()
    assert not storefront.session.is_authenticated
    assert not storefront.token_store.has_token
    assert storefront.navigator.current == navigation.AUTH


@pytest.mark.asyncio
async def test_delete_account(storefront, client_user) -> None:
    assert await ProfilePage(storefront).delete_account()
    assert not storefront.session.is_authenticated
    assert storefront.sandbox.store.find_user_by_email("ana@example.com") is None


# =============================================================================
# ADMIN
# =============================================================================

@pytest.mark.asyncio
async def test_admin_page_denies_clients(storefront, client_user) -> None:
    page = AdminDashboardPage(storefront)
    assert not await page.open()
    assert storefront.toaster.last.title == "Access denied"
    assert storefront.navigator.current == navigation.HOME


@pytest.mark.asyncio
async def test_admin_page_sends_anonymous_to_auth(storefront) -> None:
    assert not await AdminDashboardPage(storefront).open()
    assert storefront.navigator.current == navigation.AUTH


@pytest.mark.asyncio
async def test_admin_catalog_management(storefront, admin_user) -> None:
    page = AdminDashboardPage(storefront)
    assert await page.open()
    assert any(i.name == "Four Cheese" for i in page.items)

    category = await page.save_category("Salads", "Fresh greens")
    assert category is not None
    assert any(c.name == "Salads" for c in page.categories)

    item = await page.save_item("Caesar Salad", 24.90, category.id, description="Romaine and croutons")
    assert item is not None
    assert page.category_name(item.category_id) == "Salads"

    assert not await page.delete_category(category.id)
    assert storefront.toaster.last.description == "Category still has items"

    renamed = await page.save_item("Caesar Salad XL", 29.90, category.id, item_id=item.id)
    assert renamed.unit_price == 29.90

    assert await page.delete_item(item.id)
    assert await page.delete_category(category.id)
    assert all(c.id != category.id for c in page.categories)


@pytest.mark.asyncio
async def test_admin_item_form_requires_category(storefront, admin_user) -> None:
    page = AdminDashboardPage(storefront)
    assert await page.save_item("Nachos", 18.0, None) is None
    assert storefront.toaster.last.description == "Category is required"


@pytest.mark.asyncio
async def test_admin_order_status_applied_after_success(storefront, client_user, client_address) -> None:
    order_id = await place_sample_order(storefront)
    await storefront.session.logout()
    await storefront.session.login("admin@storefront.dev", "admin123")

    page = AdminDashboardPage(storefront)
    assert await page.open()
    assert page.orders[0].id == order_id

    assert await page.update_order_status(order_id, OrderStatus.CONFIRMED)
    assert page.orders[0].status == OrderStatus.CONFIRMED

    assert not await page.update_order_status(order_id, OrderStatus.PENDING)
    assert page.orders[0].status == OrderStatus.CONFIRMED
    assert storefront.toaster.last.is_error


@pytest.mark.asyncio
async def test_admin_creates_another_admin(storefront, admin_user) -> None:
    page = AdminDashboardPage(storefront)

    assert await page.create_admin("Bruno Lima", "11977776666", "bruno@example.com", "secret123", "secret12") is None
    assert storefront.toaster.last.description == "Passwords do not match"

    user = await page.create_admin("Bruno Lima", "11977776666", "bruno@example.com", "secret123", "secret123")
    assert user is not None
    assert user.is_admin


# =============================================================================
# NOTIFICATIONS
# =============================================================================

@pytest.mark.asyncio
async def test_notifications_panel_tracks_realtime_and_reads(storefront, admin_user) -> None:
    panel = NotificationsPanel(storefront)
    assert await panel.open()
    assert panel.unread_count == 0
    assert panel.badge == ""

    hub = storefront.sandbox.hub
    for n in range(10):
        await hub.notify(admin_user.id, "New order", f"Order #{n}")

    assert len(panel.notifications) == 10
    assert panel.unread_count == 10
    assert panel.badge == "9+"

    newest = panel.notifications[0]
    assert await panel.mark_as_read(newest.id)
    assert panel.unread_count == 9

    assert await panel.mark_all_as_read()
    assert panel.unread_count == 0
    assert all(n.read for n in panel.notifications)

    await panel.load()
    assert panel.unread_count == 0
    panel.close()
