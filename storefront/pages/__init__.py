"""
Pages Module

One class per screen. Each page takes the Storefront container, keeps its
own view state and reports outcomes through toasts and navigation.
"""

from storefront.pages.admin import AdminDashboardPage
from storefront.pages.auth import AuthPage
from storefront.pages.cart import CartPage
from storefront.pages.checkout import CheckoutPage
from storefront.pages.menu import MenuPage
from storefront.pages.notifications import NotificationsPanel
from storefront.pages.profile import ProfilePage, describe_order

__all__ = [
    "AdminDashboardPage",
    "AuthPage",
    "CartPage",
    "CheckoutPage",
    "MenuPage",
    "NotificationsPanel",
    "ProfilePage",
    "describe_order",
]
