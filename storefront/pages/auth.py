"""
Sign-in / Sign-up Page

Login reports a failure with exactly one toast and stays on /auth; a
successful login goes to the menu. Signup creates the account but does not
sign in.
"""

import logging

from storefront.core.errors import StorefrontError
from storefront.pages.base import BasePage
from storefront.schemas import LoginForm, SignupForm, validate_form
from storefront.ui import navigation

logger = logging.getLogger(__name__)


class AuthPage(BasePage):

    async def login(self, email: str, password: str) -> bool:
        self.is_loading = True
        try:
            form = validate_form(LoginForm, email=email, password=password)
            await self.session.login(form.email, form.password)
        except StorefrontError as exc:
            self.toaster.error("Login failed", str(exc) or "Check your credentials")
            return False
        finally:
            self.is_loading = False

        self.toaster.success("Signed in successfully!")
        self.navigator.navigate(navigation.HOME)
        return True

    async def signup(self, name: str, phone: str, email: str, password: str) -> bool:
        self.is_loading = True
        try:
            form = validate_form(SignupForm, name=name, phone=phone, email=email, password=password)
            await self.session.signup(form.email, form.password, form.name, form.phone)
        except StorefrontError as exc:
            self.report(exc, "Sign up failed")
            return False
        finally:
            self.is_loading = False

        self.toaster.success("Account created!", "You can sign in now")
        return True
