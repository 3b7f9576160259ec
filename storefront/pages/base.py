"""Shared plumbing for pages: access to the container plus guard helpers."""

import logging
from typing import TYPE_CHECKING

from storefront.ui import navigation

if TYPE_CHECKING:
    from storefront.app import Storefront

logger = logging.getLogger(__name__)


class BasePage:
    """
    A screen of the storefront.

    Pages hold their own view state and report every outcome through the
    toaster; errors from the API layer are caught here and never re-raised.
    """

    def __init__(self, storefront: "Storefront"):
        self.storefront = storefront
        self.is_loading = False

    @property
    def client(self):
        return self.storefront.client

    @property
    def session(self):
        return self.storefront.session

    @property
    def cart(self):
        return self.storefront.cart

    @property
    def toaster(self):
        return self.storefront.toaster

    @property
    def navigator(self):
        return self.storefront.navigator

    def require_user(self) -> bool:
        """Send anonymous visitors to the sign-in page."""
        if self.session.is_authenticated:
            return True
        self.navigator.navigate(navigation.AUTH)
        return False

    def report(self, error: Exception, title: str) -> None:
        logger.info(f"{type(self).__name__}: {title}: {error}")
        self.toaster.show_error(error, title)
