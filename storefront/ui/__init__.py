"""UI plumbing shared by the pages: toasts and navigation."""

from storefront.ui.navigation import Navigator
from storefront.ui.toasts import Toast, Toaster, ToastVariant

__all__ = ["Navigator", "Toast", "Toaster", "ToastVariant"]
