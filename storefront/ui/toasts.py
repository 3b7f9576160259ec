"""
Toast Notifications

Pages report outcomes as toasts. The Toaster keeps the most recent ones
(the CLI prints them as they arrive, tests inspect them) and maps the
error taxonomy:

    ValidationFailure -> one toast per message
    ApiFailure        -> one toast carrying the message
    anything else     -> one generic toast
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from storefront.core.errors import ApiFailure, StorefrontError, ValidationFailure, DEFAULT_API_MESSAGE

logger = logging.getLogger(__name__)


class ToastVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


@dataclass(frozen=True)
class Toast:
    title: str
    description: Optional[str] = None
    variant: ToastVariant = ToastVariant.DEFAULT

    @property
    def is_error(self) -> bool:
        return self.variant == ToastVariant.DESTRUCTIVE


MAX_TOASTS = 50


class Toaster:
    """Keeps the most recent toasts and forwards each one to an optional sink."""

    def __init__(self, sink: Optional[Callable[[Toast], None]] = None, max_toasts: int = MAX_TOASTS):
        self.toasts: deque[Toast] = deque(maxlen=max_toasts)
        self._sink = sink

    def show(
        self,
        title: str,
        description: Optional[str] = None,
        variant: ToastVariant = ToastVariant.DEFAULT,
    ) -> Toast:
        toast = Toast(title=title, description=description, variant=variant)
        self.toasts.append(toast)
        logger.debug(f"Toast: {title} - {description}")
        if self._sink is not None:
            self._sink(toast)
        return toast

    def success(self, title: str, description: Optional[str] = None) -> Toast:
        return self.show(title, description)

    def error(self, title: str, description: Optional[str] = None) -> Toast:
        return self.show(title, description, ToastVariant.DESTRUCTIVE)

    def show_error(self, error: Exception, title: str = "Something went wrong") -> list[Toast]:
        """Turn a normalized error into destructive toasts."""
        if isinstance(error, ValidationFailure):
            return [self.error("Validation error", message) for message in error.messages]
        if isinstance(error, ApiFailure):
            return [self.error(title, error.message)]
        if isinstance(error, StorefrontError):
            return [self.error(title, str(error) or DEFAULT_API_MESSAGE)]
        logger.error(f"Unnormalized error reached the UI: {error!r}")
        return [self.error(title, DEFAULT_API_MESSAGE)]

    def dismiss_all(self) -> None:
        self.toasts.clear()

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None
