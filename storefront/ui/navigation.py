"""Client-side router stand-in: current path plus history."""

import logging

logger = logging.getLogger(__name__)

HOME = "/"
AUTH = "/auth"
CART = "/cart"
CHECKOUT = "/checkout"
PROFILE = "/profile"
ADMIN = "/admin"


class Navigator:
    def __init__(self, start: str = HOME):
        self.history: list[str] = [start]

    @property
    def current(self) -> str:
        return self.history[-1]

    def navigate(self, path: str) -> None:
        if path == self.current:
            return
        logger.debug(f"Navigate: {self.current} -> {path}")
        self.history.append(path)

    def back(self) -> str:
        if len(self.history) > 1:
            self.history.pop()
        return self.current
