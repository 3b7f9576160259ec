"""
Sandbox Backend

In-memory stand-in for the storefront REST API, used in development mode.

Usage:
    from storefront.sandbox import create_sandbox

    sandbox = create_sandbox(settings)
    transport = sandbox.transport()   # plug into ApiClient
    hub = sandbox.hub                 # plug into MockRealtimeService
"""

from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import FastAPI

from storefront.core.config import Settings, get_settings
from storefront.sandbox.app import create_app
from storefront.sandbox.hub import NotificationHub
from storefront.sandbox.store import SandboxError, SandboxStore


@dataclass
class Sandbox:
    app: FastAPI
    store: SandboxStore
    hub: NotificationHub

    def transport(self) -> httpx.ASGITransport:
        """Transport routing httpx requests straight into the app."""
        return httpx.ASGITransport(app=self.app)


def create_sandbox(settings: Optional[Settings] = None, seed: bool = True) -> Sandbox:
    """
    Build a sandbox backend.

    Args:
        settings: Settings to use (defaults to the cached settings)
        seed: Create the administrator and demo menu

    Returns:
        Sandbox: App, store and hub sharing the same state
    """
    settings = settings or get_settings()

    store = SandboxStore(access_token_ttl=settings.sandbox_access_token_ttl)
    if seed:
        store.seed(settings.sandbox_admin_email, settings.sandbox_admin_password)

    hub = NotificationHub(store)
    app = create_app(store, hub, prefix=settings.api_prefix, debug=settings.debug)
    return Sandbox(app=app, store=store, hub=hub)


__all__ = [
    "Sandbox",
    "SandboxError",
    "SandboxStore",
    "NotificationHub",
    "create_sandbox",
]
