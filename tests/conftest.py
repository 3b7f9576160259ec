"""Shared fixtures: settings, an in-process sandbox and a started storefront."""
from __future__ import annotations

import pytest
import pytest_asyncio

from storefront.api import addresses as addresses_api
from storefront.app import Storefront, create_storefront
from storefront.auth.token_store import MemoryStorage
from storefront.core.config import EnvironmentMode, Settings
from storefront.schemas import AddressCreate, Address, User

CLIENT_EMAIL = "ana@example.com"
CLIENT_PASSWORD = "secret123"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        env_mode=EnvironmentMode.DEVELOPMENT,
        debug=False,
        api_prefix="",
        data_directory=str(tmp_path),
        sandbox_admin_email="admin@storefront.dev",
        sandbox_admin_password="admin123",
    )


@pytest_asyncio.fixture
async def storefront(settings: Settings) -> Storefront:
    """Development-mode storefront backed by its own seeded sandbox."""
    app = create_storefront(settings, storage=MemoryStorage())
    await app.start()
    try:
        yield app
    finally:
        await app.close()


@pytest_asyncio.fixture
async def client_user(storefront: Storefront) -> User:
    """A signed-in client account."""
    await storefront.session.signup(CLIENT_EMAIL, CLIENT_PASSWORD, "Ana Souza", "11999998888")
    return await storefront.session.login(CLIENT_EMAIL, CLIENT_PASSWORD)


@pytest_asyncio.fixture
async def client_address(storefront: Storefront, client_user: User) -> Address:
    return await addresses_api.create_address(
        storefront.client,
        AddressCreate(
            street="Rua das Flores",
            number="120",
            district="Centro",
            city="Belo Horizonte",
            state="MG",
            zip_code="30110-012",
        ),
    )


@pytest_asyncio.fixture
async def admin_user(storefront: Storefront) -> User:
    """Signed in as the seeded administrator."""
    return await storefront.session.login("admin@storefront.dev", "admin123")
