from __future__ import annotations

import logging

import httpx
import pytest
from pydantic import ValidationError

from storefront.app import create_storefront
from storefront.auth.token_store import MemoryStorage
from storefront.core.config import EnvironmentMode, Settings


def make(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.mark.parametrize("raw, expected", [
    ("", ""),
    ("/", ""),
    ("api", "/api"),
    ("/api/", "/api"),
    (" /v1/api ", "/v1/api"),
])
def test_prefix_is_normalized(raw: str, expected: str) -> None:
    assert make(api_prefix=raw).api_prefix == expected


def test_env_mode_is_case_insensitive() -> None:
    assert make(env_mode="STAGING").env_mode == EnvironmentMode.STAGING


def test_unknown_env_mode_is_rejected() -> None:
    with pytest.raises(ValidationError):
        make(env_mode="qa")


def test_development_uses_sandbox_url() -> None:
    settings = make(env_mode="development", api_base_url="https://api.example.com")
    assert settings.use_sandbox
    assert settings.base_url == settings.sandbox_base_url


def test_staging_uses_api_url_without_trailing_slash() -> None:
    settings = make(env_mode="staging", api_base_url="http://localhost:3000/")
    assert not settings.use_sandbox
    assert settings.base_url == "http://localhost:3000"


def test_realtime_url_is_derived_from_api_url() -> None:
    assert make(api_base_url="http://localhost:3000", api_prefix="api").resolved_realtime_url == (
        "ws://localhost:3000/api/ws"
    )
    assert make(api_base_url="https://shop.example.com").resolved_realtime_url == "wss://shop.example.com/ws"
    assert make(realtime_url="wss://push.example.com/socket").resolved_realtime_url == (
        "wss://push.example.com/socket"
    )


def test_storage_path(tmp_path) -> None:
    settings = make(data_directory=str(tmp_path), storage_filename="state.json")
    assert settings.storage_path == tmp_path / "state.json"


def test_production_config_validation() -> None:
    assert make(env_mode="development").validate_production_config() == []
    assert make(env_mode="production", api_base_url="https://api.example.com").validate_production_config() == []
    assert make(env_mode="production", api_base_url="http://localhost:3000").validate_production_config() == [
        "API_BASE_URL"
    ]
    assert make(env_mode="staging", api_base_url="api.example.com").validate_production_config() == [
        "API_BASE_URL"
    ]


@pytest.mark.asyncio
async def test_start_warns_about_missing_config(caplog) -> None:
    settings = make(env_mode="production", api_base_url="http://localhost:3000")
    storefront = create_storefront(
        settings,
        transport=httpx.MockTransport(lambda request: httpx.Response(404)),
        storage=MemoryStorage(),
    )

    with caplog.at_level(logging.WARNING, logger="storefront.app"):
        await storefront.start()
    await storefront.close()

    assert "Missing production config: ['API_BASE_URL']" in caplog.text


@pytest.mark.asyncio
async def test_start_skips_config_check_in_development(settings, caplog) -> None:
    storefront = create_storefront(settings, storage=MemoryStorage())

    with caplog.at_level(logging.WARNING, logger="storefront.app"):
        await storefront.start()
    await storefront.close()

    assert "Missing" not in caplog.text
