from __future__ import annotations

import argparse

import pytest

from storefront.cli import build_parser, main, parse_item
from storefront.core.config import get_settings


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Development-mode settings pointing the storage file into tmp_path."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ENV_MODE", "development")
    monkeypatch.setenv("DATA_DIRECTORY", str(tmp_path))
    monkeypatch.delenv("API_PREFIX", raising=False)
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


def test_parse_item() -> None:
    assert parse_item("4") == (4, 1)
    assert parse_item("4:3") == (4, 3)


@pytest.mark.parametrize("value", ["abc", "4:x", "4:0"])
def test_parse_item_rejects_bad_values(value: str) -> None:
    with pytest.raises(argparse.ArgumentTypeError):
        parse_item(value)


def test_order_requires_items() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["order"])


def test_menu_lists_available_items(cli_env, capsys) -> None:
    assert main(["menu"]) == 0
    out = capsys.readouterr().out
    assert "Margherita" in out
    assert "R$ 42.90" in out
    assert "Four Cheese" not in out


def test_whoami_signs_in_first(cli_env, capsys) -> None:
    code = main(["whoami", "--email", "admin@storefront.dev", "--password", "admin123"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Signed in successfully!" in out
    assert "Administrator <admin@storefront.dev> (ADMIN)" in out


def test_failed_login_exits_nonzero(cli_env, capsys) -> None:
    assert main(["login", "admin@storefront.dev", "--password", "wrong-password"]) == 1
    err = capsys.readouterr().err
    assert "Login failed: Invalid email or password" in err
