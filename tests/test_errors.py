from __future__ import annotations

import httpx
import pytest

from storefront.core.errors import (
    DEFAULT_API_MESSAGE,
    NETWORK_MESSAGE,
    ApiFailure,
    UnknownFailure,
    ValidationFailure,
    transform_api_error,
    translate_errors,
)
from storefront.schemas import LoginForm, validate_form


def _status_error(status: int, body=None, content: bytes = b"") -> httpx.HTTPStatusError:
    request = httpx.Request("GET", "http://api.test/items")
    if body is not None:
        response = httpx.Response(status, json=body, request=request)
    else:
        response = httpx.Response(status, content=content, request=request)
    return httpx.HTTPStatusError("failed", request=request, response=response)


def test_errors_list_becomes_validation_failure() -> None:
    err = transform_api_error(_status_error(400, {
        "errors": [
            {"code": "too_small", "path": ["name"], "message": "Name too short"},
            {"code": "invalid_string", "path": ["email"], "message": "Invalid email"},
        ]
    }))
    assert isinstance(err, ValidationFailure)
    assert err.kind == "validation"
    assert err.messages == ["Name too short", "Invalid email"]


def test_empty_errors_list_falls_back_to_message() -> None:
    err = transform_api_error(_status_error(400, {"errors": [], "message": "Bad input"}))
    assert isinstance(err, ApiFailure)
    assert err.message == "Bad input"


def test_message_field_becomes_api_failure_with_status() -> None:
    err = transform_api_error(_status_error(404, {"message": "Item #9 not found"}))
    assert isinstance(err, ApiFailure)
    assert err.kind == "api"
    assert err.message == "Item #9 not found"
    assert err.status_code == 404


def test_error_field_is_used_when_message_missing() -> None:
    err = transform_api_error(_status_error(403, {"error": "Forbidden"}))
    assert err.message == "Forbidden"


def test_unparseable_body_gets_default_message() -> None:
    err = transform_api_error(_status_error(500, content=b"<html>oops</html>"))
    assert isinstance(err, ApiFailure)
    assert err.message == DEFAULT_API_MESSAGE
    assert err.status_code == 500


def test_transport_error_becomes_network_api_failure() -> None:
    request = httpx.Request("GET", "http://api.test/items")
    err = transform_api_error(httpx.ConnectError("refused", request=request))
    assert isinstance(err, ApiFailure)
    assert err.message == NETWORK_MESSAGE
    assert err.status_code is None


def test_pydantic_error_becomes_validation_failure() -> None:
    with pytest.raises(ValidationFailure) as info:
        validate_form(LoginForm, email="not-an-email", password="123")
    assert "Invalid email" in info.value.messages
    assert "Password must have at least 6 characters" in info.value.messages


def test_normalized_errors_pass_through() -> None:
    original = ApiFailure("already normalized", 409)
    assert transform_api_error(original) is original


def test_anything_else_is_unknown() -> None:
    err = transform_api_error(KeyError("user"))
    assert isinstance(err, UnknownFailure)
    assert err.kind == "unknown"
    assert err.message == DEFAULT_API_MESSAGE


@pytest.mark.asyncio
async def test_translate_errors_decorator_normalizes_and_chains() -> None:
    @translate_errors
    async def call() -> None:
        raise _status_error(401, {"message": "Invalid email or password"})

    with pytest.raises(ApiFailure) as info:
        await call()
    assert info.value.message == "Invalid email or password"
    assert isinstance(info.value.__cause__, httpx.HTTPStatusError)
