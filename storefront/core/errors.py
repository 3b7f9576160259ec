"""
Error Taxonomy

Every failure that reaches a page is one of three shapes:
    - ValidationFailure: one or more human-readable field messages, either
      from the server's validation response or from a local form check
    - ApiFailure: a single message for any other failure (not found,
      forbidden, server error, network failure)
    - UnknownFailure: fallback when a raised value matches neither

API modules normalize with ``transform_api_error`` (usually through the
``translate_errors`` decorator) and pages match on the exception class.

Usage:
    try:
        await items.fetch_items(client)
    except ValidationFailure as err:
        for message in err.messages: ...
    except ApiFailure as err:
        print(err.message)
"""

import functools
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
from pydantic import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_API_MESSAGE = "An unexpected error occurred."
NETWORK_MESSAGE = "Could not reach the server. Check your connection and try again."

T = TypeVar("T")


class StorefrontError(Exception):
    """Base class of the normalized error taxonomy."""

    kind: str = "unknown"

    @property
    def messages(self) -> list[str]:
        """All human-readable messages carried by the error."""
        return [str(self)]


class ValidationFailure(StorefrontError):
    """One or more field-level validation messages."""

    kind = "validation"

    def __init__(self, messages: list[str]):
        self._messages = list(messages)
        super().__init__("; ".join(self._messages))

    @property
    def messages(self) -> list[str]:
        return list(self._messages)


class ApiFailure(StorefrontError):
    """A single message describing a non-validation failure."""

    kind = "api"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UnknownFailure(StorefrontError):
    """Raised value that matched neither known shape."""

    kind = "unknown"

    def __init__(self, message: str = DEFAULT_API_MESSAGE):
        self.message = message
        super().__init__(message)


def _response_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def describe_validation_error(exc: ValidationError) -> list[str]:
    """Flatten pydantic errors into form messages."""
    messages = []
    for error in exc.errors():
        message = error.get("msg", "Invalid value")
        # field_validator errors come prefixed with "Value error, "
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        messages.append(message)
    return messages


def transform_api_error(exc: BaseException) -> StorefrontError:
    """
    Normalize any failure raised while talking to the API.

    Args:
        exc: The raised exception

    Returns:
        StorefrontError: ValidationFailure, ApiFailure or UnknownFailure
    """
    if isinstance(exc, StorefrontError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        response = exc.response
        body = _response_body(response)
        errors = body.get("errors")
        if isinstance(errors, list) and errors:
            messages = [
                e.get("message", DEFAULT_API_MESSAGE) if isinstance(e, dict) else str(e)
                for e in errors
            ]
            return ValidationFailure(messages)

        message = body.get("message") or body.get("error") or DEFAULT_API_MESSAGE
        return ApiFailure(str(message), status_code=response.status_code)

    if isinstance(exc, httpx.RequestError):
        logger.warning(f"Transport error talking to the API: {exc!r}")
        return ApiFailure(NETWORK_MESSAGE)

    if isinstance(exc, ValidationError):
        return ValidationFailure(describe_validation_error(exc))

    logger.error(f"Unexpected error type {type(exc).__name__}: {exc}")
    return UnknownFailure()


def translate_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    """Decorate an async API call so every failure leaves normalized."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except Exception as exc:
            raise transform_api_error(exc) from exc

    return wrapper
