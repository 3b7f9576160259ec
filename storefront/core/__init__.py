"""
Core module initialization.
Exports configuration, logging utilities and the error taxonomy.
"""

from storefront.core.config import get_settings, setup_logging, Settings, EnvironmentMode
from storefront.core.errors import (
    StorefrontError,
    ValidationFailure,
    ApiFailure,
    UnknownFailure,
    transform_api_error,
)

__all__ = [
    "get_settings",
    "setup_logging",
    "Settings",
    "EnvironmentMode",
    "StorefrontError",
    "ValidationFailure",
    "ApiFailure",
    "UnknownFailure",
    "transform_api_error",
]
