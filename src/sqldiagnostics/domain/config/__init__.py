"""
Configuration domain package.

This package contains the domain layer for connection and run settings.
"""

from .models import (
    DEFAULT_CATALOG_FILE,
    DEFAULT_CONFIG_FILE,
    ConnectionSettings,
    RunSettings,
)

__all__ = [
    "ConnectionSettings",
    "DEFAULT_CATALOG_FILE",
    "DEFAULT_CONFIG_FILE",
    "RunSettings",
]
