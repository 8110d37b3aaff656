"""
Configuration domain models package.
"""

from .connection_settings import ConnectionSettings
from .run_settings import DEFAULT_CATALOG_FILE, DEFAULT_CONFIG_FILE, RunSettings

__all__ = [
    "ConnectionSettings",
    "DEFAULT_CATALOG_FILE",
    "DEFAULT_CONFIG_FILE",
    "RunSettings",
]
