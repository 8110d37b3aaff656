"""
Configuration infrastructure package.
"""

from .repository import ConfigRepository, parse_trusted

__all__ = ["ConfigRepository", "parse_trusted"]
