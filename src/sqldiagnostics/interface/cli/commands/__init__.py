"""
CLI commands package.
"""

from .catalog_command import catalog_command
from .run_command import RunCommand, run_command

__all__ = ["RunCommand", "catalog_command", "run_command"]
