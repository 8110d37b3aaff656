"""
CLI main entry point.

This module provides the main entry point for the sqldiagnostics CLI,
delegating to the typer application in the orchestrator package.
"""

from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the sqldiagnostics CLI.

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    # Import here to avoid circular imports
    from .orchestrator import app

    try:
        app(args=argv, prog_name="sqldiagnostics")
    except SystemExit as e:
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    return 0
