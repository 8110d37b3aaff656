"""
Output unit naming.

Turns a catalog entry's 1-based position and free-text name into a
worksheet name or a staging file name. Both the index unit and the data
units recompute these names independently, so every function here is
pure and deterministic.
"""

from __future__ import annotations

import re

# Excel hard limit on sheet title length
MAX_SHEET_NAME_LENGTH = 31

INDEX_UNIT_NAME = "executed_queries"
CSV_SUFFIX = ".csv"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_]+")
_SHEET_FORBIDDEN_CHARS = re.compile(r"[\\/?*\[\]:]")
_POSITION_PREFIX = re.compile(r"^(\d+)_")


def _check_position(position: int) -> None:
    if isinstance(position, bool) or not isinstance(position, int) or position < 1:
        raise ValueError(f"Position must be a positive integer, got {position!r}")


def _clean(raw_name: str) -> str:
    """Spaces become underscores, everything outside [A-Za-z0-9_] is dropped."""
    return _UNSAFE_CHARS.sub("", (raw_name or "").replace(" ", "_"))


def _prefixed(position: int, cleaned: str) -> str:
    prefix = f"{position}_"
    if cleaned.startswith(prefix):
        return cleaned
    return prefix + cleaned


def worksheet_name(position: int, raw_name: str) -> str:
    """
    Build a worksheet name for the catalog entry at ``position``.

    The result is at most 31 characters, never contains any of
    ``\\ / ? * [ ] :`` and always starts with ``"<position>_"`` unless the
    prefix alone would not fit.

    Example:
        >>> worksheet_name(1, "Sample Query Name!")
        '1_Sample_Query_Name'
    """
    _check_position(position)
    cleaned = _SHEET_FORBIDDEN_CHARS.sub("", _clean(raw_name))
    name = _prefixed(position, cleaned)

    if len(name) <= MAX_SHEET_NAME_LENGTH:
        return name

    prefix = f"{position}_"
    if len(prefix) >= MAX_SHEET_NAME_LENGTH:
        return str(position)[:MAX_SHEET_NAME_LENGTH]

    remainder = name[len(prefix):]
    return prefix + remainder[: MAX_SHEET_NAME_LENGTH - len(prefix)]


def csv_file_name(position: int, raw_name: str) -> str:
    """
    Build a staging file name for the catalog entry at ``position``.

    No length cap applies.

    Example:
        >>> csv_file_name(1, "Sample Query Name!")
        '1_Sample_Query_Name.csv'
    """
    _check_position(position)
    return _prefixed(position, _clean(raw_name)) + CSV_SUFFIX


def position_of(unit_name: str) -> int | None:
    """Return the numeric prefix of a unit or file name, or None."""
    match = _POSITION_PREFIX.match(unit_name)
    if not match:
        return None
    return int(match.group(1))
