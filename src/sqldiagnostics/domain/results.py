"""
Tabular query results and cell rendering.

Every value ends up as text in the workbook. Embedded line breaks are
flattened because they corrupt CSV row framing and spreadsheet display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

NULL_TEXT = "NULL"


def render_cell(value: Any) -> str:
    """
    Collapse a driver value to its display string.

    - None -> "NULL"
    - bytes-like -> decoded as UTF-8 (undecodable bytes replaced)
    - anything else -> str(value)

    Each ``\\n`` and ``\\r`` is then replaced with a single space.
    """
    if value is None:
        return NULL_TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        text = bytes(value).decode("utf-8", errors="replace")
    else:
        text = str(value)
    return text.replace("\n", " ").replace("\r", " ")


@dataclass
class TabularResult:
    """Column names plus raw row values from one statement."""

    columns: list[str] = field(default_factory=list)
    rows: list[tuple[Any, ...]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.columns
