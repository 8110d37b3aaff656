"""
Excel styling configuration and utilities.

Provides consistent styling across all diagnostics sheets:
- Color palette
- Font definitions
- Cell style presets
- Header/freeze/filter helpers
"""

from __future__ import annotations

from dataclasses import dataclass

from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet


# ============================================================================
# Color Palette
# ============================================================================


class Colors:
    """Report color palette (hex codes without #)."""

    HEADER_BG = "203764"  # Navy
    HEADER_TEXT = "FFFFFF"
    BORDER = "BFBFBF"


# ============================================================================
# Fonts
# ============================================================================


class Fonts:
    """Font definitions for the report."""

    HEADER = Font(name="Segoe UI", size=11, bold=True, color=Colors.HEADER_TEXT)
    DATA = Font(name="Segoe UI", size=10)
    MONOSPACE = Font(name="Consolas", size=10)


class Fills:
    """Fill definitions for the report."""

    HEADER = PatternFill(
        start_color=Colors.HEADER_BG, end_color=Colors.HEADER_BG, fill_type="solid"
    )


class Borders:
    """Border definitions for the report."""

    HEADER = Border(
        left=Side(style="thin", color=Colors.BORDER),
        right=Side(style="thin", color=Colors.BORDER),
        top=Side(style="thin", color=Colors.BORDER),
        bottom=Side(style="medium", color=Colors.HEADER_BG),
    )


class Alignments:
    """Alignment presets."""

    CENTER_WRAP = Alignment(horizontal="center", vertical="center", wrap_text=True)
    LEFT = Alignment(horizontal="left", vertical="top", wrap_text=False)
    LEFT_WRAP = Alignment(horizontal="left", vertical="top", wrap_text=True)


# ============================================================================
# Column Definition
# ============================================================================


MIN_COLUMN_WIDTH = 8
MAX_COLUMN_WIDTH = 60


@dataclass
class ColumnDef:
    """
    Column definition for a report sheet.

    Attributes:
        name: Column header text
        width: Column width in characters
        alignment: Data cell alignment
        is_monospace: If True, use monospace font for data cells
    """

    name: str
    width: int = 12
    alignment: Alignment = Alignments.LEFT
    is_monospace: bool = False


def fit_width(*texts: str) -> int:
    """Column width wide enough for the longest text, within sane bounds."""
    longest = max((len(text) for text in texts if text), default=0)
    return max(MIN_COLUMN_WIDTH, min(MAX_COLUMN_WIDTH, longest + 2))


# ============================================================================
# Helper Functions
# ============================================================================


def apply_header_row(ws: Worksheet, columns: list[ColumnDef], row: int = 1) -> None:
    """
    Apply header styling to a row.

    Args:
        ws: Worksheet
        columns: List of column definitions
        row: Row number (1-indexed)
    """
    for col_idx, col_def in enumerate(columns, start=1):
        cell = ws.cell(row=row, column=col_idx)
        cell.value = col_def.name
        cell.font = Fonts.HEADER
        cell.fill = Fills.HEADER
        cell.alignment = Alignments.CENTER_WRAP
        cell.border = Borders.HEADER

        ws.column_dimensions[get_column_letter(col_idx)].width = col_def.width


def freeze_panes(ws: Worksheet, row: int = 2, col: int = 1) -> None:
    """
    Freeze panes in a worksheet.

    Args:
        ws: Worksheet
        row: First unfrozen row (freeze rows above)
        col: First unfrozen column (freeze columns to the left)
    """
    ws.freeze_panes = ws.cell(row=row, column=col)


def add_autofilter(
    ws: Worksheet, columns: list[ColumnDef], header_row: int = 1
) -> None:
    """
    Add autofilter to header row.

    Args:
        ws: Worksheet
        columns: Column definitions
        header_row: Header row number
    """
    if not columns:
        return
    last_col = get_column_letter(len(columns))
    ws.auto_filter.ref = f"A{header_row}:{last_col}{header_row}"
