"""
Tabular sink base module.

Defines the sink interface shared by the direct workbook writer and the
CSV staging writer, plus the worksheet builder both of them use to lay
out a styled sheet.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Any, Sequence

from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from sqldiagnostics.infrastructure.excel_styles import (
    Alignments,
    ColumnDef,
    Fonts,
    add_autofilter,
    apply_header_row,
    fit_width,
    freeze_panes,
)

if TYPE_CHECKING:
    from sqldiagnostics.domain.catalog import QueryCatalog


logger = logging.getLogger(__name__)


__all__ = [
    "INDEX_COLUMNS",
    "MAX_CELL_LENGTH",
    "SheetBuilder",
    "TabularSink",
    "excel_safe",
    "index_rows",
    "text_columns",
]


# Excel refuses cells longer than this
MAX_CELL_LENGTH = 32767

INDEX_COLUMNS = [
    ColumnDef(name="Sr.No", width=8),
    ColumnDef(name="Query", width=80, alignment=Alignments.LEFT_WRAP, is_monospace=True),
    ColumnDef(name="Query Notes", width=60, alignment=Alignments.LEFT_WRAP),
]


def excel_safe(text: str) -> str:
    """Drop control characters openpyxl rejects and respect the cell size limit."""
    text = ILLEGAL_CHARACTERS_RE.sub("", text)
    if len(text) > MAX_CELL_LENGTH:
        logger.debug("Truncating cell value of %d characters", len(text))
        text = text[:MAX_CELL_LENGTH]
    return text


def index_rows(catalog: QueryCatalog) -> list[list[str]]:
    """
    Rows of the index unit: position, raw statement text, notes.

    The statement (not the query name) is listed so the index is an audit
    trail of exactly what ran.
    """
    return [
        [str(position), definition.query, definition.notes]
        for position, definition in catalog.enumerate()
    ]


class SheetBuilder:
    """
    Writes one header row and any number of data rows into a worksheet.

    All values are written as text. With ``auto_width`` the column widths
    follow the content and are applied by ``close()``.
    """

    def __init__(self, ws: Worksheet):
        self.ws = ws
        self._columns: list[ColumnDef] = []
        self._widths: list[int] = []
        self._auto_width = True
        self._next_row = 1

    @property
    def row_count(self) -> int:
        """Data rows written so far (header excluded)."""
        return max(0, self._next_row - 2)

    def header(self, columns: Sequence[ColumnDef], auto_width: bool = True) -> None:
        self._columns = list(columns)
        self._auto_width = auto_width
        self._widths = [
            fit_width(col.name) if auto_width else col.width for col in self._columns
        ]

        apply_header_row(self.ws, self._columns)
        if self._columns:
            freeze_panes(self.ws)
            add_autofilter(self.ws, self._columns)
        self._next_row = 2

    def row(self, values: Sequence[str]) -> None:
        row_idx = self._next_row
        for col_idx, value in enumerate(values, start=1):
            text = excel_safe(value)
            cell = self.ws.cell(row=row_idx, column=col_idx, value=text)
            # keep text starting with "=" from being read as a formula
            cell.data_type = "s"

            if col_idx > len(self._columns):
                continue
            col_def = self._columns[col_idx - 1]
            cell.alignment = col_def.alignment
            cell.font = Fonts.MONOSPACE if col_def.is_monospace else Fonts.DATA
            if self._auto_width:
                self._widths[col_idx - 1] = max(self._widths[col_idx - 1], fit_width(text))
        self._next_row += 1

    def close(self) -> None:
        for col_idx, width in enumerate(self._widths, start=1):
            self.ws.column_dimensions[get_column_letter(col_idx)].width = width


def text_columns(names: Sequence[str]) -> list[ColumnDef]:
    """Column definitions for result-set column names."""
    return [ColumnDef(name=excel_safe(str(name))) for name in names]


class TabularSink(ABC):
    """
    Destination for one run's output units.

    Call order per run: ``write_index_unit`` once, then for each query
    ``begin_unit``, ``write_header`` and ``write_row`` repeatedly, all
    before the next ``begin_unit``; finally ``finalize``. ``close`` releases
    whatever the sink holds and is safe to call on every exit path.
    """

    @abstractmethod
    def unit_name(self, position: int, query_name: str) -> str:
        """Name of the output unit for the catalog entry at ``position``."""

    @abstractmethod
    def write_index_unit(self, catalog: QueryCatalog) -> None:
        """Write the index unit listing every catalog statement."""

    @abstractmethod
    def begin_unit(self, name: str) -> None:
        """Start a new output unit."""

    @abstractmethod
    def write_header(self, columns: Sequence[str]) -> None:
        """Write the current unit's header row."""

    @abstractmethod
    def write_row(self, cells: Sequence[Any]) -> None:
        """Write one row of raw values to the current unit."""

    @abstractmethod
    def finalize(self, output_path: Path) -> Path:
        """Assemble and persist the workbook at ``output_path``."""

    def close(self) -> None:
        """Release resources held by the sink."""

    def __enter__(self) -> "TabularSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
