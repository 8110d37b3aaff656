"""
Direct workbook sink.

Writes every output unit straight into an openpyxl workbook, one
worksheet per unit, with no intermediate files. The index sheet is always
the first sheet; data sheets follow in processing order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Sequence

from openpyxl import Workbook

from sqldiagnostics.domain.errors import SinkWriteError
from sqldiagnostics.domain.naming import INDEX_UNIT_NAME, worksheet_name
from sqldiagnostics.domain.results import render_cell
from sqldiagnostics.infrastructure.excel.base import (
    INDEX_COLUMNS,
    SheetBuilder,
    TabularSink,
    index_rows,
    text_columns,
)

if TYPE_CHECKING:
    from sqldiagnostics.domain.catalog import QueryCatalog

logger = logging.getLogger(__name__)


class WorkbookSink(TabularSink):
    """Tabular sink backed by an in-memory openpyxl Workbook."""

    def __init__(self):
        self.wb = Workbook()
        # Remove default sheet
        if "Sheet" in self.wb.sheetnames:
            del self.wb["Sheet"]
        self._current: SheetBuilder | None = None

    def unit_name(self, position: int, query_name: str) -> str:
        return worksheet_name(position, query_name)

    def write_index_unit(self, catalog: QueryCatalog) -> None:
        self._close_current()
        ws = self.wb.create_sheet(INDEX_UNIT_NAME, 0)
        builder = SheetBuilder(ws)
        builder.header(INDEX_COLUMNS, auto_width=False)
        for row in index_rows(catalog):
            builder.row(row)
        builder.close()
        logger.debug("Index sheet written with %d entries", builder.row_count)

    def begin_unit(self, name: str) -> None:
        self._close_current()
        if name in self.wb.sheetnames:
            raise SinkWriteError(f"Duplicate sheet name '{name}'")
        self._current = SheetBuilder(self.wb.create_sheet(name))
        logger.debug("Adding sheet %s", name)

    def write_header(self, columns: Sequence[str]) -> None:
        self._require_current().header(text_columns(columns))

    def write_row(self, cells: Sequence[Any]) -> None:
        self._require_current().row([render_cell(value) for value in cells])

    def finalize(self, output_path: Path) -> Path:
        self._close_current()
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self.wb.save(output_path)
        except OSError as e:
            raise SinkWriteError(f"Error saving Excel file {output_path}: {e}") from e

        logger.info(
            "Workbook saved: %s (%d sheets)", output_path, len(self.wb.sheetnames)
        )
        return output_path

    def _require_current(self) -> SheetBuilder:
        if self._current is None:
            raise SinkWriteError("No output unit started; call begin_unit first")
        return self._current

    def _close_current(self) -> None:
        if self._current is not None:
            self._current.close()
            self._current = None
