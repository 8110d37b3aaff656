"""
CSV staging sink and merge step.

Each output unit is first written to its own CSV file in a private
staging directory. ``finalize`` merges the files into a single workbook:
the index file first, the rest ordered by their numeric prefix, and then
deletes the staged files.
"""

from __future__ import annotations

import csv
import logging
import re
import shutil
import tempfile
from pathlib import Path
from typing import IO, TYPE_CHECKING, Any, Sequence

from openpyxl import Workbook

from sqldiagnostics.domain.errors import SinkWriteError
from sqldiagnostics.domain.naming import (
    CSV_SUFFIX,
    INDEX_UNIT_NAME,
    MAX_SHEET_NAME_LENGTH,
    csv_file_name,
    position_of,
    worksheet_name,
)
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

INDEX_FILE_NAME = INDEX_UNIT_NAME + CSV_SUFFIX
STAGING_PREFIX = "sql_diagnostics_"

# execution plans and XML columns easily exceed the csv module default
_FIELD_SIZE_LIMIT = 2**31 - 1
_SHEET_FORBIDDEN_CHARS = re.compile(r"[\\/?*\[\]:]")


def _staging_sort_key(path: Path) -> tuple:
    position = position_of(path.name)
    if position is None:
        return (1, 0, path.name)
    return (0, position, path.name)


def _sheet_name_for(path: Path) -> str:
    stem = path.name[: -len(CSV_SUFFIX)]
    if path.name == INDEX_FILE_NAME:
        return INDEX_UNIT_NAME
    position = position_of(stem)
    if position is not None and position > 0:
        return worksheet_name(position, stem)
    return _SHEET_FORBIDDEN_CHARS.sub("", stem)[:MAX_SHEET_NAME_LENGTH] or "Sheet"


def ordered_staging_files(staging_dir: Path) -> list[Path]:
    """
    Staged CSV files in workbook order.

    The index file always comes first; the others are sorted by numeric
    prefix ascending, with non-numeric names last in name order.
    """
    files = [p for p in staging_dir.iterdir() if p.is_file() and p.suffix == CSV_SUFFIX]
    index = [p for p in files if p.name == INDEX_FILE_NAME]
    others = sorted((p for p in files if p.name != INDEX_FILE_NAME), key=_staging_sort_key)
    if not index:
        logger.warning("No %s found in %s", INDEX_FILE_NAME, staging_dir)
    return index + others


def _read_csv(path: Path) -> list[list[str]]:
    with open(path, "r", encoding="utf-8", newline="") as f:
        return list(csv.reader(f))


def merge_staging_files(staging_dir: Path, output_path: Path) -> Path:
    """
    Merge staged CSV files into one workbook.

    A file that cannot be opened or parsed is skipped with a warning. After
    a successful save every staged CSV file is deleted.

    Raises:
        SinkWriteError: If the workbook cannot be saved
    """
    csv.field_size_limit(max(csv.field_size_limit(), _FIELD_SIZE_LIMIT))

    staged = ordered_staging_files(staging_dir)

    wb = Workbook()
    if "Sheet" in wb.sheetnames:
        del wb["Sheet"]

    for path in staged:
        try:
            rows = _read_csv(path)
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            logger.warning("Skipping staged file %s: %s", path.name, e)
            continue

        sheet_name = _sheet_name_for(path)
        logger.info("Now adding sheet %s", sheet_name)
        builder = SheetBuilder(wb.create_sheet(sheet_name))

        if rows:
            if path.name == INDEX_FILE_NAME:
                builder.header(INDEX_COLUMNS, auto_width=False)
            else:
                builder.header(text_columns(rows[0]))
            for row in rows[1:]:
                builder.row(row)
        builder.close()

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)
    except OSError as e:
        raise SinkWriteError(f"Error saving Excel file {output_path}: {e}") from e

    for path in staged:
        try:
            path.unlink()
            logger.debug("Deleted file: %s", path.name)
        except OSError as e:
            logger.warning("Error deleting file %s: %s", path.name, e)

    logger.info("Workbook saved: %s (%d sheets)", output_path, len(wb.sheetnames))
    return output_path


class CsvStagingSink(TabularSink):
    """
    Tabular sink that stages every unit as a CSV file.

    The staging directory is private to one run. When none is given a
    fresh one is created and removed again by ``close()``.
    """

    def __init__(self, staging_dir: Path | None = None):
        self._owns_dir = staging_dir is None
        if staging_dir is None:
            staging_dir = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX))
        self.staging_dir = Path(staging_dir)
        self.staging_dir.mkdir(parents=True, exist_ok=True)
        self._file: IO[str] | None = None
        self._writer: Any = None
        logger.debug("Staging directory: %s", self.staging_dir)

    def unit_name(self, position: int, query_name: str) -> str:
        return csv_file_name(position, query_name)

    def write_index_unit(self, catalog: QueryCatalog) -> None:
        self.begin_unit(INDEX_FILE_NAME)
        self.write_header([col.name for col in INDEX_COLUMNS])
        for row in index_rows(catalog):
            self._writer.writerow(row)
        self._close_file()

    def begin_unit(self, name: str) -> None:
        self._close_file()
        path = self.staging_dir / name
        try:
            if path.exists():
                path.unlink()
            self._file = open(path, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise SinkWriteError(f"Failed to create staging file {path}: {e}") from e
        self._writer = csv.writer(self._file)

    def write_header(self, columns: Sequence[str]) -> None:
        self._require_writer().writerow(list(columns))

    def write_row(self, cells: Sequence[Any]) -> None:
        self._require_writer().writerow([render_cell(value) for value in cells])

    def finalize(self, output_path: Path) -> Path:
        self._close_file()
        return merge_staging_files(self.staging_dir, Path(output_path))

    def close(self) -> None:
        self._close_file()
        if self._owns_dir:
            shutil.rmtree(self.staging_dir, ignore_errors=True)

    def _require_writer(self):
        if self._writer is None:
            raise SinkWriteError("No output unit started; call begin_unit first")
        return self._writer

    def _close_file(self) -> None:
        if self._file is not None:
            self._file.close()
        self._file = None
        self._writer = None
