"""
Tabular sinks.

Two interchangeable realizations of TabularSink:

- WorkbookSink: writes worksheets directly (default)
- CsvStagingSink: stages CSV files, then merges them into a workbook
"""

from sqldiagnostics.infrastructure.excel.base import TabularSink
from sqldiagnostics.infrastructure.excel.staging import CsvStagingSink, merge_staging_files
from sqldiagnostics.infrastructure.excel.workbook_sink import WorkbookSink

__all__ = ["CsvStagingSink", "TabularSink", "WorkbookSink", "merge_staging_files"]
