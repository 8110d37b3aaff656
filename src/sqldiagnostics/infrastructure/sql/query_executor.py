"""
Query execution against an open DB-API connection.

Runs one catalog statement and collects the first row-producing result
set. Works with pyodbc connections in production and with any other
DB-API 2.0 connection in tests.
"""

from __future__ import annotations

import logging
from typing import Any

from sqldiagnostics.domain.errors import QueryExecutionError, RowDecodeError
from sqldiagnostics.domain.results import TabularResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROW_ERRORS = 100


class QueryExecutor:
    """
    Executes a statement and returns its TabularResult.

    Row-level failures are logged and skipped; a statement-level failure
    raises QueryExecutionError. The cursor is closed on every path.
    """

    def __init__(self, max_row_errors: int = DEFAULT_MAX_ROW_ERRORS):
        """
        Args:
            max_row_errors: Consecutive row failures tolerated before the
                whole query is abandoned
        """
        self.max_row_errors = max_row_errors

    def execute(self, connection: Any, statement: str) -> TabularResult:
        """
        Execute ``statement`` on ``connection``.

        Returns:
            TabularResult with engine-ordered columns. A statement that
            produces no result set yields empty columns and no rows.

        Raises:
            QueryExecutionError: If the statement or its metadata fails
        """
        cursor = connection.cursor()
        try:
            try:
                cursor.execute(statement)
                description = self._first_description(cursor)
            except Exception as e:
                raise QueryExecutionError(f"Failed to execute query: {e}", statement) from e

            if description is None:
                logger.debug("Statement produced no result set")
                return TabularResult()

            columns = [column[0] for column in description]
            rows = self._fetch_rows(cursor, statement)

            logger.debug("Query returned %d rows, %d columns", len(rows), len(columns))
            return TabularResult(columns=columns, rows=rows)
        finally:
            cursor.close()

    @staticmethod
    def _first_description(cursor: Any):
        """
        Skip result-less sets (row counts from SET/DML) until one with
        column metadata appears.
        """
        nextset = getattr(cursor, "nextset", None)
        while cursor.description is None:
            if nextset is None or not nextset():
                return None
        return cursor.description

    def _fetch_rows(self, cursor: Any, statement: str) -> list[tuple[Any, ...]]:
        rows: list[tuple[Any, ...]] = []
        row_number = 0
        consecutive_errors = 0

        while True:
            row_number += 1
            try:
                row = cursor.fetchone()
            except Exception as e:
                error = RowDecodeError(f"Failed to scan row {row_number}: {e}", row_number)
                logger.warning("%s", error)
                consecutive_errors += 1
                if consecutive_errors > self.max_row_errors:
                    raise QueryExecutionError(
                        f"Giving up after {consecutive_errors} consecutive row errors: {e}",
                        statement,
                    ) from e
                continue

            if row is None:
                break
            consecutive_errors = 0
            rows.append(tuple(row))

        return rows
