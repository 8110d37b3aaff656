"""
Tests for QueryExecutor against in-memory SQLite and mocked cursors.
"""

import sqlite3
from unittest.mock import MagicMock

import pytest

from sqldiagnostics.domain.errors import QueryExecutionError
from sqldiagnostics.infrastructure.sql import QueryExecutor


class FakeCursor:
    """Cursor with a result-less first set, as SQL Server returns for SET NOCOUNT OFF."""

    def __init__(self):
        self.description = None
        self.closed = False
        self._rows = [("r1",), ("r2",)]

    def execute(self, statement):
        pass

    def nextset(self):
        self.description = [("name", None, None, None, None, None, None)]
        return True

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None

    def close(self):
        self.closed = True


class TestQueryExecutor:
    """Test cases for QueryExecutor."""

    def setup_method(self):
        """Set up test fixtures."""
        self.conn = sqlite3.connect(":memory:")
        self.executor = QueryExecutor()

    def teardown_method(self):
        """Clean up test fixtures."""
        self.conn.close()

    def test_select(self):
        result = self.executor.execute(self.conn, "SELECT 1 AS a, 'x' AS b, NULL AS c")

        assert result.columns == ["a", "b", "c"]
        assert result.rows == [(1, "x", None)]

    def test_no_rows_keeps_columns(self):
        self.conn.execute("CREATE TABLE t (id INTEGER, name TEXT)")

        result = self.executor.execute(self.conn, "SELECT id, name FROM t")

        assert result.columns == ["id", "name"]
        assert result.rows == []
        assert not result.is_empty

    def test_statement_without_result_set(self):
        result = self.executor.execute(self.conn, "CREATE TABLE t2 (id INTEGER)")
        assert result.is_empty

    def test_execution_error(self):
        with pytest.raises(QueryExecutionError) as exc_info:
            self.executor.execute(self.conn, "SELECT FROM nowhere")
        assert exc_info.value.statement == "SELECT FROM nowhere"

    def test_skips_result_less_sets(self):
        cursor = FakeCursor()
        conn = MagicMock()
        conn.cursor.return_value = cursor

        result = self.executor.execute(conn, "SET NOCOUNT OFF; SELECT name FROM x")

        assert result.columns == ["name"]
        assert result.rows == [("r1",), ("r2",)]
        assert cursor.closed


class TestRowErrors:
    """Test cases for row-level failure handling."""

    def _cursor(self, fetch_side_effect) -> MagicMock:
        cursor = MagicMock()
        cursor.description = [("col", None, None, None, None, None, None)]
        cursor.fetchone.side_effect = fetch_side_effect
        return cursor

    def test_bad_row_skipped(self):
        cursor = self._cursor([("a",), ValueError("bad decode"), ("b",), None])
        conn = MagicMock()
        conn.cursor.return_value = cursor

        result = QueryExecutor().execute(conn, "SELECT col")

        assert result.rows == [("a",), ("b",)]
        cursor.close.assert_called_once()

    def test_too_many_consecutive_errors(self):
        cursor = self._cursor(ValueError("broken stream"))
        conn = MagicMock()
        conn.cursor.return_value = cursor

        with pytest.raises(QueryExecutionError):
            QueryExecutor(max_row_errors=2).execute(conn, "SELECT col")

        assert cursor.fetchone.call_count == 3
        cursor.close.assert_called_once()

    def test_cursor_closed_on_execute_failure(self):
        cursor = MagicMock()
        cursor.execute.side_effect = RuntimeError("timeout")
        conn = MagicMock()
        conn.cursor.return_value = cursor

        with pytest.raises(QueryExecutionError):
            QueryExecutor().execute(conn, "SELECT 1")

        cursor.close.assert_called_once()
