"""
Error taxonomy for a diagnostics run.

Fatal errors (configuration, catalog, connection, final sink write) stop
the run. QueryExecutionError and RowDecodeError are recovered where they
occur and only logged.
"""


class DiagnosticsError(Exception):
    """Base class for all diagnostics errors."""


class ConfigMissing(DiagnosticsError):
    """Configuration file does not exist or cannot be read."""


class ConfigMalformed(DiagnosticsError):
    """Configuration is present but a required key or value is invalid."""


class CatalogReadError(DiagnosticsError):
    """Query catalog file cannot be opened or read."""


class CatalogParseError(DiagnosticsError):
    """Query catalog content does not match the expected document shape."""


class DatabaseConnectionError(DiagnosticsError):
    """Opening the connection or the initial liveness probe failed."""


class QueryExecutionError(DiagnosticsError):
    """A catalog statement failed to execute."""

    def __init__(self, message: str, statement: str = ""):
        super().__init__(message)
        self.statement = statement


class RowDecodeError(DiagnosticsError):
    """A single result row could not be fetched or decoded."""

    def __init__(self, message: str, row_number: int):
        super().__init__(message)
        self.row_number = row_number


class SinkWriteError(DiagnosticsError):
    """The output artifact could not be created, written or saved."""


class ConfirmationRequired(DiagnosticsError):
    """The operator has not confirmed the run."""
