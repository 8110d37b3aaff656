"""
SQL Server Diagnostics - query catalog to Excel workbook reporter.

Executes a JSON catalog of diagnostic T-SQL statements against a SQL Server
database and writes one worksheet per query, preceded by an index sheet.

Usage:
    # CLI (recommended)
    sqldiagnostics run --config config.properties --queries sql_queries.json

    # Programmatic
    from sqldiagnostics import ReportService, RunSettings

    service = ReportService(RunSettings())
    reports = service.run(confirmed=True)
"""

__version__ = "1.0.0"

from sqldiagnostics.application import ReportService
from sqldiagnostics.domain.config import RunSettings

__all__ = ["ReportService", "RunSettings", "__version__"]
