"""
Report service - orchestrates diagnostics runs.

Coordinates:
- Connection settings loading and the database connection
- Query catalog loading
- Per-query execution and sink population
- Workbook naming and persistence
- Repeat scheduling
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from rich.console import Console

from sqldiagnostics.application.schedule import RepeatSchedule
from sqldiagnostics.domain.catalog import QueryCatalog, QueryDefinition
from sqldiagnostics.domain.config import RunSettings
from sqldiagnostics.domain.errors import (
    ConfirmationRequired,
    QueryExecutionError,
    SinkWriteError,
)
from sqldiagnostics.infrastructure.config import ConfigRepository
from sqldiagnostics.infrastructure.excel import CsvStagingSink, TabularSink, WorkbookSink
from sqldiagnostics.infrastructure.sql import QueryExecutor, load_catalog

logger = logging.getLogger(__name__)

ARTIFACT_PREFIX = "sql_diagnostics_"
ARTIFACT_TIMESTAMP_FORMAT = "%d%m%Y_%H%M%S"


def artifact_name(when: datetime) -> str:
    """Workbook file name for a run finished at ``when``."""
    return f"{ARTIFACT_PREFIX}{when.strftime(ARTIFACT_TIMESTAMP_FORMAT)}.xlsx"


@dataclass
class RunReport:
    """Outcome of one run."""

    artifact_path: Path
    total: int = 0
    failed: List[Tuple[int, str]] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.total - len(self.failed)


class ReportService:
    """
    Diagnostics run orchestrator.

    Runs the whole pipeline: connect, load the catalog, write the index
    unit, execute each query in catalog order into its own unit, and save
    the workbook. Collaborators are injectable for testing.
    """

    def __init__(
        self,
        settings: RunSettings,
        connection_factory: Optional[Callable[[], Any]] = None,
        sink_factory: Optional[Callable[[], TabularSink]] = None,
        executor: Optional[QueryExecutor] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = datetime.now,
        console: Optional[Console] = None,
    ):
        """
        Initialize the report service.

        Args:
            settings: Run settings (paths, schedule, sink choice, strictness)
            connection_factory: Returns an open DB-API connection. Defaults to
                loading the properties file and connecting with SqlConnector.
            sink_factory: Returns a fresh TabularSink for each run
            executor: Query executor
            sleep: Blocking wait used between repeated runs
            clock: Source of the artifact timestamp
            console: Console for progress output
        """
        self.settings = settings
        self._connection_factory = connection_factory or self._connect
        self._sink_factory = sink_factory or self._default_sink
        self.executor = executor or QueryExecutor()
        self._sleep = sleep
        self._clock = clock
        self.console = console or Console()

    def _connect(self) -> Any:
        settings = ConfigRepository(self.settings.config_path).load_connection_settings()

        from sqldiagnostics.infrastructure.sql_server import SqlConnector

        return SqlConnector(settings).connect()

    def _default_sink(self) -> TabularSink:
        if self.settings.staging:
            return CsvStagingSink()
        return WorkbookSink()

    def artifact_path(self) -> Path:
        return Path(self.settings.output_dir) / artifact_name(self._clock())

    def run(self, confirmed: bool) -> List[RunReport]:
        """
        Run the diagnostics once, or repeatedly per the configured schedule.

        Args:
            confirmed: Whether the operator approved running the queries

        Returns:
            One RunReport per iteration

        Raises:
            ConfirmationRequired: If ``confirmed`` is False
        """
        if not confirmed:
            raise ConfirmationRequired("Run was not confirmed by the operator")

        schedule = RepeatSchedule.from_settings(self.settings)
        if schedule.repeats:
            logger.info(
                "Repeating every %d minutes, %d runs in total with %d waits",
                schedule.interval_minutes, schedule.iterations, schedule.sleeps
            )

        reports: List[RunReport] = []
        for iteration in range(1, schedule.iterations + 1):
            if schedule.repeats:
                logger.info("=== Run %d of %d ===", iteration, schedule.iterations)
            reports.append(self.run_once())

            if iteration <= schedule.sleeps:
                logger.info("Sleeping %d minutes before the next run", schedule.interval_minutes)
                self._sleep(schedule.interval_seconds)

        return reports

    def run_once(self) -> RunReport:
        """
        Execute one full run.

        Raises:
            DiagnosticsError: On any fatal error (configuration, catalog,
                connection, workbook save, or a query failure in strict mode)
        """
        logger.info("=== Starting SQL Server diagnostics ===")
        connection = self._connection_factory()
        try:
            catalog = load_catalog(self.settings.catalog_path)
            sink = self._sink_factory()
            try:
                report = self._populate(connection, catalog, sink)
                self._persist(sink, report)
            finally:
                sink.close()
        finally:
            connection.close()
            logger.debug("Database connection closed")

        self._log_summary(report)
        return report

    def _populate(self, connection: Any, catalog: QueryCatalog, sink: TabularSink) -> RunReport:
        report = RunReport(artifact_path=Path(), total=len(catalog))
        sink.write_index_unit(catalog)

        for position, definition in catalog.enumerate():
            try:
                self._process_entry(connection, sink, position, definition)
            except QueryExecutionError as e:
                logger.error(
                    "Query %d (%s) failed: %s", position, definition.name or "unnamed", e
                )
                report.failed.append((position, definition.name))
                if self.settings.strict:
                    raise
        return report

    def _process_entry(
        self,
        connection: Any,
        sink: TabularSink,
        position: int,
        definition: QueryDefinition,
    ) -> None:
        self.console.print(
            f"Executing Query: {definition.name}\nDescription: {definition.description}",
            markup=False,
            highlight=False,
        )
        logger.debug("Query %d: %s", position, definition.query)

        sink.begin_unit(sink.unit_name(position, definition.name))

        if not definition.query.strip():
            raise QueryExecutionError("Catalog entry has no statement")

        result = self.executor.execute(connection, definition.query)
        if result.is_empty:
            logger.info("Query %d (%s) returned no result set", position, definition.name)
            return

        sink.write_header(result.columns)
        for row in result.rows:
            sink.write_row(row)
        logger.info("Query %d (%s): %d rows", position, definition.name, len(result.rows))

    def _persist(self, sink: TabularSink, report: RunReport) -> None:
        output_path = self.artifact_path()
        if output_path.exists():
            logger.warning("Replacing existing workbook %s", output_path)
            try:
                output_path.unlink()
            except OSError as e:
                raise SinkWriteError(f"Failed to remove existing {output_path}: {e}") from e

        report.artifact_path = sink.finalize(output_path)

    @staticmethod
    def _log_summary(report: RunReport) -> None:
        if report.failed:
            logger.warning(
                "Completed with %d of %d queries failed (positions: %s)",
                len(report.failed), report.total,
                ", ".join(str(position) for position, _ in report.failed)
            )
        else:
            logger.info("All %d queries completed", report.total)
        logger.info("Report saved: %s", report.artifact_path)
