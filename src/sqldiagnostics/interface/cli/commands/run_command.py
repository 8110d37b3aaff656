"""
Run Command - execute the query catalog and write the workbook.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from sqldiagnostics.application import ReportService, RunReport
from sqldiagnostics.domain.config import DEFAULT_CATALOG_FILE, DEFAULT_CONFIG_FILE, RunSettings
from sqldiagnostics.domain.errors import DiagnosticsError
from sqldiagnostics.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_FATAL = 1
EXIT_INVALID_SETTINGS = 2
EXIT_NOT_CONFIRMED = 3
EXIT_INTERRUPTED = 130

CONFIRMATION_TEXT = "YES"


def confirm_run(console: Console) -> bool:
    """Ask the operator to type the confirmation text literally."""
    console.print(
        "[yellow]⚠️  This will execute every query in the catalog against the "
        "configured SQL Server.[/yellow]"
    )
    answer = typer.prompt(f"Type {CONFIRMATION_TEXT} to continue", default="", show_default=False)
    return answer.strip() == CONFIRMATION_TEXT


class RunCommand:
    """
    Run command.

    Builds the report service and maps its outcome to console output and
    exit codes.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def execute(self, settings: RunSettings, confirmed: bool) -> List[RunReport]:
        """
        Run the diagnostics.

        Raises:
            typer.Exit: On fatal errors or interruption
        """
        service = ReportService(settings, console=self.console)

        try:
            reports = service.run(confirmed=confirmed)
        except DiagnosticsError as e:
            logger.error("Run failed: %s", e)
            self.console.print(f"[red]❌ Error:[/red] {e}", highlight=False)
            raise typer.Exit(EXIT_FATAL)
        except KeyboardInterrupt:
            self.console.print("[yellow]Interrupted[/yellow]")
            raise typer.Exit(EXIT_INTERRUPTED)

        for report in reports:
            if report.failed:
                self.console.print(
                    f"[yellow]⚠️  {len(report.failed)} of {report.total} queries failed, "
                    "see the log for details[/yellow]"
                )
            self.console.print(f"[green]✅ Report saved:[/green] {report.artifact_path}", highlight=False)
        return reports


def run_command(
    config: Path = typer.Option(
        Path(DEFAULT_CONFIG_FILE), "--config", "-c",
        help="Path to the SQL Server connection properties file"
    ),
    queries: Path = typer.Option(
        Path(DEFAULT_CATALOG_FILE), "--queries", "-q",
        help="Path to the SQL queries JSON file"
    ),
    interval: int = typer.Option(
        0, "--interval", "-i",
        help="Minutes between repeated runs (0 = run once)"
    ),
    duration: float = typer.Option(
        0.0, "--duration", "-d",
        help=(
            "Total hours to keep repeating (0 = run once). Runs "
            "floor(duration*60/interval) times, and once when the duration "
            "is shorter than one interval"
        )
    ),
    output_dir: Path = typer.Option(
        Path("."), "--output-dir", "-o",
        help="Directory for the generated workbook"
    ),
    staging: bool = typer.Option(
        False, "--staging",
        help="Stage results as CSV files and merge them into the workbook"
    ),
    strict: bool = typer.Option(
        False, "--strict",
        help="Abort the run on the first failing query"
    ),
    yes: bool = typer.Option(
        False, "--yes", "-y",
        help="Skip the confirmation prompt"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file",
        help="Also write a DEBUG log to this file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug output on the console"
    ),
):
    """
    Execute the query catalog and save the results to an Excel workbook.

    Produces sql_diagnostics_<DDMMYYYY>_<HHMMSS>.xlsx with an index sheet
    followed by one sheet per query, in catalog order.
    """
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file)
    console = Console()

    try:
        settings = RunSettings(
            config_path=config,
            catalog_path=queries,
            output_dir=output_dir,
            interval_minutes=interval,
            duration_hours=duration,
            staging=staging,
            strict=strict,
        )
    except ValidationError as e:
        for error in e.errors():
            console.print(f"[red]❌ Invalid option:[/red] {error['msg']}", highlight=False)
        raise typer.Exit(EXIT_INVALID_SETTINGS)

    confirmed = yes or confirm_run(console)
    if not confirmed:
        console.print("Cancelled")
        raise typer.Exit(EXIT_NOT_CONFIRMED)

    RunCommand(console).execute(settings, confirmed=True)
