"""
Catalog Command - inspect the query catalog without connecting.
"""

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from sqldiagnostics.domain.catalog import QueryCatalog
from sqldiagnostics.domain.config import DEFAULT_CATALOG_FILE
from sqldiagnostics.domain.errors import DiagnosticsError
from sqldiagnostics.domain.naming import worksheet_name
from sqldiagnostics.infrastructure.sql import load_catalog

logger = logging.getLogger(__name__)


def render_catalog(catalog: QueryCatalog) -> Table:
    """Table of position, sheet name and description for each query."""
    source = catalog.source
    title = source.name or "Query catalog"
    if source.sqlserverversion:
        title += f" (SQL Server {source.sqlserverversion})"

    table = Table(title=title)
    table.add_column("#", style="bright_cyan", justify="right")
    table.add_column("Sheet", style="white")
    table.add_column("Description", style="dim")

    for position, definition in catalog.enumerate():
        table.add_row(
            str(position),
            worksheet_name(position, definition.name),
            definition.description,
        )
    return table


def catalog_command(
    queries: Path = typer.Option(
        Path(DEFAULT_CATALOG_FILE), "--queries", "-q",
        help="Path to the SQL queries JSON file"
    ),
):
    """
    List the queries in the catalog and the sheet each one will produce.
    """
    console = Console()

    try:
        catalog = load_catalog(queries)
    except DiagnosticsError as e:
        logger.error("Catalog command failed: %s", e)
        console.print(f"[red]❌ Error:[/red] {e}", highlight=False)
        raise typer.Exit(1)

    console.print(render_catalog(catalog))
    console.print(f"[dim]{len(catalog)} queries[/dim]")
