"""
CLI Orchestrator - Main Entry Point

Wires the command functions into the typer application.
"""

import typer

from sqldiagnostics import __version__
from sqldiagnostics.interface.cli.commands import catalog_command, run_command

app = typer.Typer(
    name="sqldiagnostics",
    help="📊 SQL Server diagnostics: run a query catalog into an Excel workbook",
    add_completion=False,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.command("run")(run_command)
app.command("catalog")(catalog_command)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"sqldiagnostics {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True,
        help="Show the version and exit."
    ),
):
    """
    📊 SQL Server Diagnostics

    Executes the diagnostic queries of a JSON catalog against one SQL Server
    database and writes the results to a single Excel workbook: an
    [bold]executed_queries[/bold] index sheet followed by one sheet per query.

    🔧 **Quick Start:**
    1. Describe the connection in `config.properties`
    2. Check the catalog: `sqldiagnostics catalog -q sql_queries.json`
    3. Run it: `sqldiagnostics run -c config.properties -q sql_queries.json`
    4. Repeat every 15 minutes for 2 hours: `sqldiagnostics run -i 15 -d 2`
    """


if __name__ == "__main__":
    app()
