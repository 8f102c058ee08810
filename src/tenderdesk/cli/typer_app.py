"""
TenderDesk Typer CLI Application

Views over the tender pipeline of the active company, rendered with rich,
plus exports and the AI and onboarding actions of the dashboard.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from dependency_injector import providers
from rich.console import Console

from tenderdesk import __version__
from tenderdesk.cli import handlers
from tenderdesk.cli.error_handler import EXIT_ERROR, handle_cli_error
from tenderdesk.config.loader import load_settings
from tenderdesk.containers import Container
from tenderdesk.shared.logging import setup_structured_logger

app = typer.Typer(
    name="tenderdesk",
    help="Track public-sector tenders, bid results and compliance from the terminal.",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

console = Console()

_state: dict[str, Any] = {"config_path": None}


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"TenderDesk {__version__}")
        raise typer.Exit


@app.callback()
def main(
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path of a TOML configuration file", exists=True, dir_okay=False),
    ] = None,
    log_level: Annotated[str, typer.Option("--log-level", help="DEBUG, INFO, WARNING or ERROR")] = "WARNING",
    version: Annotated[
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
) -> None:
    """Configure logging and remember the configuration file for the command."""
    _state["config_path"] = config
    setup_structured_logger(level=log_level)


def build_container() -> Container:
    container = Container()
    container.config.override(providers.Object(load_settings(_state["config_path"])))
    return container


def run_command(command: str, body: Callable[[Container], Awaitable[Any]]) -> Any:
    """Run an async command body against a fresh container.

    The HTTP session and the query client are released whatever the
    outcome; errors become an exit code.
    """

    async def runner() -> Any:
        container = build_container()
        try:
            return await body(container)
        finally:
            await container.http_sessions().close()
            container.query_client().dispose()

    try:
        return asyncio.run(runner())
    except Exception as e:  # pylint: disable=broad-exception-caught
        raise typer.Exit(handle_cli_error(e, command)) from e


@app.command("config")
def config_command() -> None:
    """Show the effective configuration (secrets masked)."""
    try:
        settings = load_settings(_state["config_path"])
    except Exception as e:  # pylint: disable=broad-exception-caught
        raise typer.Exit(handle_cli_error(e, "config")) from e
    handlers.show_config(settings, console)


@app.command("companies")
def companies_command() -> None:
    """List your companies; the active one is marked with *."""
    run_command("companies", lambda c: handlers.list_companies(c, console))


@app.command("use")
def use_command(company_id: Annotated[str, typer.Argument(help="Company to make active")]) -> None:
    """Switch the active company."""
    if not run_command("use", lambda c: handlers.switch_company(c, console, company_id)):
        raise typer.Exit(EXIT_ERROR)


@app.command("tenders")
def tenders_command() -> None:
    """List the active company's tenders by due date."""
    run_command("tenders", lambda c: handlers.list_tenders(c, console))


@app.command("bid-results")
def bid_results_command(tender_id: Annotated[str, typer.Argument(help="Tender id")]) -> None:
    """Show the bid opening results of a tender."""
    run_command("bid-results", lambda c: handlers.list_bid_results(c, console, tender_id))


@app.command("compliance")
def compliance_command(tender_id: Annotated[str, typer.Argument(help="Tender id")]) -> None:
    """Show the latest AI compliance report of a tender."""
    run_command("compliance", lambda c: handlers.show_compliance(c, console, tender_id))


@app.command("stats")
def stats_command() -> None:
    """Show dashboard statistics of the active company."""
    run_command("stats", lambda c: handlers.show_stats(c, console))


@app.command("export")
def export_command(
    directory: Annotated[
        Path,
        typer.Option("--dir", "-d", help="Directory to write the export into", file_okay=False, exists=True),
    ] = Path("."),
    excel: Annotated[bool, typer.Option("--excel", help="Add a byte order mark for Excel")] = False,
) -> None:
    """Export the active company's tenders as CSV (paid plans)."""
    run_command("export", lambda c: handlers.export_tenders(c, console, directory, excel))


@app.command("proposal")
def proposal_command(
    tender_id: Annotated[str, typer.Argument(help="Tender id")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write the proposal to this file", dir_okay=False),
    ] = None,
) -> None:
    """Draft a bid proposal for a tender with AI (uses one credit)."""
    run_command("proposal", lambda c: handlers.generate_proposal(c, console, tender_id, output))


@app.command("parse-plan")
def parse_plan_command(
    path: Annotated[Path, typer.Argument(help="Procurement plan PDF", exists=True, dir_okay=False)],
    organization_id: Annotated[str, typer.Option("--organization", help="Issuing organization id")],
    fiscal_year: Annotated[str, typer.Option("--year", help="Fiscal year, e.g. 2025/26")],
) -> None:
    """Upload a procurement plan PDF and extract its opportunities."""
    run_command("parse-plan", lambda c: handlers.parse_plan(c, console, path, organization_id, fiscal_year))


@app.command("sample-data")
def sample_data_command() -> None:
    """Seed an empty company with sample organizations and tenders."""
    if not run_command("sample-data", lambda c: handlers.load_sample_data(c, console)):
        raise typer.Exit(EXIT_ERROR)
