"""Command bodies of the CLI.

Every handler loads the user's companies first. Read handlers observe the
query they need until the first fetch settles and render a rich table;
write handlers run one mutation and leave the outcome to the notifier.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from tenderdesk.config.models import Settings
from tenderdesk.containers import Container
from tenderdesk.features.base import QuerySpec
from tenderdesk.query.client import QueryClient
from tenderdesk.shared.errors import create_no_company_error
from tenderdesk.utils.formatting import (
    UrgencyLevel,
    calculate_bid_difference,
    format_currency,
    format_date,
    format_date_time,
    get_days_until,
    get_urgency_level,
)

logger = logging.getLogger(__name__)

URGENCY_STYLES = {
    UrgencyLevel.CRITICAL: "bold red",
    UrgencyLevel.HIGH: "dark_orange",
    UrgencyLevel.MEDIUM: "yellow",
    UrgencyLevel.LOW: "green",
}


async def wait_for(spec: QuerySpec, client: QueryClient) -> Any:
    """Observe ``spec`` until its fetch settles and return the data.

    Raises:
        TenderDeskError: The error the fetch ended with
    """
    observer = spec.observe(client, mount=False)
    try:
        snapshot = await observer.wait()
    finally:
        observer.unmount()
    if snapshot.is_error and snapshot.error is not None:
        raise snapshot.error
    return snapshot.data


async def require_company(container: Container) -> str:
    session = container.company_session()
    await session.refresh_companies()
    if session.company_id is None:
        raise create_no_company_error("cli")
    return session.company_id


def show_config(settings: Settings, console: Console) -> None:
    table = Table(title="TenderDesk configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    dumped = settings.model_dump()
    dumped["api"]["supabase_key"] = "***" if settings.api.supabase_key else None
    dumped["api"]["access_token"] = "***" if settings.api.access_token else None
    for section, values in dumped.items():
        for name, value in values.items():
            table.add_row(f"{section}.{name}", "" if value is None else str(value))
    console.print(table)


async def list_companies(container: Container, console: Console) -> None:
    session = container.company_session()
    companies = await session.refresh_companies()

    table = Table(title="Companies")
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Role")
    table.add_column("AI credits", justify="right")
    for company in companies:
        marker = "*" if company.id == session.company_id else ""
        credits = "" if company.ai_credits is None else str(company.ai_credits)
        table.add_row(marker, company.id, company.name, company.role, credits)
    console.print(table)


async def switch_company(container: Container, console: Console, company_id: str) -> bool:
    session = container.company_session()
    await session.refresh_companies()
    if not session.switch_company(company_id):
        console.print(f"[red]Unknown company:[/red] {company_id}")
        return False
    console.print(f"Active company: [bold]{session.current_company.name}[/bold]")
    return True


async def list_tenders(container: Container, console: Console) -> None:
    await require_company(container)
    tenders = await wait_for(container.tenders().tenders_query(), container.query_client())

    table = Table(title="Tenders")
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Due")
    table.add_column("Days", justify="right")
    table.add_column("Our bid", justify="right")
    for tender in tenders:
        days = get_days_until(tender.due_date)
        style = URGENCY_STYLES[get_urgency_level(days)]
        table.add_row(
            tender.title,
            tender.status,
            format_date_time(tender.due_date),
            f"[{style}]{days}[/{style}]",
            format_currency(tender.our_bid_amount) if tender.our_bid_amount is not None else "",
        )
    console.print(table)


async def list_bid_results(container: Container, console: Console, tender_id: str) -> None:
    await require_company(container)
    results = await wait_for(container.bid_results().bid_results_query(tender_id), container.query_client())

    if not results:
        console.print("No bid opening results recorded.")
        return

    table = Table(title="Bid opening results")
    table.add_column("Opened")
    table.add_column("Our bid", justify="right")
    table.add_column("Lowest bid", justify="right")
    table.add_column("Difference", justify="right")
    table.add_column("Bidders", justify="right")
    table.add_column("Winner")
    for result in results:
        difference = calculate_bid_difference(result.our_bid_amount, result.lowest_bid_amount)
        table.add_row(
            format_date(result.opening_date),
            format_currency(result.our_bid_amount),
            format_currency(result.lowest_bid_amount),
            f"{difference.percentage:.2f}%",
            str(result.total_bidders),
            result.winner_company_name or "",
        )
    console.print(table)


async def show_compliance(container: Container, console: Console, tender_id: str) -> None:
    await require_company(container)
    report = await wait_for(container.compliance().report_query(tender_id), container.query_client())

    if report is None:
        console.print("This tender has not been analyzed yet.")
        return

    table = Table(title="Mandatory checklist")
    table.add_column("Item")
    table.add_column("Status")
    for item in report.mandatory_checklist:
        table.add_row(item.item, item.status)
    console.print(table)

    if report.missing_documents:
        console.print("[bold]Missing documents[/bold]")
        for document in report.missing_documents:
            console.print(f"  - {document}")


async def show_stats(container: Container, console: Console) -> None:
    await require_company(container)
    stats = await wait_for(container.tenders().stats_query(), container.query_client())

    table = Table(title="Dashboard")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Active tenders", str(stats.total_active))
    table.add_row("Submitted", str(stats.submitted))
    table.add_row("Win rate", f"{stats.win_rate}%")
    table.add_row("Pipeline value", format_currency(stats.pipeline_value))
    table.add_row("Total", str(stats.total))
    console.print(table)

    by_status = Table(title="By status")
    by_status.add_column("Status")
    by_status.add_column("Count", justify="right")
    for status, count in stats.status_counts.items():
        by_status.add_row(status, str(count))
    console.print(by_status)


async def export_tenders(container: Container, console: Console, directory: Path, excel: bool) -> Path:
    await require_company(container)
    path = await container.exports().export_tenders(directory, excel=excel)
    console.print(f"Wrote [bold]{path}[/bold]")
    return path


async def generate_proposal(container: Container, console: Console, tender_id: str, output: Path | None) -> None:
    await require_company(container)
    result = await container.proposals().generate(tender_id)
    if output is not None:
        with open(output, "w", encoding="utf-8") as f:
            f.write(result.proposal)
        console.print(f"Proposal saved to [bold]{output}[/bold]")
    else:
        console.print(result.proposal)


async def parse_plan(
    container: Container,
    console: Console,
    path: Path,
    organization_id: str,
    fiscal_year: str,
) -> None:
    await require_company(container)
    result = await container.procurement_plans().parse_plan(path, organization_id, fiscal_year)
    console.print(f"Plan [bold]{result.plan_id}[/bold]: {result.opportunities_count} opportunities")


async def load_sample_data(container: Container, console: Console) -> bool:
    await require_company(container)
    service = container.sample_data()
    stats = await wait_for(container.tenders().stats_query(), container.query_client())
    if not service.offers_sample_data(stats.total if stats is not None else None):
        console.print("[yellow]Sample data is only offered to companies without tenders.[/yellow]")
        return False
    await service.load_sample_data()
    return True
