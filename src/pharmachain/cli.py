"""
Command-line interface for pharmachain.

Commands:
- verify: Verify one or more batch identifiers and print safety reports
- register: Register a manufactured batch on the ledger
- check-registry: Look identifiers up in the openFDA NDC directory only
"""

import asyncio
import json
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from pharmachain.config import settings
from pharmachain.engine import VerificationEngine
from pharmachain.errors import NotInitialized
from pharmachain.log import configure_logging
from pharmachain.models import AggregateReport, ProviderResult, Verdict
from pharmachain.scoring import aggregate_with_breakdown

app = typer.Typer(
    name="pharmachain",
    help="Pharmaceutical batch authenticity verification",
    no_args_is_help=True,
)
console = Console()

VERDICT_STYLE = {
    Verdict.SAFE: "bold green",
    Verdict.CAUTION: "bold yellow",
    Verdict.UNSAFE: "bold red",
}


def _provider_row(table: Table, label: str, result: ProviderResult) -> None:
    status = "[green]valid[/]" if result.valid else "[red]not found[/]"
    detail = result.drug_name or result.reason or "-"
    if result.manufacturer:
        detail = f"{detail} ({result.manufacturer})"
    table.add_row(label, status, f"{result.confidence:.0%}", result.source.value, detail)


def render_report(report: AggregateReport, explain: bool = False) -> None:
    """Print a verification report."""
    style = VERDICT_STYLE[report.verdict]
    table = Table(show_header=True, header_style="bold")
    table.add_column("Source", style="cyan")
    table.add_column("Status")
    table.add_column("Confidence", justify="right")
    table.add_column("Path")
    table.add_column("Detail")
    _provider_row(table, "Registry", report.registry)
    _provider_row(table, "Ledger", report.ledger)

    analyzer = report.analyzer_result
    table.add_row(
        "Pattern",
        analyzer.manufacturer,
        f"{analyzer.score}%",
        "local",
        "; ".join(analyzer.reasonings),
    )

    console.print(
        Panel(
            table,
            title=f"[bold]{report.identifier}[/]",
            subtitle=f"[{style}]{report.percent}% - {report.verdict.value}[/]",
        )
    )
    console.print(f"[{style}]{report.verdict.advice}[/]")

    if explain:
        breakdown = aggregate_with_breakdown(report.registry, report.ledger, analyzer)
        parts = Table(title="Score breakdown", show_header=True)
        parts.add_column("Source", style="cyan")
        parts.add_column("Score", justify="right")
        parts.add_column("Weight", justify="right")
        parts.add_column("Contribution", justify="right")
        for name, part in breakdown["components"].items():
            parts.add_row(name, f"{part['score']:.2f}", f"{part['weight']:.1f}", f"{part['contribution']:.3f}")
        console.print(parts)


async def _start_engine(quiet: bool = False) -> VerificationEngine:
    engine = VerificationEngine()
    if not await engine.initialize() and not quiet:
        console.print("[yellow]Running in offline mode with fallback ledger verification[/]")
    return engine


@app.command()
def verify(
    identifiers: Annotated[list[str], typer.Argument(help="Batch identifiers to verify")],
    as_json: bool = typer.Option(False, "--json", help="Print raw reports as JSON"),
    explain: bool = typer.Option(False, "--explain", "-e", help="Show score breakdown"),
    delay: float | None = typer.Option(
        None, "--delay", help="Seconds between verifications (default from settings)"
    ),
):
    """Verify drug batch authenticity."""
    configure_logging("ERROR" if as_json else None)

    async def run() -> list[AggregateReport]:
        engine = await _start_engine(quiet=as_json)
        return await engine.verify_many(identifiers, delay=delay)

    reports = asyncio.run(run())

    if as_json:
        console.print_json(json.dumps([r.to_dict() for r in reports], default=str))
    else:
        for report in reports:
            render_report(report, explain=explain)

    if any(r.verdict is Verdict.UNSAFE for r in reports):
        raise typer.Exit(code=2)


@app.command()
def register(
    batch_json: str = typer.Argument(
        ...,
        help='Batch JSON, e.g. {"batchId": "...", "drugName": "...", "manufacturer": "...", '
        '"ndcCode": "...", "manufacturingDate": "2025-01-15", "expiryDate": "2027-01-15"}',
    ),
):
    """Register a drug batch on the ledger (manufacturer)."""
    configure_logging()
    try:
        payload = json.loads(batch_json)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid batch JSON:[/] {e}")
        raise typer.Exit(code=1) from e

    async def run():
        engine = await _start_engine()
        return await engine.register_batch(payload)

    try:
        result = asyncio.run(run())
    except NotInitialized as e:
        console.print(f"[red]Registration unavailable:[/] {e}")
        raise typer.Exit(code=1) from e

    if result.success:
        console.print(f"[bold green]Batch {result.batch_id} registered[/] (transaction {result.transaction_id})")
    else:
        console.print(f"[red]Registration failed:[/] {result.error}")
        raise typer.Exit(code=1)


@app.command("check-registry")
def check_registry(
    identifiers: Annotated[list[str], typer.Argument(help="NDC codes or batch identifiers")],
    delay: float = typer.Option(
        settings.batch_delay, "--delay", help="Seconds between registry requests"
    ),
):
    """Look identifiers up in the openFDA NDC directory only."""
    configure_logging()

    async def run() -> list[tuple[str, ProviderResult]]:
        engine = VerificationEngine()
        results = []
        for i, identifier in enumerate(identifiers):
            if i and delay > 0:
                await asyncio.sleep(delay)
            results.append((identifier, await engine.check_registry(identifier)))
        return results

    table = Table(title="Registry lookup", show_header=True)
    table.add_column("Identifier", style="cyan")
    table.add_column("Status")
    table.add_column("Confidence", justify="right")
    table.add_column("Path")
    table.add_column("Detail")
    for identifier, result in asyncio.run(run()):
        _provider_row(table, identifier, result)
    console.print(table)


if __name__ == "__main__":
    app()
