"""Energy Pulse CLI.

Usage:
    energy-pulse run [--json]
    energy-pulse health [--url URL]
    energy-pulse summary [--url URL] [--token TOKEN]

`run` executes one pipeline cycle in this process. `health` and
`summary` talk to a running service, because breaker and health state
live in that long-lived process.

Exit codes: 0=success, 1=error, 2=degraded
"""

# Load .env file before any other imports
from dotenv import load_dotenv

load_dotenv()

import asyncio
import json
import logging
import os
from typing import Annotated, Any

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from energy_pipeline import __version__
from energy_pipeline.config import get_settings
from energy_pipeline.core.types import RunResponse
from energy_pipeline.factory import (
    create_breaker_registry,
    create_health_monitor,
    create_orchestrator,
    create_telegram_client,
)
from energy_pipeline.monitoring.health import HealthSnapshot
from energy_pipeline.observability.logger import setup_logging as setup_pipeline_logging

app = typer.Typer(
    name="energy-pulse",
    help="Energy Pulse briefing pipeline CLI",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

DEFAULT_SERVICE_URL = "http://localhost:8000"


def setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Route pipeline logs through a rich handler."""
    level = logging.WARNING if quiet else (logging.DEBUG if verbose else logging.INFO)
    setup_pipeline_logging(
        level=level,
        force=True,
        handler=RichHandler(console=err_console, show_path=False),
    )


async def _run_once() -> tuple[RunResponse, HealthSnapshot]:
    settings = get_settings()
    telegram = create_telegram_client(settings)
    monitor = create_health_monitor(settings, telegram)
    orchestrator = create_orchestrator(
        settings,
        breakers=create_breaker_registry(settings),
        monitor=monitor,
        telegram=telegram,
    )
    try:
        response = await orchestrator.run(trigger="cli")
    finally:
        if telegram is not None:
            await telegram.aclose()
    return response, monitor.get_health()


def _print_run(data: dict[str, Any], health: HealthSnapshot) -> None:
    summary = data["summary"]

    table = Table(title=f"Run {data['analysis_id']}")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Execution time", f"{data['execution_time_ms']}ms")
    table.add_row("News articles", str(summary["news_articles"]))
    table.add_row("Market symbols", str(summary["market_symbols"]))
    table.add_row("Predictions", str(summary["predictions_generated"]))
    table.add_row("Analysis quality", summary["analysis_quality"])
    for name, outcome in summary["persistence"].items():
        table.add_row(f"Stored {name}", "[green]ok[/green]" if outcome["ok"] else "[red]failed[/red]")
    delivery = summary["delivery"]
    table.add_row("Delivered", f"{delivery['delivered']}/{delivery['subscribers']}")
    console.print(table)

    _print_health(health.to_dict())


def _print_health(snapshot: dict[str, Any], breakers: list[dict[str, Any]] | None = None) -> None:
    table = Table(title="Health")
    table.add_column("Field")
    table.add_column("Value")
    for key, value in snapshot.items():
        table.add_row(key, str(value))
    console.print(table)

    if breakers:
        breaker_table = Table(title="Circuit breakers")
        breaker_table.add_column("Name")
        breaker_table.add_column("State")
        breaker_table.add_column("Failures", justify="right")
        breaker_table.add_column("Retry after", justify="right")
        for b in breakers:
            breaker_table.add_row(
                b["name"],
                b["state"],
                f"{b['consecutive_failures']}/{b['failure_threshold']}",
                f"{b['retry_after_seconds']:.0f}s",
            )
        console.print(breaker_table)


@app.command()
def run(
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw JSON response")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Minimal output")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose output")] = False,
) -> None:
    """Run one pipeline cycle now.

    Examples:
        energy-pulse run
        energy-pulse run --json --quiet
    """
    setup_logging(quiet=quiet or as_json, verbose=verbose)

    response, health = asyncio.run(_run_once())

    if as_json:
        typer.echo(json.dumps(response.to_dict(), indent=2, default=str))
    elif response.success and response.data is not None:
        _print_run(response.data, health)
    else:
        console.print(f"[red]Run failed: {response.error}[/red]")

    if not response.success:
        raise typer.Exit(code=1)
    if health.status.value != "healthy":
        raise typer.Exit(code=2)


@app.command()
def health(
    url: Annotated[str, typer.Option("--url", help="Service base URL")] = DEFAULT_SERVICE_URL,
) -> None:
    """Show the health snapshot of a running service."""
    try:
        response = httpx.get(f"{url.rstrip('/')}/api/health", timeout=10.0)
    except httpx.HTTPError as e:
        console.print(f"[red]Service unreachable: {e}[/red]")
        raise typer.Exit(code=1)

    body = response.json()
    status = body.get("status", "unknown")
    color = "green" if status == "healthy" else "yellow"
    console.print(f"Status: [{color}]{status}[/{color}]")
    _print_health(body.get("system", {}), body.get("breakers"))

    if response.status_code != 200:
        raise typer.Exit(code=2)


@app.command()
def summary(
    url: Annotated[str, typer.Option("--url", help="Service base URL")] = DEFAULT_SERVICE_URL,
    token: Annotated[
        str | None, typer.Option("--token", help="Cron secret (default: $CRON_SECRET)")
    ] = None,
) -> None:
    """Ask a running service to send the daily health summary."""
    auth_token = token or os.environ.get("CRON_SECRET")
    if not auth_token:
        console.print("[red]No token given and CRON_SECRET is not set[/red]")
        raise typer.Exit(code=1)

    try:
        response = httpx.post(
            f"{url.rstrip('/')}/api/health",
            json={"action": "send_health_summary", "auth_token": auth_token},
            timeout=30.0,
        )
    except httpx.HTTPError as e:
        console.print(f"[red]Service unreachable: {e}[/red]")
        raise typer.Exit(code=1)

    if response.status_code != 200:
        console.print(f"[red]Request failed ({response.status_code}): {response.text}[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Health summary sent[/green]")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Energy Pulse v{__version__}[/bold]")


if __name__ == "__main__":
    app()
