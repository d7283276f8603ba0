"""CLI commands for market lookups (VIX, trade prices)."""

from __future__ import annotations

from typing import Annotated

import typer

from trademind.cli.formatters import console, print_load_error
from trademind.config import JournalConfig
from trademind.market.prices import estimate_price
from trademind.market.vix import fetch_vix, is_high_volatility
from trademind.storage.journal_store import JournalLoadError, JournalStore

app = typer.Typer(name="market", help="VIX and price lookups")


def _require_online(config: JournalConfig, what: str) -> None:
    if config.offline_mode:
        console.print(f"[yellow]Offline mode: {what} skipped.[/yellow]")
        raise typer.Exit(1)


@app.command("vix")
def market_vix() -> None:
    """Show the latest VIX close and whether it is above the threshold."""
    config = JournalConfig()
    _require_online(config, "VIX lookup")
    reading = fetch_vix()
    if reading is None:
        console.print("[yellow]VIX unavailable.[/yellow]")
        raise typer.Exit(1)

    if is_high_volatility(reading, config.vix_threshold):
        console.print(
            f"[bold red]VIX {reading.value:.2f}[/bold red] (above {config.vix_threshold:g}, "
            "high volatility)"
        )
    else:
        console.print(f"[green]VIX {reading.value:.2f}[/green] (threshold {config.vix_threshold:g})")
    console.print(f"[dim]as of {reading.timestamp:%Y-%m-%d %H:%M}[/dim]")


@app.command("price")
def market_price(
    trade_id: Annotated[str, typer.Argument(help="Trade ID")],
) -> None:
    """Look up a current price for a journaled trade."""
    config = JournalConfig()
    _require_online(config, "price lookup")
    try:
        trade = JournalStore(config.data_path).get_trade(trade_id)
    except JournalLoadError as e:
        print_load_error(e)
        raise typer.Exit(1)
    if trade is None:
        console.print(f"[red]Trade '{trade_id}' not found.[/red]")
        raise typer.Exit(1)

    estimate = estimate_price(trade)
    if estimate is None:
        console.print(f"[yellow]No price found for {trade.contract_name}.[/yellow]")
        raise typer.Exit(1)

    console.print(estimate.text)
    for source in estimate.sources:
        console.print(f"[dim]{source.title}: {source.uri}[/dim]")
