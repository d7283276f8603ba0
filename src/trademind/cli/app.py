"""Root CLI application for the trade journal."""

from __future__ import annotations

import logging

import typer
from rich.markdown import Markdown

from trademind.cli.account_cmds import app as account_app
from trademind.cli.formatters import console, print_load_error
from trademind.cli.market_cmds import app as market_app
from trademind.cli.trade_cmds import app as trade_app

app = typer.Typer(
    name="trademind",
    help="Options trade journal with risk and discipline checks",
    no_args_is_help=True,
)

app.add_typer(trade_app, name="trade")
app.add_typer(account_app, name="account")
app.add_typer(market_app, name="market")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """TradeMind journal CLI."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s | %(name)s | %(message)s",
    )


@app.command("coach")
def coach() -> None:
    """Ask the AI coach for feedback on recent trades."""
    from trademind.coach.llm import TradingCoach
    from trademind.config import JournalConfig
    from trademind.storage.journal_store import JournalLoadError, JournalStore

    config = JournalConfig()
    trading_coach = TradingCoach(config)
    if not trading_coach.available:
        console.print("[yellow]Coach unavailable. Set TRADEMIND_ANTHROPIC_API_KEY.[/yellow]")
        raise typer.Exit(1)

    try:
        trades = JournalStore(config.data_path).list_trades()
    except JournalLoadError as e:
        print_load_error(e)
        raise typer.Exit(1)
    if not trades:
        console.print("[dim]Log some trades first.[/dim]")
        return

    with console.status("Reviewing your journal..."):
        insight = trading_coach.coaching_insight(trades)
    if insight is None:
        console.print("[yellow]The coach could not be reached. Try again later.[/yellow]")
        raise typer.Exit(1)
    console.print(Markdown(insight))


if __name__ == "__main__":
    app()
