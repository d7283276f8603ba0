"""CLI commands for account stats, trading rules, sessions and backups."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.table import Table

from trademind.analytics.metrics import compute_metrics, equity_curve, monthly_calendar, performance_by
from trademind.cli.formatters import (
    console,
    format_money,
    load_journal,
    output_json,
    print_breakdown,
    print_load_error,
    print_metrics,
    print_settings,
)
from trademind.config import JournalConfig
from trademind.core.models import UserSettings
from trademind.storage.journal_store import JournalLoadError, JournalStore

app = typer.Typer(name="account", help="Stats, trading rules, sessions and backups")
settings_app = typer.Typer(name="settings", help="View and change trading rules")
app.add_typer(settings_app, name="settings")


def _store() -> JournalStore:
    return JournalStore(JournalConfig().data_path)


@app.command("stats")
def account_stats(
    output: Annotated[Optional[str], typer.Option("--output", help="Output format (json)")] = None,
) -> None:
    """Win rate, P&L, drawdown and per-setup performance."""
    profile = load_journal(_store())
    metrics = compute_metrics(profile.trades)

    if output == "json":
        output_json(
            {
                "initial_capital": profile.initial_capital,
                "metrics": metrics.model_dump(mode="json"),
                "by_setup": performance_by(profile.trades, "setup"),
                "by_strategy": performance_by(profile.trades, "strategy"),
                "equity_curve": [
                    p.model_dump(mode="json")
                    for p in equity_curve(profile.trades, profile.initial_capital)
                ],
            }
        )
        return

    print_metrics(metrics, profile.initial_capital)
    print_breakdown("P&L by Setup", performance_by(profile.trades, "setup"))
    print_breakdown("P&L by Strategy", performance_by(profile.trades, "strategy"))


@app.command("calendar")
def account_calendar(
    month: Annotated[Optional[str], typer.Option("--month", "-m", help="YYYY-MM, default current")] = None,
) -> None:
    """Daily P&L for one month."""
    if month:
        try:
            year_str, month_str = month.split("-")
            year, month_num = int(year_str), int(month_str)
        except ValueError:
            console.print(f"[red]Invalid month '{month}', expected YYYY-MM.[/red]")
            raise typer.Exit(1)
    else:
        today = date.today()
        year, month_num = today.year, today.month

    summary = monthly_calendar(load_journal(_store()).trades, year, month_num)
    table = Table(title=f"{year}-{month_num:02d}")
    table.add_column("Day")
    table.add_column("Trades", justify="right")
    table.add_column("Wins", justify="right")
    table.add_column("P&L", justify="right")
    for day in summary.days:
        table.add_row(day.day.isoformat(), str(day.count), str(day.wins), format_money(day.pnl))
    console.print(table)
    console.print(
        f"Total: {format_money(summary.total_pnl)} over {summary.total_trades} trades, "
        f"win rate {summary.win_rate:.1f}%"
    )


@settings_app.command("show")
def settings_show() -> None:
    """Show the current trading rules."""
    print_settings(load_journal(_store()).settings)


@settings_app.command("set")
def settings_set(
    target: Annotated[Optional[float], typer.Option("--target", help="Default target %")] = None,
    stop: Annotated[Optional[float], typer.Option("--stop", help="Default stop-loss %")] = None,
    max_trades: Annotated[Optional[int], typer.Option("--max-trades", help="Max trades per day")] = None,
    max_risk: Annotated[Optional[float], typer.Option("--max-risk", help="Max risk % per trade")] = None,
) -> None:
    """Update trading rules. Unspecified rules keep their values."""
    store = _store()
    profile = load_journal(store)
    updates = {
        "default_target_percent": target,
        "default_stop_loss_percent": stop,
        "max_trades_per_day": max_trades,
        "max_risk_per_trade_percent": max_risk,
    }
    merged = profile.settings.model_dump() | {k: v for k, v in updates.items() if v is not None}
    try:
        settings = UserSettings.model_validate(merged)
    except ValidationError as e:
        for error in e.errors():
            console.print(f"[red]✗ {'.'.join(str(p) for p in error['loc'])}:[/red] {error['msg']}")
        raise typer.Exit(1)

    store.update_settings(settings)
    print_settings(settings)


@app.command("reset")
def account_reset(
    capital: Annotated[float, typer.Option("--capital", help="Starting capital for the new session")],
    yes: Annotated[bool, typer.Option("--yes", "-y")] = False,
) -> None:
    """Archive the current session and start fresh."""
    if capital <= 0:
        console.print("[red]Capital must be positive.[/red]")
        raise typer.Exit(1)
    if not yes and not typer.confirm("Archive all current trades and start a new session?"):
        raise typer.Exit(1)

    try:
        archive = _store().archive_session(capital)
    except JournalLoadError as e:
        print_load_error(e)
        raise typer.Exit(1)
    console.print(
        f"[bold green]Archived[/bold green] session {archive.id}: {archive.trade_count} trades, "
        f"final balance ${archive.final_balance:,.2f}"
    )


@app.command("history")
def account_history() -> None:
    """List archived sessions."""
    archives = load_journal(_store()).archives
    if not archives:
        console.print("[dim]No archived sessions.[/dim]")
        return

    table = Table(title="Archived Sessions")
    table.add_column("ID", style="cyan")
    table.add_column("Period")
    table.add_column("Trades", justify="right")
    table.add_column("Start", justify="right")
    table.add_column("End", justify="right")
    table.add_column("P&L", justify="right")
    for a in archives:
        table.add_row(
            a.id,
            f"{a.start_date:%Y-%m-%d} → {a.end_date:%Y-%m-%d}",
            str(a.trade_count),
            f"${a.initial_capital:,.2f}",
            f"${a.final_balance:,.2f}",
            format_money(a.total_pnl),
        )
    console.print(table)


@app.command("export")
def account_export(
    path: Annotated[Optional[Path], typer.Option("--path", help="CSV file to write")] = None,
) -> None:
    """Export trade history to CSV."""
    config = JournalConfig()
    target = path or config.export_dir / f"trademind_journal_{date.today().isoformat()}.csv"
    try:
        written = JournalStore(config.data_path).export_csv(target)
    except JournalLoadError as e:
        print_load_error(e)
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"Exported to [cyan]{written}[/cyan]")


@app.command("backup")
def account_backup(
    path: Annotated[Optional[Path], typer.Option("--path", help="JSON file to write")] = None,
) -> None:
    """Write a full JSON backup of the journal."""
    config = JournalConfig()
    target = path or config.export_dir / f"trademind_backup_{date.today().isoformat()}.json"
    try:
        written = JournalStore(config.data_path).export_backup(target)
    except JournalLoadError as e:
        print_load_error(e)
        raise typer.Exit(1)
    console.print(f"Backup written to [cyan]{written}[/cyan]")


@app.command("restore")
def account_restore(
    path: Annotated[Path, typer.Argument(help="Backup JSON file")],
    yes: Annotated[bool, typer.Option("--yes", "-y")] = False,
) -> None:
    """Replace the journal with a backup."""
    if not yes and not typer.confirm("Overwrite the current journal with this backup?"):
        raise typer.Exit(1)
    try:
        profile = _store().import_backup(path)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except ValidationError as e:
        console.print(f"[red]Invalid backup file: {e.error_count()} errors[/red]")
        raise typer.Exit(1)
    console.print(f"Restored {len(profile.trades)} trades.")
