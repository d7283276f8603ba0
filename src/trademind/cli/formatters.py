"""Output formatters for the CLI - JSON and rich table output."""

from __future__ import annotations

import json
import sys
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from trademind.analytics.metrics import Metrics
from trademind.core.enums import Outcome, TradeStatus
from trademind.core.models import JournalProfile, Trade, UserSettings
from trademind.lifecycle.results import PolicyAdvisory, ValidationIssue
from trademind.storage.journal_store import JournalLoadError, JournalStore

console = Console()

OUTCOME_LABELS = {
    Outcome.STOP_LOSS_VIOLATED: "[red]stop violated[/red]",
    Outcome.TARGET_HIT: "[green]target hit[/green]",
    Outcome.NEUTRAL: "[yellow]neutral[/yellow]",
    Outcome.UNCLASSIFIED: "",
}


def output_json(data: Any, file=None) -> None:
    """Write JSON output to stdout."""
    file = file or sys.stdout
    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")
    elif isinstance(data, list) and data and hasattr(data[0], "model_dump"):
        data = [item.model_dump(mode="json") for item in data]
    print(json.dumps(data, indent=2, default=str), file=file)


def format_money(value: float | None) -> str:
    if value is None:
        return "-"
    color = "green" if value > 0 else "red" if value < 0 else "white"
    return f"[{color}]${value:,.2f}[/{color}]"


def format_price(value: float | None) -> str:
    return f"${value:,.2f}" if value is not None else "-"


def print_issues(issues: list[ValidationIssue]) -> None:
    for issue in issues:
        console.print(f"[red]✗ {issue.field}:[/red] {issue.message}")


def print_advisories(advisories: list[PolicyAdvisory]) -> None:
    for advisory in advisories:
        console.print(f"[yellow]⚠ {advisory.kind.value}:[/yellow] {advisory.message}")


def print_trades_table(trades: list[Trade]) -> None:
    """Print a rich table of trades."""
    table = Table(title="Trade Journal")
    table.add_column("ID", style="cyan")
    table.add_column("Date")
    table.add_column("Contract")
    table.add_column("Dir")
    table.add_column("Status")
    table.add_column("Entry", justify="right")
    table.add_column("Exit", justify="right")
    table.add_column("Qty", justify="right")
    table.add_column("P&L", justify="right")
    table.add_column("Outcome")
    table.add_column("Score", justify="right")

    for t in trades:
        status = (
            f"[blue]{t.status.value}[/blue]"
            if t.status == TradeStatus.OPEN
            else f"[dim]{t.status.value}[/dim]"
        )
        table.add_row(
            t.id,
            t.entry_date.strftime("%Y-%m-%d"),
            t.contract_name,
            t.direction.value,
            status,
            format_price(t.entry_price),
            format_price(t.exit_price),
            str(t.quantity),
            format_money(t.pnl),
            OUTCOME_LABELS[t.outcome],
            str(t.discipline_score),
        )

    console.print(table)


def print_trade_detail(trade: Trade) -> None:
    lines = [
        f"[cyan]Ticker:[/cyan] {trade.ticker}  [cyan]Direction:[/cyan] {trade.direction.value}  "
        f"[cyan]Type:[/cyan] {trade.option_type.value if trade.option_type else 'Shares'}",
        f"[cyan]Status:[/cyan] {trade.status.value}",
        f"[cyan]Entry:[/cyan] {format_price(trade.entry_price)} x {trade.quantity} on "
        f"{trade.entry_date:%Y-%m-%d %H:%M}",
        f"[cyan]Strike:[/cyan] {format_price(trade.strike_price)}  [cyan]Expiration:[/cyan] "
        f"{trade.expiration_date or '-'}",
        f"[cyan]Target:[/cyan] {format_price(trade.target_price)}  [cyan]Stop:[/cyan] "
        f"{format_price(trade.stop_loss_price)}  [cyan]Fees:[/cyan] {format_price(trade.fees)}",
    ]
    if trade.status == TradeStatus.CLOSED:
        lines.append(
            f"[cyan]Exit:[/cyan] {format_price(trade.exit_price)} on {trade.exit_date:%Y-%m-%d %H:%M}  "
            f"[cyan]P&L:[/cyan] {format_money(trade.pnl)}  [cyan]Outcome:[/cyan] "
            f"{OUTCOME_LABELS[trade.outcome] or '-'}"
        )
    lines.append(
        f"[cyan]Emotion:[/cyan] {trade.entry_emotion.value}"
        + (f" -> {trade.exit_emotion.value}" if trade.exit_emotion else "")
    )
    if trade.setup:
        lines.append(f"[cyan]Setup:[/cyan] {trade.setup}")
    lines.append(f"[cyan]Discipline:[/cyan] {trade.discipline_score}/100")
    for key, passed in trade.checklist.items():
        mark = "[green]✓[/green]" if passed else "[red]✗[/red]"
        lines.append(f"  {mark} {key}")
    if trade.violation_reason:
        lines.append(f"[red]Violation:[/red] {trade.violation_reason}")
    if trade.notes:
        lines.append(f"[cyan]Notes:[/cyan] {trade.notes}")

    console.print(Panel("\n".join(lines), title=f"Trade {trade.id}: {trade.contract_name}"))


def print_metrics(metrics: Metrics, initial_capital: float) -> None:
    balance = initial_capital + metrics.total_pnl
    table = Table(title="Journal Metrics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Initial Capital", f"${initial_capital:,.2f}")
    table.add_row("Current Balance", format_money(balance))
    table.add_row("Total Trades", str(metrics.total_trades))
    table.add_row("Win Rate", f"{metrics.win_rate:.1f}%")
    table.add_row("Total P&L", format_money(metrics.total_pnl))
    table.add_row("Average P&L", format_money(metrics.average_pnl))
    table.add_row("Avg Discipline", f"{metrics.discipline_score:.0f}")
    table.add_row("Max Drawdown", f"${metrics.max_drawdown:,.2f}")

    console.print(table)


def print_breakdown(title: str, values: dict[str, float]) -> None:
    if not values:
        return
    table = Table(title=title)
    table.add_column("Name", style="cyan")
    table.add_column("P&L", justify="right")
    for name, pnl in sorted(values.items(), key=lambda kv: kv[1], reverse=True):
        table.add_row(name, format_money(pnl))
    console.print(table)


def print_settings(settings: UserSettings) -> None:
    table = Table(title="Trading Rules")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Default Target", f"{settings.default_target_percent:g}%")
    table.add_row("Default Stop Loss", f"{settings.default_stop_loss_percent:g}%")
    table.add_row("Max Trades / Day", str(settings.max_trades_per_day))
    table.add_row("Max Risk / Trade", f"{settings.max_risk_per_trade_percent:g}% of balance")
    table.add_row("Custom Checklist", "yes" if settings.checklist else "default")
    console.print(table)


def print_load_error(error: JournalLoadError) -> None:
    console.print(f"[red]{escape(str(error))}[/red]")
    console.print("[dim]Fix the file or replace it with 'trademind account restore <backup>'.[/dim]")


def load_journal(store: JournalStore) -> JournalProfile:
    """Load the profile, or report an unreadable journal file and exit 1."""
    try:
        return store.load()
    except JournalLoadError as e:
        print_load_error(e)
        raise typer.Exit(1)
