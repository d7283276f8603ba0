"""CLI commands for logging and managing trades."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

import typer

from trademind.cli.formatters import (
    console,
    load_journal,
    output_json,
    print_advisories,
    print_issues,
    print_trade_detail,
    print_trades_table,
)
from trademind.config import JournalConfig
from trademind.core.enums import Emotion, OptionType, TradeDirection, TradeStatus
from trademind.core.models import JournalProfile, Trade, TradeDraft
from trademind.lifecycle import (
    GatingState,
    TradeGatingSession,
    add_trade,
    close_trade,
    delete_trade,
    edit_trade,
    find_trade,
    reopen_trade,
    replace_trade,
)
from trademind.market.prices import estimate_price
from trademind.market.vix import fetch_vix
from trademind.storage.journal_store import JournalStore

app = typer.Typer(name="trade", help="Log, close, reopen, edit and delete trades")

DATE_FORMATS = ["%Y-%m-%d", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%dT%H:%M:%S"]


def _open_store() -> tuple[JournalConfig, JournalStore, JournalProfile]:
    config = JournalConfig()
    store = JournalStore(config.data_path)
    return config, store, load_journal(store)


def _require_trade(profile: JournalProfile, trade_id: str) -> Trade:
    trade = find_trade(profile.trades, trade_id)
    if trade is None:
        console.print(f"[red]Trade '{trade_id}' not found.[/red]")
        raise typer.Exit(1)
    return trade


def _save_replacement(store: JournalStore, profile: JournalProfile, trade: Trade) -> None:
    result = replace_trade(profile.trades, trade)
    if not result.ok:
        print_issues(result.issues)
        raise typer.Exit(1)
    profile.trades = result.trades
    store.save(profile)


@app.command("add")
def trade_add(
    ticker: Annotated[str, typer.Option("--ticker", "-t", help="Underlying ticker")],
    entry_price: Annotated[float, typer.Option("--entry-price", "-p", help="Entry price per contract")],
    quantity: Annotated[int, typer.Option("--quantity", "-q", help="Number of contracts")] = 1,
    direction: Annotated[TradeDirection, typer.Option("--direction", "-d")] = TradeDirection.LONG,
    option_type: Annotated[
        Optional[OptionType], typer.Option("--type", help="Call or Put (omit with --shares)")
    ] = OptionType.CALL,
    shares: Annotated[bool, typer.Option("--shares", help="Underlying shares, no contract")] = False,
    strike: Annotated[Optional[float], typer.Option("--strike", help="Strike price")] = None,
    expiration: Annotated[
        Optional[datetime], typer.Option("--expiration", "-e", formats=["%Y-%m-%d"])
    ] = None,
    entry_date: Annotated[
        Optional[datetime], typer.Option("--entry-date", formats=DATE_FORMATS, help="Defaults to now")
    ] = None,
    fees: Annotated[float, typer.Option("--fees", help="Commissions and fees")] = 0.0,
    target: Annotated[Optional[float], typer.Option("--target", help="Target price")] = None,
    stop: Annotated[Optional[float], typer.Option("--stop", help="Stop-loss price")] = None,
    setup: Annotated[Optional[str], typer.Option("--setup", help="Setup/pattern tag")] = None,
    notes: Annotated[str, typer.Option("--notes", "-n")] = "",
    emotion: Annotated[Emotion, typer.Option("--emotion", help="Emotional state at entry")] = Emotion.CALM,
    check: Annotated[
        Optional[list[str]], typer.Option("--check", "-c", help="Checklist item id answered yes")
    ] = None,
    reason: Annotated[Optional[str], typer.Option("--reason", help="Why rules were broken")] = None,
    skip_vix: Annotated[bool, typer.Option("--skip-vix", help="Do not look up the VIX")] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Proceed past warnings without asking")] = False,
) -> None:
    """Log a new trade through the volatility, risk and discipline checks."""
    config, store, profile = _open_store()

    draft = TradeDraft(
        ticker=ticker,
        direction=direction,
        option_type=None if shares else option_type,
        setup=setup,
        entry_date=entry_date,
        expiration_date=expiration.date() if expiration else None,
        strike_price=strike,
        entry_price=entry_price,
        quantity=quantity,
        fees=fees,
        target_price=target,
        stop_loss_price=stop,
        notes=notes,
        entry_emotion=emotion,
    )

    vix_value = None
    if not skip_vix and not config.offline_mode:
        reading = fetch_vix()
        vix_value = reading.value if reading else None

    session = TradeGatingSession(
        draft,
        profile.trades,
        profile.settings,
        profile.initial_capital,
        vix_value=vix_value,
        vix_threshold=config.vix_threshold,
    )

    step = session.start()
    if step.issues:
        print_issues(step.issues)
        raise typer.Exit(1)

    if step.state == GatingState.VOLATILITY_CHECK:
        print_advisories(step.advisories)
        if not (yes or typer.confirm("Market volatility is high. Continue?", default=False)):
            session.cancel()
            console.print("[dim]Trade not logged.[/dim]")
            raise typer.Exit(1)
        step = session.acknowledge()

    if step.state == GatingState.RISK_CHECK:
        print_advisories(step.advisories)
        if not (yes or typer.confirm("Proceed anyway?", default=False)):
            session.revise()
            console.print("[dim]Trade not logged. Adjust size or stop and try again.[/dim]")
            raise typer.Exit(1)
        step = session.acknowledge()

    checked = set(check or [])
    answers = {}
    for question in step.questions:
        if yes or question.id in checked:
            answers[question.id] = question.id in checked
        else:
            answers[question.id] = typer.confirm(question.label, default=False)
    for key, passed in step.prefilled.items():
        mark = "[green]✓[/green]" if passed else "[red]✗[/red]"
        console.print(f"{mark} {key} (automatic)")

    if not yes and not typer.confirm("Log this trade?", default=True):
        session.cancel()
        console.print("[dim]Trade not logged.[/dim]")
        raise typer.Exit(1)

    step = session.submit_checklist(answers, reason)
    if step.state != GatingState.COMMITTED:
        print_issues(step.issues)
        raise typer.Exit(1)

    result = add_trade(profile.trades, step.trade)
    if not result.ok:
        print_issues(result.issues)
        raise typer.Exit(1)
    profile.trades = result.trades
    store.save(profile)

    score = step.trade.discipline_score
    color = "green" if score == 100 else "red"
    console.print(
        f"[bold green]Logged[/bold green] {step.trade.id} {step.trade.contract_name} "
        f"(discipline [{color}]{score}[/{color}])"
    )


@app.command("close")
def trade_close(
    trade_id: Annotated[str, typer.Argument(help="Trade ID")],
    exit_price: Annotated[Optional[float], typer.Option("--exit-price", "-x")] = None,
    exit_date: Annotated[
        Optional[datetime], typer.Option("--exit-date", formats=DATE_FORMATS, help="Defaults to now")
    ] = None,
    emotion: Annotated[Optional[Emotion], typer.Option("--emotion", help="Emotion at exit")] = None,
    fetch_price: Annotated[
        bool, typer.Option("--fetch-price", help="Suggest the exit price from market data")
    ] = False,
    yes: Annotated[bool, typer.Option("--yes", "-y")] = False,
) -> None:
    """Close an open trade and compute its P&L."""
    config, store, profile = _open_store()
    trade = _require_trade(profile, trade_id)

    if exit_price is None and fetch_price and not config.offline_mode:
        estimate = estimate_price(trade)
        if estimate is None or estimate.price is None:
            console.print("[yellow]No market price available.[/yellow]")
        else:
            console.print(f"[dim]{estimate.text}[/dim]")
            if yes or typer.confirm(f"Use ${estimate.price:,.2f} as exit price?", default=True):
                exit_price = estimate.price

    result = close_trade(
        trade,
        exit_price,
        exit_date,
        emotion,
        trades=profile.trades,
        settings=profile.settings,
    )
    if not result.ok:
        print_issues(result.issues)
        raise typer.Exit(1)
    print_advisories(result.advisories)

    _save_replacement(store, profile, result.trade)
    console.print(
        f"[bold green]Closed[/bold green] {result.trade.id} at ${result.trade.exit_price:,.2f}, "
        f"P&L ${result.trade.pnl:,.2f}"
    )


@app.command("reopen")
def trade_reopen(
    trade_id: Annotated[str, typer.Argument(help="Trade ID")],
    yes: Annotated[bool, typer.Option("--yes", "-y")] = False,
) -> None:
    """Reopen a closed trade, clearing its exit and P&L."""
    _, store, profile = _open_store()
    trade = _require_trade(profile, trade_id)

    if not yes and not typer.confirm(f"Re-open {trade.contract_name}? Exit and P&L are cleared."):
        raise typer.Exit(1)

    result = reopen_trade(trade)
    if not result.ok:
        print_issues(result.issues)
        raise typer.Exit(1)
    _save_replacement(store, profile, result.trade)
    console.print(f"[bold green]Reopened[/bold green] {trade.id}")


@app.command("edit")
def trade_edit(
    trade_id: Annotated[str, typer.Argument(help="Trade ID")],
    ticker: Annotated[Optional[str], typer.Option("--ticker")] = None,
    direction: Annotated[Optional[TradeDirection], typer.Option("--direction")] = None,
    option_type: Annotated[Optional[OptionType], typer.Option("--type")] = None,
    entry_price: Annotated[Optional[float], typer.Option("--entry-price")] = None,
    entry_date: Annotated[Optional[datetime], typer.Option("--entry-date", formats=DATE_FORMATS)] = None,
    quantity: Annotated[Optional[int], typer.Option("--quantity")] = None,
    strike: Annotated[Optional[float], typer.Option("--strike")] = None,
    expiration: Annotated[Optional[datetime], typer.Option("--expiration", formats=["%Y-%m-%d"])] = None,
    fees: Annotated[Optional[float], typer.Option("--fees")] = None,
    target: Annotated[Optional[float], typer.Option("--target")] = None,
    stop: Annotated[Optional[float], typer.Option("--stop")] = None,
    setup: Annotated[Optional[str], typer.Option("--setup")] = None,
    notes: Annotated[Optional[str], typer.Option("--notes")] = None,
    emotion: Annotated[Optional[Emotion], typer.Option("--emotion")] = None,
    exit_price: Annotated[Optional[float], typer.Option("--exit-price")] = None,
    exit_date: Annotated[Optional[datetime], typer.Option("--exit-date", formats=DATE_FORMATS)] = None,
    exit_emotion: Annotated[Optional[Emotion], typer.Option("--exit-emotion")] = None,
    status: Annotated[Optional[TradeStatus], typer.Option("--status")] = None,
    recalc: Annotated[
        bool, typer.Option("--recalc", help="Re-derive target/stop from entry price and direction")
    ] = False,
) -> None:
    """Edit trade fields. P&L and other derived fields are recomputed."""
    _, store, profile = _open_store()
    trade = _require_trade(profile, trade_id)

    candidates = {
        "ticker": ticker,
        "direction": direction,
        "option_type": option_type,
        "entry_price": entry_price,
        "entry_date": entry_date,
        "quantity": quantity,
        "strike_price": strike,
        "expiration_date": expiration.date() if expiration else None,
        "fees": fees,
        "target_price": target,
        "stop_loss_price": stop,
        "setup": setup,
        "notes": notes,
        "entry_emotion": emotion,
        "exit_price": exit_price,
        "exit_date": exit_date,
        "exit_emotion": exit_emotion,
        "status": status,
    }
    changes = {k: v for k, v in candidates.items() if v is not None}
    if not changes:
        console.print("[dim]Nothing to change.[/dim]")
        return

    result = edit_trade(
        trade,
        changes,
        settings=profile.settings,
        recalculate_defaults=recalc,
        trades=profile.trades,
    )
    if not result.ok:
        print_issues(result.issues)
        raise typer.Exit(1)
    print_advisories(result.advisories)
    _save_replacement(store, profile, result.trade)
    console.print(f"[bold green]Updated[/bold green] {trade.id}")


@app.command("delete")
def trade_delete(
    trade_id: Annotated[str, typer.Argument(help="Trade ID")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")] = False,
) -> None:
    """Delete a trade permanently."""
    _, store, profile = _open_store()
    trade = _require_trade(profile, trade_id)

    confirmed = yes or typer.confirm(
        f"Delete {trade.contract_name} ({trade.id})? This cannot be undone.", default=False
    )
    result = delete_trade(profile.trades, trade_id, confirmed=confirmed)
    if not result.ok:
        print_issues(result.issues)
        raise typer.Exit(1)
    profile.trades = result.trades
    store.save(profile)
    console.print(f"[bold green]Deleted[/bold green] {trade_id}")


@app.command("list")
def trade_list(
    status: Annotated[Optional[TradeStatus], typer.Option("--status", "-s")] = None,
    ticker: Annotated[Optional[str], typer.Option("--ticker", "-t")] = None,
    setup: Annotated[Optional[str], typer.Option("--setup")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n")] = None,
    output: Annotated[Optional[str], typer.Option("--output", help="Output format")] = None,
) -> None:
    """List journaled trades, newest entry first."""
    _, _, profile = _open_store()
    trades = sorted(profile.trades, key=lambda t: t.entry_date, reverse=True)
    if status:
        trades = [t for t in trades if t.status == status]
    if ticker:
        trades = [t for t in trades if t.ticker == ticker.upper()]
    if setup:
        trades = [t for t in trades if t.setup and setup.lower() in t.setup.lower()]
    if limit:
        trades = trades[:limit]

    if output == "json":
        output_json(trades)
        return
    if not trades:
        console.print("[dim]No trades found.[/dim]")
        return
    print_trades_table(trades)


@app.command("show")
def trade_show(
    trade_id: Annotated[str, typer.Argument(help="Trade ID")],
) -> None:
    """Show one trade in detail."""
    _, _, profile = _open_store()
    print_trade_detail(_require_trade(profile, trade_id))
