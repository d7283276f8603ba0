"""Journal performance metrics: win rate, drawdown, equity curve, calendars."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Literal

import pandas as pd
from pydantic import BaseModel, Field

from trademind.core.models import Trade

NO_SETUP = "No Setup"


class Metrics(BaseModel):
    total_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    average_pnl: float = 0.0
    discipline_score: float = 0.0
    max_drawdown: float = 0.0


class EquityPoint(BaseModel):
    date: datetime | None = None
    balance: float
    pnl: float = 0.0


class DaySummary(BaseModel):
    day: date
    pnl: float = 0.0
    count: int = 0
    wins: int = 0


class MonthSummary(BaseModel):
    year: int
    month: int
    days: list[DaySummary] = Field(default_factory=list)
    total_pnl: float = 0.0
    total_trades: int = 0
    win_rate: float = 0.0


def _by_entry_date(trades: list[Trade]) -> list[Trade]:
    return sorted(trades, key=lambda t: t.entry_date)


def compute_metrics(trades: list[Trade]) -> Metrics:
    """Aggregate stats. Win rate and averages only count trades with P&L."""
    if not trades:
        return Metrics()

    realized = [t.pnl for t in trades if t.pnl is not None]
    total_pnl = sum(realized)
    wins = sum(1 for p in realized if p > 0)

    # Peak-to-valley over cumulative realized P&L in entry order
    peak = equity = max_dd = 0.0
    for trade in _by_entry_date(trades):
        if trade.pnl:
            equity += trade.pnl
        peak = max(peak, equity)
        max_dd = max(max_dd, peak - equity)

    return Metrics(
        total_trades=len(trades),
        win_rate=(wins / len(realized) * 100) if realized else 0.0,
        total_pnl=round(total_pnl, 2),
        average_pnl=round(total_pnl / len(realized), 2) if realized else 0.0,
        discipline_score=sum(t.discipline_score for t in trades) / len(trades),
        max_drawdown=round(max_dd, 2),
    )


def equity_curve(trades: list[Trade], initial_capital: float) -> list[EquityPoint]:
    """Account balance after each realized trade, starting from capital."""
    points = [EquityPoint(balance=initial_capital)]
    balance = initial_capital
    for trade in _by_entry_date(trades):
        if trade.pnl is not None:
            balance += trade.pnl
            points.append(EquityPoint(date=trade.entry_date, balance=round(balance, 2), pnl=trade.pnl))
    return points


def trades_frame(trades: list[Trade]) -> pd.DataFrame:
    """Flatten trades into a DataFrame (one row per trade)."""
    if not trades:
        return pd.DataFrame(columns=list(Trade.model_fields))
    rows = []
    for trade in trades:
        row = trade.model_dump(mode="json", exclude={"checklist"})
        row["entry_date"] = trade.entry_date
        row["exit_date"] = trade.exit_date
        row["outcome"] = trade.outcome.value
        rows.append(row)
    return pd.DataFrame(rows)


def performance_by(
    trades: list[Trade],
    key: Literal["setup", "strategy"] = "setup",
) -> dict[str, float]:
    """Total realized P&L grouped by setup tag or by direction + option type."""
    realized = [t for t in trades if t.pnl]
    if not realized:
        return {}

    df = trades_frame(realized)
    if key == "strategy":
        labels = df["direction"] + " " + df["option_type"].fillna("Shares")
    else:
        labels = df["setup"].fillna(NO_SETUP).replace("", NO_SETUP)
    grouped = df.groupby(labels)["pnl"].sum()
    return {str(name): round(float(value), 2) for name, value in grouped.items()}


def monthly_calendar(trades: list[Trade], year: int, month: int) -> MonthSummary:
    """Per-day P&L, trade count and wins for trades entered in the month."""
    in_month = [t for t in trades if t.entry_date.year == year and t.entry_date.month == month]
    summary = MonthSummary(year=year, month=month)
    if not in_month:
        return summary

    df = trades_frame(in_month)
    df["day"] = pd.to_datetime(df["entry_date"]).dt.day
    df["realized"] = df["pnl"].fillna(0.0)
    df["win"] = df["pnl"].fillna(0.0) > 0

    daily = df.groupby("day").agg(pnl=("realized", "sum"), count=("id", "count"), wins=("win", "sum"))
    _, days_in_month = calendar.monthrange(year, month)
    for day_num, row in daily.iterrows():
        if 1 <= day_num <= days_in_month:
            summary.days.append(
                DaySummary(
                    day=date(year, month, int(day_num)),
                    pnl=round(float(row["pnl"]), 2),
                    count=int(row["count"]),
                    wins=int(row["wins"]),
                )
            )

    summary.total_trades = len(in_month)
    summary.total_pnl = round(float(df["realized"].sum()), 2)
    summary.win_rate = int(df["win"].sum()) / len(in_month) * 100
    return summary
