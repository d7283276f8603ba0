"""Daily trade-slot accounting for the trades-per-day limit."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from pydantic import BaseModel

from trademind.core.models import Trade

# An entry and an exit each consume half a slot
ACTIVITY_UNIT = 0.5


class DailyLimitCheck(BaseModel):
    day: date
    current: float
    projected: float
    limit: int
    respected: bool


def count_daily_activity(
    trades: Iterable[Trade],
    day: date,
    exclude_trade_id: str | None = None,
) -> float:
    """Count trade slots consumed on a local calendar day.

    Each trade adds 0.5 if it was entered on ``day`` and another 0.5 if it
    was exited on ``day``, so a same-day round trip costs a full slot.
    """
    total = 0.0
    for trade in trades:
        if exclude_trade_id is not None and trade.id == exclude_trade_id:
            continue
        if trade.entry_date.date() == day:
            total += ACTIVITY_UNIT
        if trade.exit_date is not None and trade.exit_date.date() == day:
            total += ACTIVITY_UNIT
    return total


def check_daily_limit(
    trades: Iterable[Trade],
    day: date,
    max_per_day: int,
    pending_units: float = ACTIVITY_UNIT,
    exclude_trade_id: str | None = None,
) -> DailyLimitCheck:
    """Project the day's count with ``pending_units`` added and compare to the limit."""
    current = count_daily_activity(trades, day, exclude_trade_id)
    projected = current + pending_units
    return DailyLimitCheck(
        day=day,
        current=current,
        projected=projected,
        limit=max_per_day,
        respected=projected <= max_per_day,
    )
