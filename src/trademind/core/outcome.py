"""Outcome classification of closed trades against their stop and target."""

from __future__ import annotations

from typing import TYPE_CHECKING

from trademind.core.enums import Outcome, TradeDirection, TradeStatus
from trademind.core.pricing import direction_sign

if TYPE_CHECKING:
    from trademind.core.models import Trade

NEUTRAL_BAND_LOW = -10.0
NEUTRAL_BAND_HIGH = 20.0


def percent_change(trade: Trade) -> float | None:
    """Direction-adjusted percent move from entry to exit."""
    if trade.exit_price is None or not trade.entry_price:
        return None
    raw = (trade.exit_price - trade.entry_price) / trade.entry_price * 100
    return raw * direction_sign(trade.direction)


def classify_outcome(trade: Trade) -> Outcome:
    """Classify a closed trade. First match wins:

    1. stop-loss violated (exit at or through the stop)
    2. target hit (exit at or through the target)
    3. neutral (direction-adjusted move within [-10%, +20%])
    4. unclassified
    """
    if trade.status != TradeStatus.CLOSED or trade.exit_price is None or not trade.entry_price:
        return Outcome.UNCLASSIFIED

    is_long = trade.direction == TradeDirection.LONG
    exit_price = trade.exit_price

    stop = trade.stop_loss_price
    if stop is not None:
        if (is_long and exit_price <= stop) or (not is_long and exit_price >= stop):
            return Outcome.STOP_LOSS_VIOLATED

    target = trade.target_price
    if target is not None:
        if (is_long and exit_price >= target) or (not is_long and exit_price <= target):
            return Outcome.TARGET_HIT

    change = percent_change(trade)
    if change is not None and NEUTRAL_BAND_LOW <= change <= NEUTRAL_BAND_HIGH:
        return Outcome.NEUTRAL

    return Outcome.UNCLASSIFIED
