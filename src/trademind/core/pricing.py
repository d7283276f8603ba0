"""Target/stop defaults and realized P&L for option trades."""

from __future__ import annotations

import math

from trademind.core.enums import TradeDirection

# Standard equity option contract size
CONTRACT_MULTIPLIER = 100


def direction_sign(direction: TradeDirection) -> int:
    """+1 for Long, -1 for Short."""
    return 1 if direction == TradeDirection.LONG else -1


def _is_positive_price(value: float | None) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False


def compute_default_target_and_stop(
    entry_price: float,
    direction: TradeDirection,
    target_percent: float,
    stop_percent: float,
) -> tuple[float, float] | None:
    """Derive default target and stop-loss prices from the entry price.

    Percentages are in percent units (40 means 40%). For Long the target sits
    above entry and the stop below; Short inverts both. Prices are rounded to
    cents. Returns None when the entry price is not a finite positive number.
    """
    if not _is_positive_price(entry_price):
        return None

    target_move = target_percent / 100.0
    stop_move = stop_percent / 100.0

    if direction == TradeDirection.LONG:
        target = entry_price * (1 + target_move)
        stop = entry_price * (1 - stop_move)
    else:
        target = entry_price * (1 - target_move)
        stop = entry_price * (1 + stop_move)

    return round(target, 2), round(stop, 2)


def compute_realized_pnl(
    entry_price: float,
    exit_price: float,
    quantity: int,
    direction: TradeDirection,
    fees: float = 0.0,
) -> float | None:
    """Realized P&L: (exit - entry) * quantity * 100 * sign - fees.

    Returns None if either price is not a finite positive number or the
    quantity is not positive.
    """
    if not _is_positive_price(entry_price) or not _is_positive_price(exit_price):
        return None
    if quantity is None or quantity <= 0:
        return None

    gross = (exit_price - entry_price) * quantity * CONTRACT_MULTIPLIER * direction_sign(direction)
    return round(gross - (fees or 0.0), 2)
