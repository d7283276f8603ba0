"""Per-trade capital-at-risk against a percent-of-balance ceiling."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel

from trademind.core.pricing import CONTRACT_MULTIPLIER


class RiskEvaluation(BaseModel):
    risk_amount: float
    max_allowed: float
    current_balance: float
    percent_of_balance: float | None = None
    respected: bool


def current_balance(
    initial_capital: float,
    trades: Iterable,
    exclude_trade_id: str | None = None,
) -> float:
    """Initial capital plus every realized P&L in the collection."""
    realized = sum(
        t.pnl
        for t in trades
        if t.pnl is not None and (exclude_trade_id is None or t.id != exclude_trade_id)
    )
    return initial_capital + realized


def evaluate_risk(
    proposed,
    trades: Iterable,
    initial_capital: float,
    max_risk_percent: float,
) -> RiskEvaluation:
    """Compare a proposed trade's stop-defined risk to the allowed ceiling.

    ``proposed`` is anything with entry_price, stop_loss_price and quantity
    (a Trade or a TradeDraft). Without a stop the quantifiable risk is zero.
    """
    balance = current_balance(initial_capital, trades, getattr(proposed, "id", None))

    entry = proposed.entry_price or 0.0
    stop = proposed.stop_loss_price
    quantity = proposed.quantity or 0
    risk_per_unit = abs(entry - stop) if stop is not None else 0.0

    risk_amount = round(risk_per_unit * quantity * CONTRACT_MULTIPLIER, 2)
    max_allowed = round(balance * (max_risk_percent / 100), 2)
    percent = round(risk_amount / balance * 100, 2) if balance > 0 else None

    return RiskEvaluation(
        risk_amount=risk_amount,
        max_allowed=max_allowed,
        current_balance=balance,
        percent_of_balance=percent,
        respected=risk_amount <= max_allowed,
    )
