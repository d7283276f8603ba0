"""Trade collection updates by replacement.

The collection is a value: every function returns a new list and leaves
the input untouched.
"""

from __future__ import annotations

import logging

from trademind.core.models import Trade
from trademind.lifecycle.results import IssueCode, JournalResult, ValidationIssue

logger = logging.getLogger(__name__)


def _not_found(trade_id: str) -> ValidationIssue:
    return ValidationIssue(field="id", code=IssueCode.NOT_FOUND, message=f"Trade '{trade_id}' not found.")


def find_trade(trades: list[Trade], trade_id: str) -> Trade | None:
    return next((t for t in trades if t.id == trade_id), None)


def add_trade(trades: list[Trade], trade: Trade) -> JournalResult:
    """Insert a committed trade at the front (newest first)."""
    if find_trade(trades, trade.id) is not None:
        return JournalResult(
            trades=list(trades),
            issues=[
                ValidationIssue(
                    field="id", code=IssueCode.INVALID, message=f"Trade '{trade.id}' already exists."
                )
            ],
        )
    return JournalResult(trades=[trade, *trades])


def replace_trade(trades: list[Trade], trade: Trade) -> JournalResult:
    if find_trade(trades, trade.id) is None:
        return JournalResult(trades=list(trades), issues=[_not_found(trade.id)])
    return JournalResult(trades=[trade if t.id == trade.id else t for t in trades])


def delete_trade(trades: list[Trade], trade_id: str, confirmed: bool = False) -> JournalResult:
    """Remove a trade for good. Requires explicit confirmation."""
    if find_trade(trades, trade_id) is None:
        return JournalResult(trades=list(trades), issues=[_not_found(trade_id)])
    if not confirmed:
        return JournalResult(
            trades=list(trades),
            issues=[
                ValidationIssue(
                    field="id",
                    code=IssueCode.CONFIRMATION_REQUIRED,
                    message=f"Deleting trade '{trade_id}' cannot be undone; confirm to proceed.",
                )
            ],
        )
    logger.info(f"Deleted trade {trade_id}")
    return JournalResult(trades=[t for t in trades if t.id != trade_id])
