"""Trade lifecycle: gating new trades and Open/Closed transitions."""

from trademind.lifecycle.gating import GatingState, GatingStep, TradeGatingSession
from trademind.lifecycle.journal import add_trade, delete_trade, find_trade, replace_trade
from trademind.lifecycle.transitions import close_trade, edit_trade, reopen_trade, validate_draft

__all__ = [
    "GatingState",
    "GatingStep",
    "TradeGatingSession",
    "add_trade",
    "close_trade",
    "delete_trade",
    "edit_trade",
    "find_trade",
    "reopen_trade",
    "replace_trade",
    "validate_draft",
]
