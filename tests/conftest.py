"""Shared test fixtures."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from trademind.core.enums import OptionType, TradeDirection, TradeStatus
from trademind.core.models import Trade, TradeDraft, UserSettings

NOW = datetime(2024, 5, 15, 15, 30)


def _make_trade(**overrides) -> Trade:
    """Open long call on SPY entered the morning of NOW's day."""
    data = dict(
        id="t1",
        ticker="SPY",
        direction=TradeDirection.LONG,
        option_type=OptionType.CALL,
        entry_date=datetime(2024, 5, 15, 9, 45),
        expiration_date=date(2024, 5, 17),
        strike_price=510.0,
        entry_price=2.50,
        quantity=1,
    )
    data.update(overrides)
    return Trade(**data)


def _make_closed_trade(exit_price: float, pnl: float | None = None, **overrides) -> Trade:
    data = dict(
        status=TradeStatus.CLOSED,
        exit_price=exit_price,
        exit_date=datetime(2024, 5, 15, 14, 0),
        pnl=pnl,
    )
    data.update(overrides)
    return _make_trade(**data)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> UserSettings:
    return UserSettings()


@pytest.fixture
def make_trade():
    return _make_trade


@pytest.fixture
def make_closed_trade():
    return _make_closed_trade


@pytest.fixture
def open_trade() -> Trade:
    return _make_trade()


@pytest.fixture
def draft() -> TradeDraft:
    return TradeDraft(
        ticker="spy",
        direction=TradeDirection.LONG,
        option_type=OptionType.CALL,
        entry_date=datetime(2024, 5, 15, 10, 0),
        expiration_date=date(2024, 5, 17),
        strike_price=510.0,
        entry_price=5.00,
        quantity=2,
        stop_loss_price=4.50,
        target_price=7.00,
    )
