"""Tests for the journal domain models."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from trademind.core.enums import Emotion, OptionType, Outcome, TradeDirection, TradeStatus
from trademind.core.models import JournalProfile, Trade, TradeDraft, UserSettings, to_local_naive


class TestTrade:
    def test_ticker_normalized(self, make_trade):
        assert make_trade(ticker="  spy ").ticker == "SPY"

    def test_blank_ticker_rejected(self, make_trade):
        with pytest.raises(ValidationError):
            make_trade(ticker="   ")

    def test_defaults(self, open_trade):
        assert open_trade.status == TradeStatus.OPEN
        assert open_trade.fees == 0.0
        assert open_trade.entry_emotion == Emotion.CALM
        assert open_trade.discipline_score == 100
        assert open_trade.checklist == {}
        assert open_trade.is_open
        assert open_trade.is_option

    def test_generated_ids_unique(self):
        kwargs = dict(
            ticker="QQQ",
            direction=TradeDirection.LONG,
            entry_date=datetime(2024, 1, 2),
            entry_price=1.0,
            quantity=1,
        )
        assert Trade(**kwargs).id != Trade(**kwargs).id

    @pytest.mark.parametrize("field", ["entry_price", "quantity"])
    def test_non_positive_rejected(self, make_trade, field):
        with pytest.raises(ValidationError):
            make_trade(**{field: 0})

    def test_negative_fees_rejected(self, make_trade):
        with pytest.raises(ValidationError):
            make_trade(fees=-1.0)

    def test_closed_requires_exit(self, make_trade):
        with pytest.raises(ValidationError, match="closed trade requires"):
            make_trade(status=TradeStatus.CLOSED, exit_price=3.0)

    def test_open_must_not_carry_exit(self, make_trade):
        with pytest.raises(ValidationError, match="open trade must not carry"):
            make_trade(exit_price=3.0)

    def test_exit_before_entry_rejected(self, make_trade):
        with pytest.raises(ValidationError, match="before entry_date"):
            make_trade(
                status=TradeStatus.CLOSED,
                exit_price=3.0,
                exit_date=datetime(2024, 5, 14, 9, 0),
            )

    def test_aware_dates_become_local_naive(self, make_trade):
        aware = datetime(2024, 5, 15, 13, 45, tzinfo=timezone.utc)
        trade = make_trade(entry_date=aware)
        assert trade.entry_date.tzinfo is None
        assert trade.entry_date == aware.astimezone().replace(tzinfo=None)

    def test_contract_name(self, make_trade):
        trade = make_trade(option_type=OptionType.PUT, expiration_date=date(2024, 5, 15))
        assert trade.contract_name == "SPY 510P 240515"

    def test_contract_name_fractional_strike(self, make_trade):
        assert make_trade(strike_price=42.5).contract_name == "SPY 42.5C 240517"

    def test_share_trade(self, make_trade):
        trade = make_trade(option_type=None, strike_price=None, expiration_date=None)
        assert not trade.is_option
        assert trade.contract_name == "SPY"

    def test_outcome_of_open_trade(self, open_trade):
        assert open_trade.outcome == Outcome.UNCLASSIFIED

    def test_json_round_trip(self, make_closed_trade):
        trade = make_closed_trade(3.10, pnl=60.0, checklist={"risk_defined": True})
        assert Trade.model_validate_json(trade.model_dump_json()) == trade


def test_to_local_naive_passthrough():
    naive = datetime(2024, 5, 15, 10, 0)
    assert to_local_naive(naive) is naive
    assert to_local_naive(None) is None


def test_to_local_naive_preserves_instant():
    aware = datetime(2024, 5, 15, 10, 0, tzinfo=timezone(timedelta(hours=-4)))
    local = to_local_naive(aware)
    assert local.astimezone() == aware


def test_draft_is_permissive():
    draft = TradeDraft()
    assert draft.ticker == ""
    assert draft.entry_price is None
    assert draft.quantity == 1
    assert draft.option_type == OptionType.CALL


class TestUserSettings:
    def test_defaults(self):
        settings = UserSettings()
        assert settings.default_target_percent == 40
        assert settings.default_stop_loss_percent == 20
        assert settings.max_trades_per_day == 3
        assert settings.max_risk_per_trade_percent == 4
        assert settings.checklist is None

    def test_stop_percent_below_100(self):
        with pytest.raises(ValidationError):
            UserSettings(default_stop_loss_percent=100)

    def test_max_trades_positive(self):
        with pytest.raises(ValidationError):
            UserSettings(max_trades_per_day=0)


def test_profile_defaults():
    profile = JournalProfile()
    assert profile.initial_capital == 10000
    assert profile.trades == []
    assert profile.archives == []
    assert isinstance(profile.settings, UserSettings)
