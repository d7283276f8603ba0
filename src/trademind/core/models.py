"""Pydantic domain models for the trade journal."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from trademind.core.enums import Emotion, OptionType, Outcome, TradeDirection, TradeStatus
from trademind.core.outcome import classify_outcome


def _new_id() -> str:
    return uuid.uuid4().hex[:8]


def to_local_naive(value: datetime | None) -> datetime | None:
    """Day boundaries are local, so aware timestamps are folded into local time."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class ChecklistItem(BaseModel):
    """One named pre-trade check."""

    id: str
    label: str
    enabled: bool = True
    automatic: bool = False


class UserSettings(BaseModel):
    default_target_percent: float = Field(default=40.0, ge=0)
    default_stop_loss_percent: float = Field(default=20.0, ge=0, lt=100)
    max_trades_per_day: int = Field(default=3, gt=0)
    max_risk_per_trade_percent: float = Field(default=4.0, gt=0, le=100)
    checklist: list[ChecklistItem] | None = None


class Trade(BaseModel):
    id: str = Field(default_factory=_new_id)
    ticker: str
    direction: TradeDirection
    option_type: OptionType | None = OptionType.CALL
    setup: str | None = None

    entry_date: datetime
    exit_date: datetime | None = None
    expiration_date: date | None = None
    status: TradeStatus = TradeStatus.OPEN

    entry_price: float = Field(gt=0)
    exit_price: float | None = Field(default=None, gt=0)
    strike_price: float | None = Field(default=None, gt=0)
    quantity: int = Field(gt=0)
    fees: float = Field(default=0.0, ge=0)

    # Risk plan
    target_price: float | None = Field(default=None, gt=0)
    stop_loss_price: float | None = Field(default=None, gt=0)

    pnl: float | None = None
    notes: str = ""

    # Psychology & discipline
    entry_emotion: Emotion = Emotion.CALM
    exit_emotion: Emotion | None = None
    checklist: dict[str, bool] = Field(default_factory=dict)
    discipline_score: int = Field(default=100, ge=0, le=100)
    violation_reason: str | None = None

    @field_validator("ticker")
    @classmethod
    def _normalize_ticker(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("ticker must not be empty")
        return value

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _local_time(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value)

    @model_validator(mode="after")
    def _check_status_fields(self) -> Trade:
        if self.status == TradeStatus.CLOSED:
            if self.exit_price is None or self.exit_date is None:
                raise ValueError("closed trade requires exit_price and exit_date")
            if self.exit_date < self.entry_date:
                raise ValueError("exit_date must not be before entry_date")
        else:
            stale = [
                name
                for name in ("exit_price", "exit_date", "pnl", "exit_emotion")
                if getattr(self, name) is not None
            ]
            if stale:
                raise ValueError(f"open trade must not carry {', '.join(stale)}")
        return self

    @property
    def is_option(self) -> bool:
        return self.option_type is not None

    @property
    def is_open(self) -> bool:
        return self.status == TradeStatus.OPEN

    @property
    def outcome(self) -> Outcome:
        return classify_outcome(self)

    @property
    def contract_name(self) -> str:
        """Compact contract label, e.g. 'SPY 510P 240515'."""
        if not self.strike_price or not self.option_type or not self.expiration_date:
            return self.ticker
        exp = self.expiration_date.strftime("%y%m%d")
        return f"{self.ticker} {self.strike_price:g}{self.option_type.value[0]} {exp}"


class TradeDraft(BaseModel):
    """Unvalidated input for a new trade.

    Everything that can be wrong is optional here so problems surface as
    validation issues instead of construction errors.
    """

    ticker: str = ""
    direction: TradeDirection = TradeDirection.LONG
    option_type: OptionType | None = OptionType.CALL
    setup: str | None = None
    entry_date: datetime | None = None
    expiration_date: date | None = None
    strike_price: float | None = None
    entry_price: float | None = None
    quantity: int | None = 1
    fees: float | None = 0.0
    target_price: float | None = None
    stop_loss_price: float | None = None
    notes: str = ""
    entry_emotion: Emotion = Emotion.CALM
    violation_reason: str | None = None


class ArchivedSession(BaseModel):
    id: str = Field(default_factory=_new_id)
    start_date: datetime
    end_date: datetime = Field(default_factory=datetime.now)
    initial_capital: float
    final_balance: float
    total_pnl: float
    trade_count: int
    trades: list[Trade] = Field(default_factory=list)


class JournalProfile(BaseModel):
    """Everything the persistence layer stores for one trader."""

    id: str = "default"
    name: str = "Trader"
    initial_capital: float = 10000.0
    start_date: datetime = Field(default_factory=datetime.now)
    settings: UserSettings = Field(default_factory=UserSettings)
    trades: list[Trade] = Field(default_factory=list)
    archives: list[ArchivedSession] = Field(default_factory=list)
