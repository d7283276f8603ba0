"""Pre-commit gating protocol for new trades.

Sequence (fixed order, each step at most once per attempt):

  idle -> volatility_check -> risk_check -> checklist_gate -> committed

Any step that is waiting on the trader can instead end in ``aborted``.

- volatility_check is entered only when a VIX reading above the threshold
  was supplied; it is advisory and clears with an acknowledgment.
- risk_check is entered only when the risk limit or the daily trade limit
  would be broken; it clears with "proceed anyway" or ends with a revision.
- checklist_gate is mandatory and is the only step that creates the trade.

The session is driven by synchronous calls from the caller. Calls that do
not fit the current state return an ``invalid_state`` issue and change
nothing.
"""

from __future__ import annotations

import logging
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from trademind.core.activity import ACTIVITY_UNIT, DailyLimitCheck, check_daily_limit
from trademind.core.models import ChecklistItem, Trade, TradeDraft, UserSettings, to_local_naive
from trademind.core.risk import RiskEvaluation, evaluate_risk
from trademind.discipline.checklist import DisciplineGate, resolve_checklist
from trademind.lifecycle.policy import (
    daily_limit_advisory,
    risk_limit_advisory,
    volatility_advisory,
)
from trademind.lifecycle.results import IssueCode, PolicyAdvisory, ValidationIssue
from trademind.lifecycle.transitions import (
    apply_default_risk_plan,
    validate_draft,
    validate_trade_data,
)

logger = logging.getLogger(__name__)

DEFAULT_VIX_THRESHOLD = 25.0


class GatingState(StrEnum):
    IDLE = "idle"
    VOLATILITY_CHECK = "volatility_check"
    RISK_CHECK = "risk_check"
    CHECKLIST_GATE = "checklist_gate"
    COMMITTED = "committed"
    ABORTED = "aborted"


TERMINAL_STATES = (GatingState.COMMITTED, GatingState.ABORTED)


class GatingStep(BaseModel):
    """Snapshot returned after every call on a gating session."""

    state: GatingState
    issues: list[ValidationIssue] = Field(default_factory=list)
    advisories: list[PolicyAdvisory] = Field(default_factory=list)
    questions: list[ChecklistItem] = Field(default_factory=list)
    prefilled: dict[str, bool] = Field(default_factory=dict)
    risk: RiskEvaluation | None = None
    daily: DailyLimitCheck | None = None
    draft: TradeDraft | None = None
    trade: Trade | None = None

    @property
    def awaiting_input(self) -> bool:
        return self.state in (
            GatingState.VOLATILITY_CHECK,
            GatingState.RISK_CHECK,
            GatingState.CHECKLIST_GATE,
        )


class TradeGatingSession:
    """One trade-creation attempt. Not reusable once committed or aborted."""

    def __init__(
        self,
        draft: TradeDraft,
        trades: list[Trade],
        settings: UserSettings,
        initial_capital: float,
        vix_value: float | None = None,
        vix_threshold: float = DEFAULT_VIX_THRESHOLD,
        now: datetime | None = None,
    ) -> None:
        self.draft = draft
        self.trades = list(trades)
        self.settings = settings
        self.initial_capital = initial_capital
        self.vix_value = vix_value
        self.vix_threshold = vix_threshold
        self._now = now

        self.state = GatingState.IDLE
        self.risk: RiskEvaluation | None = None
        self.daily: DailyLimitCheck | None = None
        self.gate: DisciplineGate | None = None
        self.trade: Trade | None = None

    def _clock(self) -> datetime:
        return self._now or datetime.now()

    def _step(self, advisories: list[PolicyAdvisory] | None = None, **extra) -> GatingStep:
        step = GatingStep(
            state=self.state,
            advisories=advisories or [],
            risk=self.risk,
            daily=self.daily,
            draft=self.draft,
            trade=self.trade,
            **extra,
        )
        if self.gate is not None and self.state == GatingState.CHECKLIST_GATE:
            step.questions = self.gate.questions
            step.prefilled = dict(self.gate.prefilled)
        return step

    def _invalid(self, action: str) -> GatingStep:
        return self._step(
            issues=[
                ValidationIssue(
                    field="state",
                    code=IssueCode.INVALID_STATE,
                    message=f"Cannot {action} while gating is {self.state.value}.",
                )
            ]
        )

    # ── Transitions ──────────────────────────────────────────────────────

    def start(self) -> GatingStep:
        """Validate the draft, fill defaults, and run the automatic checks."""
        if self.state != GatingState.IDLE:
            return self._invalid("start")

        issues = validate_draft(self.draft, self._clock())
        if issues:
            return self._step(issues=issues)

        entry_date = to_local_naive(self.draft.entry_date) or self._clock()
        self.draft = apply_default_risk_plan(
            self.draft.model_copy(update={"entry_date": entry_date}), self.settings
        )

        if self.vix_value is not None:
            advisory = volatility_advisory(self.vix_value, self.vix_threshold)
            if advisory:
                self.state = GatingState.VOLATILITY_CHECK
                return self._step([advisory])

        return self._enter_risk_check()

    def acknowledge(self) -> GatingStep:
        """Proceed past an advisory step."""
        if self.state == GatingState.VOLATILITY_CHECK:
            return self._enter_risk_check()
        if self.state == GatingState.RISK_CHECK:
            return self._enter_checklist()
        return self._invalid("acknowledge")

    def revise(self) -> GatingStep:
        """Abort to edit the draft. The returned step carries the draft."""
        if self.state not in (GatingState.VOLATILITY_CHECK, GatingState.RISK_CHECK):
            return self._invalid("revise")
        self.state = GatingState.ABORTED
        logger.info(f"Gating for {self.draft.ticker} returned to editing")
        return self._step()

    def cancel(self) -> GatingStep:
        if self.state in TERMINAL_STATES:
            return self._invalid("cancel")
        if self.gate is not None:
            self.gate.cancel()
        self.state = GatingState.ABORTED
        logger.info(f"Gating for {self.draft.ticker} cancelled")
        return self._step()

    def submit_checklist(
        self,
        answers: dict[str, bool],
        violation_reason: str | None = None,
    ) -> GatingStep:
        """Answer the discipline gate and create the trade."""
        if self.state != GatingState.CHECKLIST_GATE or self.gate is None:
            return self._invalid("submit the checklist")

        decision = self.gate.proceed(answers, violation_reason or self.draft.violation_reason)
        draft = self.draft
        trade, issues = validate_trade_data(
            {
                "ticker": draft.ticker,
                "direction": draft.direction,
                "option_type": draft.option_type,
                "setup": draft.setup or None,
                "entry_date": draft.entry_date,
                "expiration_date": draft.expiration_date,
                "strike_price": draft.strike_price,
                "entry_price": draft.entry_price,
                "quantity": draft.quantity,
                "fees": draft.fees or 0.0,
                "target_price": draft.target_price,
                "stop_loss_price": draft.stop_loss_price,
                "notes": draft.notes,
                "entry_emotion": draft.entry_emotion,
                "checklist": decision.checklist,
                "discipline_score": decision.score,
                "violation_reason": decision.violation_reason,
            }
        )
        if issues:
            self.state = GatingState.ABORTED
            return self._step(issues=issues)

        self.trade = trade
        self.state = GatingState.COMMITTED
        logger.info(
            f"Committed {trade.id} {trade.ticker} with discipline score {trade.discipline_score}"
        )
        return self._step()

    # ── Automatic checks ─────────────────────────────────────────────────

    def _enter_risk_check(self) -> GatingStep:
        self.risk = evaluate_risk(
            self.draft,
            self.trades,
            self.initial_capital,
            self.settings.max_risk_per_trade_percent,
        )
        self.daily = check_daily_limit(
            self.trades,
            self.draft.entry_date.date(),
            self.settings.max_trades_per_day,
            pending_units=ACTIVITY_UNIT,
        )
        advisories = [
            advisory
            for advisory in (
                daily_limit_advisory(self.daily),
                risk_limit_advisory(self.risk, self.settings.max_risk_per_trade_percent),
            )
            if advisory is not None
        ]
        if advisories:
            self.state = GatingState.RISK_CHECK
            return self._step(advisories)
        return self._enter_checklist()

    def _enter_checklist(self) -> GatingStep:
        self.gate = DisciplineGate(
            resolve_checklist(self.settings.checklist),
            max_trades_respected=self.daily.respected,
            max_risk_respected=self.risk.respected,
        )
        self.state = GatingState.CHECKLIST_GATE
        return self._step()
