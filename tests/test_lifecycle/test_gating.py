"""Tests for the pre-commit gating session."""

from __future__ import annotations

from datetime import datetime

from trademind.core.enums import TradeStatus
from trademind.core.models import UserSettings
from trademind.discipline.checklist import DEFAULT_VIOLATION_REASON, MAX_RISK_RESPECTED, MAX_TRADES_RESPECTED
from trademind.lifecycle.gating import GatingState, TradeGatingSession
from trademind.lifecycle.results import AdvisoryKind, IssueCode


def _session(draft, settings, now, trades=None, **kwargs) -> TradeGatingSession:
    return TradeGatingSession(draft, trades or [], settings, 10_000, now=now, **kwargs)


def _all_yes(step) -> dict[str, bool]:
    return {q.id: True for q in step.questions}


class TestHappyPath:
    def test_straight_to_checklist(self, draft, settings, now):
        session = _session(draft, settings, now)
        step = session.start()
        assert step.state == GatingState.CHECKLIST_GATE
        assert step.awaiting_input
        assert step.risk.risk_amount == 100.0
        assert step.daily.projected == 0.5
        assert step.prefilled == {MAX_TRADES_RESPECTED: True, MAX_RISK_RESPECTED: True}
        assert len(step.questions) == 4

    def test_commit_creates_open_trade(self, draft, settings, now):
        session = _session(draft, settings, now)
        step = session.submit_checklist(_all_yes(session.start()))
        assert step.state == GatingState.COMMITTED
        trade = step.trade
        assert trade.status == TradeStatus.OPEN
        assert trade.ticker == "SPY"
        assert trade.discipline_score == 100
        assert trade.violation_reason is None
        assert len(trade.checklist) == 6
        assert not step.awaiting_input

    def test_missing_entry_date_uses_now(self, draft, settings, now):
        session = _session(draft.model_copy(update={"entry_date": None}), settings, now)
        step = session.submit_checklist(_all_yes(session.start()))
        assert step.trade.entry_date == now

    def test_default_target_and_stop_filled(self, draft, settings, now):
        bare = draft.model_copy(update={"target_price": None, "stop_loss_price": None})
        session = _session(bare, settings, now)
        step = session.submit_checklist(_all_yes(session.start()))
        assert step.trade.target_price == 7.00
        assert step.trade.stop_loss_price == 4.00

    def test_partial_checklist(self, draft, settings, now):
        session = _session(draft, settings, now)
        session.start()
        step = session.submit_checklist({"strategy_match": True})
        assert step.trade.discipline_score == 50
        assert step.trade.violation_reason == DEFAULT_VIOLATION_REASON

    def test_violation_reason_from_draft(self, draft, settings, now):
        session = _session(draft.model_copy(update={"violation_reason": "Revenge trade"}), settings, now)
        session.start()
        assert session.submit_checklist({}).trade.violation_reason == "Revenge trade"


class TestValidation:
    def test_invalid_draft_stays_idle(self, draft, settings, now):
        session = _session(draft.model_copy(update={"ticker": ""}), settings, now)
        step = session.start()
        assert step.state == GatingState.IDLE
        assert step.issues[0].field == "ticker"
        assert step.trade is None

    def test_future_date(self, draft, settings, now):
        session = _session(draft.model_copy(update={"entry_date": datetime(2030, 1, 1)}), settings, now)
        assert session.start().issues[0].code == IssueCode.FUTURE_DATE


class TestVolatilityCheck:
    def test_high_vix_pauses(self, draft, settings, now):
        session = _session(draft, settings, now, vix_value=31.2)
        step = session.start()
        assert step.state == GatingState.VOLATILITY_CHECK
        assert step.advisories[0].kind == AdvisoryKind.HIGH_VOLATILITY
        assert "31.20" in step.advisories[0].message

    def test_acknowledge_continues(self, draft, settings, now):
        session = _session(draft, settings, now, vix_value=31.2)
        session.start()
        assert session.acknowledge().state == GatingState.CHECKLIST_GATE

    def test_vix_at_threshold_is_calm(self, draft, settings, now):
        session = _session(draft, settings, now, vix_value=25.0)
        assert session.start().state == GatingState.CHECKLIST_GATE

    def test_custom_threshold(self, draft, settings, now):
        session = _session(draft, settings, now, vix_value=21.0, vix_threshold=20.0)
        assert session.start().state == GatingState.VOLATILITY_CHECK

    def test_revise_aborts(self, draft, settings, now):
        session = _session(draft, settings, now, vix_value=40.0)
        session.start()
        step = session.revise()
        assert step.state == GatingState.ABORTED
        assert step.draft.ticker == "spy"
        assert step.trade is None


class TestRiskCheck:
    def test_risk_over_limit(self, draft, settings, now):
        big = draft.model_copy(update={"quantity": 10})
        session = _session(big, settings, now)
        step = session.start()
        assert step.state == GatingState.RISK_CHECK
        assert [a.kind for a in step.advisories] == [AdvisoryKind.RISK_LIMIT]
        assert step.advisories[0].details["risk_amount"] == 500.0
        assert step.advisories[0].details["max_allowed"] == 400.0

    def test_proceed_anyway_prefills_false(self, draft, settings, now):
        session = _session(draft.model_copy(update={"quantity": 10}), settings, now)
        session.start()
        step = session.acknowledge()
        assert step.state == GatingState.CHECKLIST_GATE
        assert step.prefilled[MAX_RISK_RESPECTED] is False
        committed = session.submit_checklist(_all_yes(step))
        assert committed.trade.checklist[MAX_RISK_RESPECTED] is False
        assert committed.trade.discipline_score == 83

    def test_daily_limit(self, draft, make_closed_trade, now):
        trades = [make_closed_trade(3.0, id=f"d{i}") for i in range(3)]
        session = _session(draft, UserSettings(), now, trades=trades)
        step = session.start()
        assert step.state == GatingState.RISK_CHECK
        assert [a.kind for a in step.advisories] == [AdvisoryKind.DAILY_LIMIT]
        assert step.daily.projected == 3.5

    def test_both_limits_in_one_step(self, draft, make_closed_trade, now):
        trades = [make_closed_trade(3.0, id=f"d{i}") for i in range(3)]
        session = _session(draft.model_copy(update={"quantity": 10}), UserSettings(), now, trades=trades)
        step = session.start()
        assert {a.kind for a in step.advisories} == {AdvisoryKind.DAILY_LIMIT, AdvisoryKind.RISK_LIMIT}
        step = session.acknowledge()
        assert step.prefilled == {MAX_TRADES_RESPECTED: False, MAX_RISK_RESPECTED: False}

    def test_revise(self, draft, settings, now):
        session = _session(draft.model_copy(update={"quantity": 10}), settings, now)
        session.start()
        assert session.revise().state == GatingState.ABORTED

    def test_vix_then_risk(self, draft, settings, now):
        session = _session(draft.model_copy(update={"quantity": 10}), settings, now, vix_value=35.0)
        assert session.start().state == GatingState.VOLATILITY_CHECK
        assert session.acknowledge().state == GatingState.RISK_CHECK
        assert session.acknowledge().state == GatingState.CHECKLIST_GATE


class TestInvalidCalls:
    def test_submit_before_start(self, draft, settings, now):
        session = _session(draft, settings, now)
        step = session.submit_checklist({})
        assert step.state == GatingState.IDLE
        assert step.issues[0].code == IssueCode.INVALID_STATE

    def test_start_twice(self, draft, settings, now):
        session = _session(draft, settings, now)
        session.start()
        step = session.start()
        assert step.issues[0].code == IssueCode.INVALID_STATE
        assert step.state == GatingState.CHECKLIST_GATE

    def test_revise_from_checklist(self, draft, settings, now):
        session = _session(draft, settings, now)
        session.start()
        assert session.revise().issues[0].code == IssueCode.INVALID_STATE

    def test_acknowledge_from_checklist(self, draft, settings, now):
        session = _session(draft, settings, now)
        session.start()
        assert session.acknowledge().issues[0].code == IssueCode.INVALID_STATE

    def test_no_second_commit(self, draft, settings, now):
        session = _session(draft, settings, now)
        session.start()
        trade = session.submit_checklist({}).trade
        step = session.submit_checklist({})
        assert step.issues[0].code == IssueCode.INVALID_STATE
        assert step.trade is trade

    def test_cancel_at_checklist(self, draft, settings, now):
        session = _session(draft, settings, now)
        session.start()
        assert session.cancel().state == GatingState.ABORTED
        assert session.gate.decision.proceed is False
        assert session.submit_checklist({}).issues[0].code == IssueCode.INVALID_STATE

    def test_cancel_after_abort(self, draft, settings, now):
        session = _session(draft, settings, now)
        session.cancel()
        assert session.cancel().issues[0].code == IssueCode.INVALID_STATE
