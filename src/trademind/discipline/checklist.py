"""Pre-trade discipline checklist and the confirmation gate.

The two limit checks (``max_trades_respected`` and ``max_risk_respected``)
are filled from the automatic evaluations and never asked. Everything else
is answered by the trader in a single proceed/cancel step.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, Field

from trademind.core.models import ChecklistItem

logger = logging.getLogger(__name__)

MAX_TRADES_RESPECTED = "max_trades_respected"
MAX_RISK_RESPECTED = "max_risk_respected"
DEFAULT_VIOLATION_REASON = "Pre-trade checklist violation"

INTERACTIVE_CHECKLIST: list[ChecklistItem] = [
    ChecklistItem(id="strategy_match", label="Is this trade in my written strategy plan?"),
    ChecklistItem(id="risk_defined", label="Is my risk strictly defined (Stop/Max Loss)?"),
    ChecklistItem(id="iv_conditions_met", label="Are IV / market conditions favorable?"),
    ChecklistItem(
        id="emotional_state_check",
        label="Am I calm, grounded, and not trading emotionally?",
    ),
]

AUTOMATIC_CHECKLIST: list[ChecklistItem] = [
    ChecklistItem(id=MAX_TRADES_RESPECTED, label="Daily trade limit respected", automatic=True),
    ChecklistItem(id=MAX_RISK_RESPECTED, label="Max risk per trade respected", automatic=True),
]


def resolve_checklist(custom: list[ChecklistItem] | None = None) -> list[ChecklistItem]:
    """Return the enabled checklist: user items (or defaults) plus the automatic ones."""
    automatic_ids = {item.id for item in AUTOMATIC_CHECKLIST}
    base = custom if custom is not None else INTERACTIVE_CHECKLIST
    items = [
        item.model_copy(update={"automatic": False})
        for item in base
        if item.enabled and item.id not in automatic_ids
    ]
    return items + [item.model_copy() for item in AUTOMATIC_CHECKLIST]


def compute_discipline_score(checklist: dict[str, bool], items: list[ChecklistItem] | None = None) -> int:
    """Percentage of enabled items that are true, rounded half-up.

    When ``items`` is omitted every key of ``checklist`` counts. An empty
    checklist scores 100.
    """
    if items is None:
        keys = list(checklist)
    else:
        keys = [item.id for item in items if item.enabled]
    if not keys:
        return 100
    true_count = sum(1 for key in keys if checklist.get(key, False))
    return int(math.floor(100 * true_count / len(keys) + 0.5))


class GateDecision(BaseModel):
    proceed: bool
    checklist: dict[str, bool] = Field(default_factory=dict)
    score: int = 0
    violation_reason: str | None = None


class DisciplineGate:
    """Single-use confirmation step producing the checklist and score."""

    def __init__(
        self,
        items: list[ChecklistItem],
        max_trades_respected: bool,
        max_risk_respected: bool,
    ) -> None:
        self.items = items
        self.prefilled = {
            MAX_TRADES_RESPECTED: max_trades_respected,
            MAX_RISK_RESPECTED: max_risk_respected,
        }
        self.decision: GateDecision | None = None

    @property
    def questions(self) -> list[ChecklistItem]:
        """Items the trader must answer."""
        return [item for item in self.items if not item.automatic]

    @property
    def is_decided(self) -> bool:
        return self.decision is not None

    def proceed(
        self,
        answers: dict[str, bool],
        violation_reason: str | None = None,
    ) -> GateDecision:
        """Record answers. Unanswered questions count as unchecked."""
        if self.decision is not None:
            return self.decision

        checklist = {item.id: bool(answers.get(item.id, False)) for item in self.questions}
        checklist.update(self.prefilled)
        score = compute_discipline_score(checklist, self.items)

        reason = None
        if score < 100:
            reason = violation_reason or DEFAULT_VIOLATION_REASON

        self.decision = GateDecision(
            proceed=True,
            checklist=checklist,
            score=score,
            violation_reason=reason,
        )
        logger.debug(f"Discipline gate passed with score {score}")
        return self.decision

    def cancel(self) -> GateDecision:
        if self.decision is None:
            self.decision = GateDecision(proceed=False)
        return self.decision
