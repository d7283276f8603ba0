"""Result and failure value models for lifecycle operations."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from trademind.core.models import Trade


class IssueCode(StrEnum):
    REQUIRED = "required"
    INVALID = "invalid"
    FUTURE_DATE = "future_date"
    INVALID_STATE = "invalid_state"
    NOT_FOUND = "not_found"
    CONFIRMATION_REQUIRED = "confirmation_required"
    NOT_EDITABLE = "not_editable"


class AdvisoryKind(StrEnum):
    HIGH_VOLATILITY = "high_volatility"
    RISK_LIMIT = "risk_limit"
    DAILY_LIMIT = "daily_limit"


class ValidationIssue(BaseModel):
    """A rejected input. Nothing was mutated."""

    field: str
    code: IssueCode
    message: str


class PolicyAdvisory(BaseModel):
    """A non-fatal policy warning with the numbers behind it."""

    kind: AdvisoryKind
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class TransitionResult(BaseModel):
    trade: Trade | None = None
    issues: list[ValidationIssue] = Field(default_factory=list)
    advisories: list[PolicyAdvisory] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues and self.trade is not None


class JournalResult(BaseModel):
    trades: list[Trade] = Field(default_factory=list)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues
