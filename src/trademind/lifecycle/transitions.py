"""Open/Closed state transitions and field validation for trades.

Every function returns a value describing what happened; a trade is only
produced when all inputs validated. Derived fields (pnl, exit cluster,
target/stop defaults) are recomputed on every transition.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ValidationError, field_validator

from trademind.core.activity import ACTIVITY_UNIT, check_daily_limit
from trademind.core.enums import NEUTRAL_EMOTION, Emotion, TradeStatus
from trademind.core.models import Trade, TradeDraft, UserSettings, to_local_naive
from trademind.core.pricing import compute_default_target_and_stop, compute_realized_pnl
from trademind.lifecycle.policy import daily_limit_advisory
from trademind.lifecycle.results import IssueCode, TransitionResult, ValidationIssue

logger = logging.getLogger(__name__)

EXIT_FIELDS = ("exit_price", "exit_date", "exit_emotion")
LOCKED_FIELDS = ("id", "pnl", "checklist", "discipline_score")


class ExitFields(BaseModel):
    """Typed exit cluster, parsed before any P&L or date math."""

    exit_price: float | None = None
    exit_date: datetime | None = None
    exit_emotion: Emotion | None = None

    @field_validator("exit_date")
    @classmethod
    def _local_time(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value)


def _is_finite_positive(value: Any) -> bool:
    if value is None or isinstance(value, bool):
        return False
    try:
        return math.isfinite(value) and value > 0
    except TypeError:
        return False


def issues_from_validation_error(exc: ValidationError) -> list[ValidationIssue]:
    issues = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "trade"
        issues.append(ValidationIssue(field=field, code=IssueCode.INVALID, message=err["msg"]))
    return issues


def _positive_issue(name: str, label: str, value: Any, required: bool) -> ValidationIssue | None:
    if value is None:
        if required:
            return ValidationIssue(field=name, code=IssueCode.REQUIRED, message=f"{label} is required.")
        return None
    if not _is_finite_positive(value):
        return ValidationIssue(
            field=name,
            code=IssueCode.INVALID,
            message=f"{label} must be a positive number (got {value}).",
        )
    return None


def validate_draft(draft: TradeDraft, now: datetime | None = None) -> list[ValidationIssue]:
    """Check a new trade's inputs before anything is gated or stored."""
    now = now or datetime.now()
    issues: list[ValidationIssue] = []

    if not draft.ticker.strip():
        issues.append(
            ValidationIssue(field="ticker", code=IssueCode.REQUIRED, message="Ticker is required.")
        )

    for name, label, required in (
        ("entry_price", "Entry price", True),
        ("strike_price", "Strike price", draft.option_type is not None),
        ("target_price", "Target price", False),
        ("stop_loss_price", "Stop-loss price", False),
    ):
        issue = _positive_issue(name, label, getattr(draft, name), required)
        if issue:
            issues.append(issue)

    if draft.quantity is None:
        issues.append(
            ValidationIssue(field="quantity", code=IssueCode.REQUIRED, message="Quantity is required.")
        )
    elif draft.quantity <= 0:
        issues.append(
            ValidationIssue(
                field="quantity",
                code=IssueCode.INVALID,
                message=f"Quantity must be at least 1 contract (got {draft.quantity}).",
            )
        )

    if draft.fees is not None and draft.fees < 0:
        issues.append(
            ValidationIssue(
                field="fees", code=IssueCode.INVALID, message=f"Fees cannot be negative (got {draft.fees})."
            )
        )

    if draft.option_type is not None and draft.expiration_date is None:
        issues.append(
            ValidationIssue(
                field="expiration_date",
                code=IssueCode.REQUIRED,
                message="Expiration date is required for option trades.",
            )
        )

    entry_date = to_local_naive(draft.entry_date)
    if entry_date is not None and entry_date > now:
        issues.append(
            ValidationIssue(
                field="entry_date",
                code=IssueCode.FUTURE_DATE,
                message=f"Entry date {entry_date.isoformat(sep=' ')} is in the future.",
            )
        )

    return issues


def apply_default_risk_plan(draft: TradeDraft, settings: UserSettings) -> TradeDraft:
    """Fill a missing target and/or stop from the configured percentages."""
    if draft.target_price is not None and draft.stop_loss_price is not None:
        return draft
    defaults = compute_default_target_and_stop(
        draft.entry_price,
        draft.direction,
        settings.default_target_percent,
        settings.default_stop_loss_percent,
    )
    if defaults is None:
        return draft
    target, stop = defaults
    return draft.model_copy(
        update={
            "target_price": draft.target_price if draft.target_price is not None else target,
            "stop_loss_price": draft.stop_loss_price if draft.stop_loss_price is not None else stop,
        }
    )


def validate_trade_data(data: dict[str, Any]) -> tuple[Trade | None, list[ValidationIssue]]:
    try:
        return Trade.model_validate(data), []
    except ValidationError as exc:
        return None, issues_from_validation_error(exc)


def parse_exit_fields(values: dict[str, Any]) -> tuple[ExitFields | None, list[ValidationIssue]]:
    try:
        return ExitFields.model_validate(values), []
    except ValidationError as exc:
        return None, issues_from_validation_error(exc)


def close_trade(
    trade: Trade,
    exit_price: float | None,
    exit_date: datetime | None = None,
    exit_emotion: Emotion | None = None,
    *,
    trades: list[Trade] | None = None,
    settings: UserSettings | None = None,
    now: datetime | None = None,
) -> TransitionResult:
    """Open -> Closed. Sets the exit cluster and computes realized P&L."""
    if trade.status == TradeStatus.CLOSED:
        return TransitionResult(
            issues=[
                ValidationIssue(
                    field="status", code=IssueCode.INVALID_STATE, message=f"Trade {trade.id} is already closed."
                )
            ]
        )

    exits, issues = parse_exit_fields(
        {"exit_price": exit_price, "exit_date": exit_date, "exit_emotion": exit_emotion}
    )
    if issues:
        return TransitionResult(issues=issues)
    exit_price, exit_emotion = exits.exit_price, exits.exit_emotion

    issue = _positive_issue("exit_price", "Exit price", exit_price, required=True)
    if issue:
        return TransitionResult(issues=[issue])

    exit_date = exits.exit_date or now or datetime.now()
    if exit_date < trade.entry_date:
        return TransitionResult(
            issues=[
                ValidationIssue(
                    field="exit_date",
                    code=IssueCode.INVALID,
                    message=(
                        f"Exit date {exit_date.isoformat(sep=' ')} is before entry date "
                        f"{trade.entry_date.isoformat(sep=' ')}."
                    ),
                )
            ]
        )

    pnl = compute_realized_pnl(
        trade.entry_price, exit_price, trade.quantity, trade.direction, trade.fees
    )
    data = trade.model_dump()
    data.update(
        status=TradeStatus.CLOSED,
        exit_price=exit_price,
        exit_date=exit_date,
        exit_emotion=exit_emotion or trade.exit_emotion or NEUTRAL_EMOTION,
        pnl=pnl,
    )
    closed, issues = validate_trade_data(data)
    if issues:
        return TransitionResult(issues=issues)

    result = TransitionResult(trade=closed)
    if settings is not None and trades is not None:
        day = exit_date.date()
        pending = ACTIVITY_UNIT + (ACTIVITY_UNIT if trade.entry_date.date() == day else 0.0)
        check = check_daily_limit(
            trades, day, settings.max_trades_per_day, pending_units=pending, exclude_trade_id=trade.id
        )
        advisory = daily_limit_advisory(check)
        if advisory:
            result.advisories.append(advisory)

    logger.info(f"Closed {closed.id} {closed.ticker} at {exit_price} (pnl {pnl})")
    return result


def reopen_trade(trade: Trade) -> TransitionResult:
    """Closed -> Open. The exit cluster and P&L are cleared unconditionally."""
    if trade.status == TradeStatus.OPEN:
        return TransitionResult(
            issues=[
                ValidationIssue(
                    field="status", code=IssueCode.INVALID_STATE, message=f"Trade {trade.id} is already open."
                )
            ]
        )
    reopened = trade.model_copy(
        update={
            "status": TradeStatus.OPEN,
            "exit_price": None,
            "exit_date": None,
            "exit_emotion": None,
            "pnl": None,
        }
    )
    logger.info(f"Reopened {reopened.id} {reopened.ticker}")
    return TransitionResult(trade=reopened)


def edit_trade(
    trade: Trade,
    changes: dict[str, Any],
    *,
    settings: UserSettings | None = None,
    recalculate_defaults: bool = False,
    trades: list[Trade] | None = None,
    now: datetime | None = None,
) -> TransitionResult:
    """Apply field changes and recompute whatever depends on them.

    A ``status`` change is carried out through close/reopen after the other
    fields are applied. Target/stop are re-derived only on request.
    """
    changes = dict(changes)
    issues: list[ValidationIssue] = []

    for name in list(changes):
        if name in LOCKED_FIELDS:
            issues.append(
                ValidationIssue(field=name, code=IssueCode.NOT_EDITABLE, message=f"{name} cannot be edited directly.")
            )
        elif name not in Trade.model_fields:
            issues.append(
                ValidationIssue(field=name, code=IssueCode.INVALID, message=f"Unknown trade field '{name}'.")
            )
    if issues:
        return TransitionResult(issues=issues)

    target_status = changes.pop("status", None)
    if target_status is not None:
        try:
            target_status = TradeStatus(target_status)
        except ValueError:
            return TransitionResult(
                issues=[
                    ValidationIssue(
                        field="status", code=IssueCode.INVALID, message=f"Unknown status '{target_status}'."
                    )
                ]
            )
    exit_changes = {name: changes.pop(name) for name in EXIT_FIELDS if name in changes}
    ends_closed = target_status == TradeStatus.CLOSED or (
        target_status is None and trade.status == TradeStatus.CLOSED
    )

    if exit_changes and not ends_closed:
        return TransitionResult(
            issues=[
                ValidationIssue(
                    field=name,
                    code=IssueCode.INVALID_STATE,
                    message=f"{name} can only be set on a closed trade.",
                )
                for name in exit_changes
            ]
        )

    exits, issues = parse_exit_fields(exit_changes)
    if issues:
        return TransitionResult(issues=issues)
    exit_changes = exits.model_dump(include=set(exit_changes))

    data = trade.model_dump()
    data.update(changes)
    reopening = trade.status == TradeStatus.CLOSED and target_status == TradeStatus.OPEN
    closing = trade.status == TradeStatus.OPEN and target_status == TradeStatus.CLOSED

    if reopening:
        data.update(status=TradeStatus.OPEN, exit_price=None, exit_date=None, exit_emotion=None, pnl=None)
    elif ends_closed and not closing:
        data.update(exit_changes)
        issue = _positive_issue("exit_price", "Exit price", data.get("exit_price"), required=True)
        if issue:
            return TransitionResult(issues=[issue])

    edited, issues = validate_trade_data(data)
    if issues:
        return TransitionResult(issues=issues)

    if recalculate_defaults and settings is not None and (
        "entry_price" in changes or "direction" in changes
    ):
        defaults = compute_default_target_and_stop(
            edited.entry_price,
            edited.direction,
            settings.default_target_percent,
            settings.default_stop_loss_percent,
        )
        if defaults is not None:
            target, stop = defaults
            edited = edited.model_copy(
                update={
                    "target_price": edited.target_price if "target_price" in changes else target,
                    "stop_loss_price": edited.stop_loss_price if "stop_loss_price" in changes else stop,
                }
            )

    if closing:
        return close_trade(
            edited,
            exit_changes.get("exit_price"),
            exit_changes.get("exit_date"),
            exit_changes.get("exit_emotion"),
            trades=trades,
            settings=settings,
            now=now,
        )

    if reopening:
        logger.info(f"Edited and reopened {edited.id}")
        return TransitionResult(trade=edited)

    if edited.status == TradeStatus.CLOSED:
        pnl = compute_realized_pnl(
            edited.entry_price, edited.exit_price, edited.quantity, edited.direction, edited.fees
        )
        edited = edited.model_copy(update={"pnl": pnl})

    logger.debug(f"Edited {edited.id}: {sorted(changes) + sorted(exit_changes)}")
    return TransitionResult(trade=edited)
