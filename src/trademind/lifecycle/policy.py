"""Advisories for the soft trading rules: volatility, risk, daily limit."""

from __future__ import annotations

from trademind.core.activity import DailyLimitCheck
from trademind.core.risk import RiskEvaluation
from trademind.lifecycle.results import AdvisoryKind, PolicyAdvisory


def volatility_advisory(vix_value: float, threshold: float) -> PolicyAdvisory | None:
    if vix_value <= threshold:
        return None
    return PolicyAdvisory(
        kind=AdvisoryKind.HIGH_VOLATILITY,
        message=(
            f"VIX is {vix_value:.2f}, above the {threshold:.2f} threshold. "
            f"Option premiums and swings are elevated."
        ),
        details={"vix": vix_value, "threshold": threshold},
    )


def risk_limit_advisory(evaluation: RiskEvaluation, max_risk_percent: float) -> PolicyAdvisory | None:
    if evaluation.respected:
        return None
    pct = (
        f"{evaluation.percent_of_balance:.2f}%"
        if evaluation.percent_of_balance is not None
        else "n/a"
    )
    return PolicyAdvisory(
        kind=AdvisoryKind.RISK_LIMIT,
        message=(
            f"Risking ${evaluation.risk_amount:,.2f} ({pct} of balance) exceeds the "
            f"{max_risk_percent:g}% limit of ${evaluation.max_allowed:,.2f} "
            f"on a balance of ${evaluation.current_balance:,.2f}."
        ),
        details={
            "risk_amount": evaluation.risk_amount,
            "max_allowed": evaluation.max_allowed,
            "percent_of_balance": evaluation.percent_of_balance,
            "max_risk_percent": max_risk_percent,
            "current_balance": evaluation.current_balance,
        },
    )


def daily_limit_advisory(check: DailyLimitCheck) -> PolicyAdvisory | None:
    if check.respected:
        return None
    return PolicyAdvisory(
        kind=AdvisoryKind.DAILY_LIMIT,
        message=(
            f"{check.day.isoformat()} would reach {check.projected:g} trades "
            f"(already {check.current:g}), above the limit of {check.limit} per day."
        ),
        details={
            "day": check.day.isoformat(),
            "current": check.current,
            "projected": check.projected,
            "limit": check.limit,
        },
    )
