"""
Safety classifier — traffic-light label on a reference balance.

Thresholds are multiples of baseline average monthly net income:

    balance >= green_months × income               → green  "Safe"
    yellow_months × income <= balance < green      → yellow "Caution"
    balance < yellow_months × income               → red    "At Risk"
    income == 0                                    → yellow "Unknown"

Reference balance:
  - with at least one hypothetical EXPENSE: the balance (hypotheticals applied)
    in the month of the first such expense
  - otherwise: the lowest balance anywhere in the projected range
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Sequence, Tuple

import numpy as np

from core.schema import HypotheticalEvent
from core.utils import month_label
from engine.ledger import LedgerProjection


class SafetyStatus(str, Enum):
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass(frozen=True)
class SafetyAssessment:
    status: SafetyStatus
    status_label: str
    emergency_fund_months: float
    monthly_net_income: float
    green_threshold: float
    yellow_threshold: float
    reference_balance: float
    reference_month: str
    reference_kind: Literal["hypothetical-expense", "minimum", "final"]
    recommendation: str

    @property
    def reference_month_label(self) -> str:
        return month_label(self.reference_month)


def classify_balance(
    balance: float,
    monthly_net_income: float,
    *,
    yellow_months: int = 6,
    green_months: int = 9,
) -> Tuple[SafetyStatus, str]:
    if monthly_net_income == 0:
        return SafetyStatus.YELLOW, "Unknown"
    if balance >= monthly_net_income * green_months:
        return SafetyStatus.GREEN, "Safe"
    if balance >= monthly_net_income * yellow_months:
        return SafetyStatus.YELLOW, "Caution"
    return SafetyStatus.RED, "At Risk"


def _reference_point(
    projection: LedgerProjection,
    events: Sequence[HypotheticalEvent],
) -> Tuple[float, str, str]:
    first_expense = next((e for e in events if e.type == "expense"), None)
    if first_expense is not None:
        bucket = projection.bucket(first_expense.month)
        if bucket is not None:
            return bucket.cumulative_balance, bucket.month, "hypothetical-expense"
        # expense month outside the range: judge the end state instead
        return projection.final_balance, projection.to_month, "final"

    balances = projection.cumulative_balances()
    i = int(np.argmin(balances))
    return float(balances[i]), projection.months[i], "minimum"


def _recommendation(
    status_label: str,
    fund_months: float,
    month: str,
    for_expense: bool,
    green_months: int,
    yellow_months: int,
) -> str:
    when = month_label(month)
    if status_label == "Unknown":
        return "Unable to calculate emergency fund coverage - no recurring income data found."
    if status_label == "Safe":
        if for_expense:
            return (
                f"After this expense, your emergency fund would be {fund_months:.1f} months of income "
                f"in {when} - well above the recommended {green_months} months."
            )
        return (
            f"Your emergency fund remains healthy at {fund_months:.1f} months of income "
            f"throughout the projection period."
        )
    if status_label == "Caution":
        if for_expense:
            return (
                f"After this expense, your balance would be {fund_months:.1f} months of income in {when}. "
                f"Consider whether this expense is essential, as it reduces your safety buffer below "
                f"the recommended {green_months} months."
            )
        return (
            f"Your balance dips to {fund_months:.1f} months of income in {when}. "
            f"Consider building a larger emergency fund buffer."
        )
    if for_expense:
        return (
            f"Warning: After this expense, your balance would drop to only {fund_months:.1f} months of "
            f"income in {when}, which is below the recommended {yellow_months}-month emergency fund. "
            f"This expense is not recommended unless absolutely necessary."
        )
    return (
        f"Warning: Your balance would drop to only {fund_months:.1f} months of income in {when}, "
        f"which is below the recommended {yellow_months}-month emergency fund."
    )


def assess_safety(
    projection: LedgerProjection,
    events: Sequence[HypotheticalEvent],
    *,
    monthly_net_income: float,
    yellow_months: int = 6,
    green_months: int = 9,
) -> SafetyAssessment:
    """
    Classify the projection (hypotheticals applied) against baseline income.

    Parameters
    ----------
    projection : LedgerProjection
        Projection WITH hypotheticals applied
    events : sequence of HypotheticalEvent
        The request's normalized hypotheticals, in request order
    monthly_net_income : float
        Baseline average monthly net income (hypotheticals excluded)
    """
    balance, month, kind = _reference_point(projection, events)
    status, label = classify_balance(
        balance, monthly_net_income, yellow_months=yellow_months, green_months=green_months
    )
    fund_months = balance / monthly_net_income if monthly_net_income > 0 else 0.0

    return SafetyAssessment(
        status=status,
        status_label=label,
        emergency_fund_months=fund_months,
        monthly_net_income=monthly_net_income,
        green_threshold=monthly_net_income * green_months,
        yellow_threshold=monthly_net_income * yellow_months,
        reference_balance=balance,
        reference_month=month,
        reference_kind=kind,
        recommendation=_recommendation(
            label, fund_months, month, kind != "minimum", green_months, yellow_months
        ),
    )
