"""
Affordability solver — largest one-time expense a target month can absorb.

An expense added in month t lowers the cumulative balance of t and of every
later month by the same amount. So the binding constraint is the lowest
BASELINE balance from t to the end of the range:

    max_expense = max(0, min(cumulative[t:]) - floor)

floor is the caller's minimum monthly balance, else N months of baseline
average net income (the emergency fund).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Literal, Optional

import numpy as np

from core.utils import month_label
from engine.ledger import LedgerProjection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AffordabilityAnalysis:
    target_month: str
    max_affordable_one_time_expense: float
    binding_month: str
    minimum_projected_balance: float
    balance_floor: float
    floor_source: Literal["min-monthly-balance", "emergency-fund"]
    in_range: bool = True
    assumptions: List[str] = field(default_factory=list)


def solve_max_affordable_expense(
    baseline: LedgerProjection,
    target_month: str,
    *,
    monthly_net_income: float,
    min_monthly_balance: Optional[float] = None,
    floor_months: int = 6,
) -> AffordabilityAnalysis:
    """
    Parameters
    ----------
    baseline : LedgerProjection
        Projection WITHOUT hypotheticals
    target_month : str
        "YYYY-MM" month in which the expense would be paid
    monthly_net_income : float
        Baseline average monthly net income (sets the default floor)
    min_monthly_balance : float, optional
        Caller-supplied floor; overrides the emergency-fund default
    floor_months : int
        Months of income the default floor represents
    """
    if min_monthly_balance is not None:
        floor, source = float(min_monthly_balance), "min-monthly-balance"
    else:
        floor, source = monthly_net_income * floor_months, "emergency-fund"

    idx = baseline.index_of(target_month)
    if idx is None:
        return AffordabilityAnalysis(
            target_month=target_month,
            max_affordable_one_time_expense=0.0,
            binding_month=target_month,
            minimum_projected_balance=floor,
            balance_floor=floor,
            floor_source=source,
            in_range=False,
            assumptions=[
                f"Target month {target_month} is outside the projection range "
                f"({baseline.from_month} to {baseline.to_month})"
            ],
        )

    tail = baseline.cumulative_balances()[idx:]
    j = int(np.argmin(tail))  # first occurrence of the minimum
    min_balance = float(tail[j])
    binding = baseline.months[idx + j]
    max_expense = max(0.0, min_balance - floor)

    if source == "emergency-fund":
        floor_note = f"Safety floor: ${floor:,.0f} ({floor_months} months of net income as emergency fund)"
    else:
        floor_note = f"Minimum balance constraint: ${floor:,.2f}"

    logger.info(
        "Max affordable expense in %s: %.2f (binding %s, floor %.2f)",
        target_month, max_expense, binding, floor,
    )

    return AffordabilityAnalysis(
        target_month=target_month,
        max_affordable_one_time_expense=max_expense,
        binding_month=binding,
        minimum_projected_balance=min_balance,
        balance_floor=floor,
        floor_source=source,
        assumptions=[
            "Calculated based on baseline projections without hypotheticals",
            floor_note,
            f"Binding month is {month_label(binding)} where balance would be tightest",
        ],
    )
