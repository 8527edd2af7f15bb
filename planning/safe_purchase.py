"""
Safe-purchase timing — earliest month a fixed expense leaves an emergency fund intact.

Scans the BASELINE projection chronologically and returns the first month with

    cumulative[t] - expense >= threshold_months × monthly net income
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from core.utils import month_label
from engine.ledger import LedgerProjection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SafePurchaseRecommendation:
    expense_amount: float
    safety_threshold_months: int
    safety_threshold: float
    recommended_month: Optional[str]
    balance_after_purchase: Optional[float]
    emergency_fund_months_after: Optional[float]
    months_to_wait: Optional[int]
    is_safe_now: bool
    recommendation: str

    @property
    def recommended_month_label(self) -> Optional[str]:
        return month_label(self.recommended_month) if self.recommended_month else None


def find_safe_purchase_month(
    baseline: LedgerProjection,
    expense_amount: float,
    *,
    monthly_net_income: float,
    threshold_months: int = 6,
) -> SafePurchaseRecommendation:
    threshold = monthly_net_income * threshold_months
    after = baseline.cumulative_balances() - float(expense_amount)
    ok = np.flatnonzero(after >= threshold)

    if ok.size == 0:
        text = (
            f"Based on current projections through {month_label(baseline.to_month)}, there is no "
            f"month where this ${expense_amount:,.2f} expense would leave you with a safe "
            f"{threshold_months}-month emergency fund. Consider saving more or reducing the expense amount."
        )
        logger.info(
            "No safe month for %.2f within %s..%s", expense_amount, baseline.from_month, baseline.to_month
        )
        return SafePurchaseRecommendation(
            expense_amount=float(expense_amount),
            safety_threshold_months=threshold_months,
            safety_threshold=threshold,
            recommended_month=None,
            balance_after_purchase=None,
            emergency_fund_months_after=None,
            months_to_wait=None,
            is_safe_now=False,
            recommendation=text,
        )

    i = int(ok[0])
    month = baseline.months[i]
    balance_after = float(after[i])
    fund_months = balance_after / monthly_net_income if monthly_net_income > 0 else 0.0

    if i == 0:
        text = (
            f"You can safely purchase this in {month_label(month)}. After the ${expense_amount:,.2f} "
            f"expense, you'll still have {fund_months:.1f} months of income as emergency fund."
        )
    else:
        text = (
            f"The earliest safe time to make this ${expense_amount:,.2f} purchase is {month_label(month)} "
            f"({i} month{'s' if i != 1 else ''} from the start of the projection). By then, you'll have "
            f"enough savings to maintain a {threshold_months}+ month emergency fund after the purchase."
        )

    logger.info("Earliest safe month for %.2f: %s (wait %d)", expense_amount, month, i)
    return SafePurchaseRecommendation(
        expense_amount=float(expense_amount),
        safety_threshold_months=threshold_months,
        safety_threshold=threshold,
        recommended_month=month,
        balance_after_purchase=balance_after,
        emergency_fund_months_after=fund_months,
        months_to_wait=i,
        is_safe_now=i == 0,
        recommendation=text,
    )
