"""
Expense breakdown — smoothed monthly cost per category.

Each record is converted to its average monthly equivalent (yearly / 12,
quarterly / 3, custom × months / 12, ...) before grouping, so categories
with different billing cycles are comparable. One-time items count as 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import pandas as pd

from core.config import ProjectionConfig
from core.schema import RecurringItem
from engine.frequency import monthly_equivalent

_COLUMNS = ["category", "monthly_amount", "percentage", "count", "avg_per_item"]


@dataclass
class ExpenseBreakdown:
    categories: pd.DataFrame  # one row per category, largest first
    total_monthly: float
    item_count: int

    def top(self, n: int = 5) -> pd.DataFrame:
        return self.categories.head(n).reset_index(drop=True)


def expense_breakdown(
    expenses: Sequence[RecurringItem],
    *,
    config: ProjectionConfig = ProjectionConfig(),
    include_inactive: bool = False,
) -> ExpenseBreakdown:
    rows = [
        {
            "category": e.category or "Uncategorized",
            "monthly_amount": monthly_equivalent(
                e.gross_amount, e.frequency, e.custom_months, config=config
            ),
        }
        for e in expenses
        if include_inactive or e.is_active
    ]
    if not rows:
        return ExpenseBreakdown(categories=pd.DataFrame(columns=_COLUMNS), total_monthly=0.0, item_count=0)

    df = pd.DataFrame(rows)
    total = float(df["monthly_amount"].sum())
    out = (
        df.groupby("category", as_index=False)
        .agg(monthly_amount=("monthly_amount", "sum"), count=("monthly_amount", "size"))
    )
    out["percentage"] = out["monthly_amount"] / total * 100.0 if total > 0 else 0.0
    out["avg_per_item"] = out["monthly_amount"] / out["count"]
    out = out.sort_values(["monthly_amount", "category"], ascending=[False, True]).reset_index(drop=True)

    return ExpenseBreakdown(categories=out[_COLUMNS], total_monthly=total, item_count=len(df))
