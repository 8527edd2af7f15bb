"""
Single-month income summary — gross, net, and contribution breakdown per source.

Unlike the projector, periodic incomes are SMOOTHED here (yearly / 12,
quarterly / 3, ...) so the month reads as a typical month; custom and
one-time incomes still count only in the months they fall due. Historical
overrides and milestones resolve exactly as in the projector. Contributions
are computed on the wages attributed to the month, so a smoothed yearly
salary is capped at the monthly ceiling like any other month of pay.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import pandas as pd

from contributions.calculator import compute_contribution
from contributions.policy import DEFAULT_POLICY, SUB_ACCOUNTS, ContributionPolicy
from core.config import ProjectionConfig
from core.schema import RecurringItem
from core.utils import MonthLike, month_key, parse_month

from .frequency import is_active_in_month, spread_to_month
from .overrides import Now, contribution_for, resolve_gross_amount


@dataclass(frozen=True)
class IncomeSource:
    id: str
    name: str
    category: Optional[str]
    frequency: str
    gross_amount: float  # monthly gross attributed to this month
    monthly_amount: float  # take-home
    amount_source: str  # "historical" | "milestone" | "base"
    status: str
    employee_share: float = 0.0
    employer_share: float = 0.0
    sub_account_shares: Dict[str, float] = field(default_factory=dict)


@dataclass
class IncomeSummary:
    month: str
    sources: List[IncomeSource]

    @property
    def total_gross(self) -> float:
        return sum(s.gross_amount for s in self.sources)

    @property
    def total_net(self) -> float:
        return sum(s.monthly_amount for s in self.sources)

    @property
    def total_employee_share(self) -> float:
        return sum(s.employee_share for s in self.sources)

    @property
    def total_employer_share(self) -> float:
        return sum(s.employer_share for s in self.sources)

    @property
    def total_contribution(self) -> float:
        return self.total_employee_share + self.total_employer_share

    def sub_account_totals(self) -> Dict[str, float]:
        return {
            name: sum(s.sub_account_shares.get(name, 0.0) for s in self.sources)
            for name in SUB_ACCOUNTS
        }

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {
                "name": s.name,
                "category": s.category,
                "frequency": s.frequency,
                "status": s.status,
                "gross": s.gross_amount,
                "net": s.monthly_amount,
                "employee_share": s.employee_share,
                "employer_share": s.employer_share,
                **{f"{k}_account": v for k, v in s.sub_account_shares.items()},
            }
            for s in self.sources
        ]
        return pd.DataFrame(rows)


def summarize_income_for_month(
    incomes: Sequence[RecurringItem],
    month: MonthLike,
    *,
    now: Now,
    age: int = 30,
    config: ProjectionConfig = ProjectionConfig(),
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> IncomeSummary:
    """Income sources active in ``month``, highest gross first."""
    period = parse_month(month)
    sources: List[IncomeSource] = []

    for item in incomes:
        ignore_end = item.milestones_supersede_end_date
        if not is_active_in_month(item, period, ignore_end_date=ignore_end):
            continue

        resolved = resolve_gross_amount(
            item, period, now=now, use_history=config.use_historical_overrides
        )
        per_occurrence = resolved.gross
        if resolved.already_monthly:
            monthly_gross = per_occurrence
        else:
            monthly_gross = spread_to_month(
                item, per_occurrence, period, config=config, ignore_end_date=ignore_end
            )
            if monthly_gross == 0.0:
                continue

        # contributions follow the wages attributed to this month
        if not item.subject_to_contribution:
            breakdown = None
        elif monthly_gross == per_occurrence:
            breakdown = contribution_for(item, resolved, age=age, policy=policy)
        else:
            breakdown = compute_contribution(monthly_gross, age, policy=policy)

        status = item.category or "current-recurring"
        if resolved.source == "milestone" and resolved.reason:
            status = f"{status} ({resolved.reason})"
        elif resolved.source == "historical":
            status = f"{status} (recorded)"

        if breakdown is None:
            sources.append(IncomeSource(
                id=item.id,
                name=item.name or item.id,
                category=item.category,
                frequency=item.frequency.value,
                gross_amount=monthly_gross,
                monthly_amount=monthly_gross,
                amount_source=resolved.source,
                status=status,
            ))
            continue

        sources.append(IncomeSource(
            id=item.id,
            name=item.name or item.id,
            category=item.category,
            frequency=item.frequency.value,
            gross_amount=monthly_gross,
            monthly_amount=breakdown.net_take_home,
            amount_source=resolved.source,
            status=status,
            employee_share=breakdown.employee_share,
            employer_share=breakdown.employer_share,
            sub_account_shares=dict(breakdown.sub_account_shares),
        ))

    sources.sort(key=lambda s: s.gross_amount, reverse=True)
    return IncomeSummary(month=month_key(period), sources=sources)
