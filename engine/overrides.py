"""
Override resolution — which gross amount an income record carries in a month.

Priority:
  1. historical  past month with a recorded amount (monthly entry, else yearly / 12)
  2. milestone   most recent honored milestone with target_month <= month
  3. base        the record's own gross amount

Historical amounts are already monthly and bypass frequency allocation.
Milestone and base amounts are per-occurrence and still go through it.
Whenever an override applies to a contribution-subject record, contributions
are recomputed on the overridden gross; the stored snapshot only describes
the base amount.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal, Optional, Union

import pandas as pd

from contributions.calculator import ContributionBreakdown, compute_contribution
from contributions.policy import DEFAULT_POLICY, ContributionPolicy
from core.schema import RecurringItem
from core.utils import month_key

Now = Union[date, datetime, pd.Timestamp, str]


@dataclass(frozen=True)
class ResolvedAmount:
    gross: float
    source: Literal["historical", "milestone", "base"]
    reason: Optional[str] = None  # milestone reason, when one was recorded

    @property
    def already_monthly(self) -> bool:
        return self.source == "historical"

    @property
    def is_override(self) -> bool:
        return self.source != "base"


def current_month(now: Now) -> pd.Period:
    return pd.Timestamp(now).to_period("M")


def is_historical_month(month: pd.Period, now: Now) -> bool:
    """A month is historical when it ends before the month containing ``now``."""
    return month < current_month(now)


def _historical_amount(item: RecurringItem, month: pd.Period) -> Optional[float]:
    key = month_key(month)
    for entry in item.historical_overrides:
        if entry.granularity == "monthly" and entry.period == key:
            return float(entry.amount)
    year = str(month.year)
    for entry in item.historical_overrides:
        if entry.granularity == "yearly" and entry.period == year:
            return float(entry.amount) / 12.0
    return None


def resolve_gross_amount(
    item: RecurringItem,
    month: pd.Period,
    *,
    now: Now,
    use_history: bool = True,
) -> ResolvedAmount:
    """Effective gross amount of ``item`` in ``month``."""
    if use_history and item.historical_overrides and is_historical_month(month, now):
        amount = _historical_amount(item, month)
        if amount is not None:
            return ResolvedAmount(gross=amount, source="historical")

    if item.honor_future_milestones and item.future_milestones:
        key = month_key(month)
        applicable = [m for m in item.future_milestones if m.target_month <= key]
        if applicable:
            latest = max(applicable, key=lambda m: m.target_month)
            return ResolvedAmount(gross=float(latest.amount), source="milestone", reason=latest.reason)

    return ResolvedAmount(gross=float(item.gross_amount), source="base")


def contribution_for(
    item: RecurringItem,
    resolved: ResolvedAmount,
    *,
    age: int,
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> Optional[ContributionBreakdown]:
    """
    Contribution breakdown behind the resolved amount, or None when the record
    is not contribution-subject.

    The cached snapshot is used only for the base amount; overrides are
    always recomputed against the policy.
    """
    if not item.subject_to_contribution:
        return None
    snap = item.contribution_snapshot
    if not resolved.is_override and snap is not None:
        return ContributionBreakdown(
            gross_amount=resolved.gross,
            applicable_amount=min(resolved.gross, policy.ordinary_wage_ceiling),
            employee_share=snap.employee_share,
            employer_share=snap.employer_share,
            net_take_home=snap.net_take_home,
            sub_account_shares=dict(snap.sub_account_shares),
        )
    return compute_contribution(resolved.gross, age, policy=policy)


def net_amount(
    item: RecurringItem,
    resolved: ResolvedAmount,
    *,
    age: int,
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> float:
    """Take-home value of the resolved gross amount."""
    breakdown = contribution_for(item, resolved, age=age, policy=policy)
    return resolved.gross if breakdown is None else breakdown.net_take_home
