"""
Monthly ledger projector — month buckets with a running cumulative balance.

For every month in [from_month, to_month]:
  income   = Σ net salary (override-resolved, frequency-allocated)
           + Σ net bonus (bonus months only)
           + hypothetical income for the month
  expenses = Σ frequency-allocated expenses + hypothetical expenses
  net      = income - expenses
  cumulative[i] = cumulative[i-1] + net[i],   cumulative[-1] = starting balance

Everything is kept at full float precision; rounding happens only when a
bucket is rendered (LedgerProjection.rounded_buckets / ProjectionResult).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Literal, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from contributions.calculator import compute_bonus_contribution
from contributions.policy import DEFAULT_POLICY, ContributionPolicy
from core.config import ProjectionConfig
from core.errors import ProjectionRangeError
from core.schema import Frequency, HypotheticalEvent, RecurringItem
from core.utils import MonthLike, month_key, month_label, month_range, parse_month, round_money

from .frequency import allocate_to_month, is_active_in_month
from .overrides import Now, net_amount, resolve_gross_amount

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ProjectionConfig()


@dataclass(frozen=True)
class SpecialItem:
    """A notable entry inside a bucket (one-offs, custom-month expenses, bonuses)."""
    name: str
    amount: float
    type: Literal["one-off-income", "one-off-expense", "custom-expense", "bonus"]


@dataclass
class MonthBucket:
    month: str  # "YYYY-MM"
    income: float
    expenses: float
    net_balance: float
    cumulative_balance: float
    salary_income: float = 0.0
    bonus_income: float = 0.0
    applied_hypotheticals: List[HypotheticalEvent] = field(default_factory=list)
    special_items: List[SpecialItem] = field(default_factory=list)

    @property
    def month_label(self) -> str:
        return month_label(self.month)

    def rounded(self, decimals: int = 2) -> "MonthBucket":
        return replace(
            self,
            income=round_money(self.income, decimals),
            expenses=round_money(self.expenses, decimals),
            net_balance=round_money(self.net_balance, decimals),
            cumulative_balance=round_money(self.cumulative_balance, decimals),
            salary_income=round_money(self.salary_income, decimals),
            bonus_income=round_money(self.bonus_income, decimals),
            special_items=[replace(s, amount=round_money(s.amount, decimals)) for s in self.special_items],
        )


@dataclass
class LedgerProjection:
    """Full-precision output of one projector run."""
    from_month: str
    to_month: str
    starting_balance: float
    buckets: List[MonthBucket]

    @property
    def months(self) -> List[str]:
        return [b.month for b in self.buckets]

    @property
    def month_count(self) -> int:
        return len(self.buckets)

    def cumulative_balances(self) -> np.ndarray:
        return np.array([b.cumulative_balance for b in self.buckets], dtype=float)

    def index_of(self, month: str) -> Optional[int]:
        for i, b in enumerate(self.buckets):
            if b.month == month:
                return i
        return None

    def bucket(self, month: str) -> Optional[MonthBucket]:
        i = self.index_of(month)
        return None if i is None else self.buckets[i]

    @property
    def total_income(self) -> float:
        return float(sum(b.income for b in self.buckets))

    @property
    def total_expenses(self) -> float:
        return float(sum(b.expenses for b in self.buckets))

    @property
    def final_balance(self) -> float:
        return self.buckets[-1].cumulative_balance if self.buckets else self.starting_balance

    @property
    def average_monthly_income(self) -> float:
        return self.total_income / self.month_count if self.month_count else 0.0

    def rounded_buckets(self, decimals: int = 2) -> List[MonthBucket]:
        """
        Buckets rounded for output.

        Each cumulative balance is rounded once and each net is taken as the
        difference of consecutive rounded balances, so
        ``net[i] == cumulative[i] - cumulative[i-1]`` holds exactly on output.
        """
        out: List[MonthBucket] = []
        prev = round_money(self.starting_balance, decimals)
        for b in self.buckets:
            r = b.rounded(decimals)
            out.append(replace(r, net_balance=round_money(r.cumulative_balance - prev, decimals)))
            prev = r.cumulative_balance
        return out

    def to_dataframe(self, decimals: Optional[int] = None) -> pd.DataFrame:
        """One row per month; rounded to ``decimals`` when given."""
        rows = []
        buckets = self.rounded_buckets(decimals) if decimals is not None else self.buckets
        for b in buckets:
            rows.append({
                "month": b.month,
                "label": b.month_label,
                "salary_income": b.salary_income,
                "bonus_income": b.bonus_income,
                "income": b.income,
                "expenses": b.expenses,
                "net_balance": b.net_balance,
                "cumulative_balance": b.cumulative_balance,
                "hypotheticals": len(b.applied_hypotheticals),
            })
        return pd.DataFrame(rows)


def check_range(from_month: MonthLike, to_month: MonthLike) -> None:
    start, end = parse_month(from_month), parse_month(to_month)
    if end < start:
        raise ProjectionRangeError(
            f"to_month {month_key(end)} is before from_month {month_key(start)}.",
            [{"field": "toMonth", "message": "must be on or after fromMonth"}],
        )


def income_for_month(
    item: RecurringItem,
    month: pd.Period,
    *,
    now: Now,
    age: int,
    config: ProjectionConfig = _DEFAULT_CONFIG,
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> float:
    """Net salary contributed by one income record to one month (bonus excluded)."""
    resolved = resolve_gross_amount(
        item, month, now=now, use_history=config.use_historical_overrides
    )
    ignore_end = item.milestones_supersede_end_date
    net = net_amount(item, resolved, age=age, policy=policy)
    if resolved.already_monthly:
        return net if is_active_in_month(item, month, ignore_end_date=ignore_end) else 0.0
    return allocate_to_month(item, net, month, config=config, ignore_end_date=ignore_end)


def bonus_for_month(
    item: RecurringItem,
    month: pd.Period,
    *,
    age: int,
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> float:
    """Net bonus paid by one income record in one month."""
    if not item.account_for_bonus or not item.bonus_groups:
        return 0.0
    if not is_active_in_month(item, month):
        return 0.0
    group = next((g for g in item.bonus_groups if g.month == month.month), None)
    if group is None:
        return 0.0
    gross_bonus = float(item.gross_amount) * group.multiplier
    if not item.subject_to_contribution:
        return gross_bonus
    return compute_bonus_contribution(item.gross_amount, gross_bonus, age, policy=policy).net_bonus


def project(
    incomes: Sequence[RecurringItem],
    expenses: Sequence[RecurringItem],
    starting_balance: float,
    from_month: MonthLike,
    to_month: MonthLike,
    *,
    now: Now,
    age: int = 30,
    config: ProjectionConfig = _DEFAULT_CONFIG,
    policy: ContributionPolicy = DEFAULT_POLICY,
    events_by_month: Optional[Mapping[str, Sequence[HypotheticalEvent]]] = None,
) -> LedgerProjection:
    """
    Build the month-by-month ledger.

    Parameters
    ----------
    incomes, expenses : sequence of RecurringItem
        Read-only record snapshot
    starting_balance : float
        Liquid holdings at the start of from_month
    from_month, to_month : "YYYY-MM" or date-like
        Inclusive range; raises ProjectionRangeError when to_month < from_month
    now : date-like
        Reference instant deciding which months are historical
    events_by_month : mapping, optional
        Hypothetical events keyed by "YYYY-MM" (see engine.scenario); None for a baseline run
    """
    check_range(from_month, to_month)
    periods = month_range(from_month, to_month)
    events_by_month = events_by_month or {}

    buckets: List[MonthBucket] = []
    cumulative = float(starting_balance)

    for month in periods:
        key = month_key(month)
        specials: List[SpecialItem] = []

        salary = 0.0
        bonus = 0.0
        for item in incomes:
            amount = income_for_month(item, month, now=now, age=age, config=config, policy=policy)
            if amount > 0 and item.frequency == Frequency.ONE_TIME:
                specials.append(SpecialItem(name=item.name or item.id, amount=amount, type="one-off-income"))
            salary += amount

            b = bonus_for_month(item, month, age=age, policy=policy)
            if b > 0:
                mult = next(g.multiplier for g in item.bonus_groups if g.month == month.month)
                specials.append(
                    SpecialItem(name=f"{item.name or item.id} Bonus ({mult:g}x)", amount=b, type="bonus")
                )
            bonus += b

        spent = 0.0
        for item in expenses:
            amount = allocate_to_month(item, item.gross_amount, month, config=config)
            if amount > 0 and item.frequency == Frequency.ONE_TIME:
                specials.append(SpecialItem(name=item.name or item.id, amount=amount, type="one-off-expense"))
            elif amount > 0 and item.frequency == Frequency.CUSTOM:
                specials.append(SpecialItem(name=item.name or item.id, amount=amount, type="custom-expense"))
            spent += amount

        applied = list(events_by_month.get(key, ()))
        hyp_income = sum(e.amount for e in applied if e.type == "income")
        hyp_expense = sum(e.amount for e in applied if e.type == "expense")

        income = salary + bonus + hyp_income
        outflow = spent + hyp_expense
        net = income - outflow
        cumulative += net

        buckets.append(MonthBucket(
            month=key,
            income=income,
            expenses=outflow,
            net_balance=net,
            cumulative_balance=cumulative,
            salary_income=salary,
            bonus_income=bonus,
            applied_hypotheticals=applied,
            special_items=specials,
        ))

    logger.debug(
        "Projected %d months (%s..%s) over %d incomes / %d expenses, %d hypothetical month(s)",
        len(buckets), month_key(periods[0]), month_key(periods[-1]),
        len(incomes), len(expenses), len(events_by_month),
    )

    return LedgerProjection(
        from_month=month_key(periods[0]),
        to_month=month_key(periods[-1]),
        starting_balance=float(starting_balance),
        buckets=buckets,
    )
