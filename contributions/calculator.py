"""
Contribution calculator — pure functions over a ContributionPolicy.

  compute_contribution()        monthly ordinary wages, capped at the OW ceiling
  compute_bonus_contribution()  additional wages (bonus), capped by what the
                                annual ceiling leaves after 12 months of ordinary wages

Shares are rounded to cents, as a payslip would show them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from core.utils import round_money

from .policy import DEFAULT_POLICY, ContributionPolicy


@dataclass(frozen=True)
class ContributionBreakdown:
    gross_amount: float
    applicable_amount: float  # portion of gross subject to contribution
    employee_share: float
    employer_share: float
    net_take_home: float
    sub_account_shares: Dict[str, float] = field(default_factory=dict)

    @property
    def total_contribution(self) -> float:
        return round_money(self.employee_share + self.employer_share)


@dataclass(frozen=True)
class BonusContribution:
    bonus_amount: float
    annual_ordinary_base: float
    remaining_annual_ceiling: float
    applicable_amount: float
    employee_share: float
    employer_share: float
    net_bonus: float
    sub_account_shares: Dict[str, float] = field(default_factory=dict)


def _allocate(total: float, age: int, policy: ContributionPolicy) -> Dict[str, float]:
    """Split a rounded total across sub-accounts; the last account takes the remainder."""
    alloc = policy.allocation_for_age(age).as_dict()
    *head, last = alloc
    shares = {name: round_money(total * alloc[name]) for name in head}
    shares[last] = round_money(total - sum(shares.values()))
    return shares


def compute_contribution(
    gross_monthly: float,
    age: int = 30,
    *,
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> ContributionBreakdown:
    """
    Split one month of gross ordinary wages into contributions and take-home pay.

    Parameters
    ----------
    gross_monthly : float
        Gross pay for the month
    age : int
        Employee age; selects the rate and allocation bands
    policy : ContributionPolicy
        Rate table to apply (defaults to the current statutory version)
    """
    gross = max(float(gross_monthly), 0.0)
    rates = policy.rates_for_age(age)
    applicable = min(gross, policy.ordinary_wage_ceiling)

    employee = applicable * rates.employee
    employer = applicable * rates.employer

    return ContributionBreakdown(
        gross_amount=gross,
        applicable_amount=applicable,
        employee_share=round_money(employee),
        employer_share=round_money(employer),
        net_take_home=round_money(gross - employee),
        sub_account_shares=_allocate(round_money(employee) + round_money(employer), age, policy),
    )


def compute_bonus_contribution(
    monthly_ordinary_wage: float,
    bonus_amount: float,
    age: int = 30,
    *,
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> BonusContribution:
    """Contribution on a bonus, limited by the room left under the annual wage ceiling."""
    annual_base = min(float(monthly_ordinary_wage), policy.ordinary_wage_ceiling) * 12
    remaining = max(0.0, policy.annual_wage_ceiling - annual_base)
    bonus = max(float(bonus_amount), 0.0)
    applicable = min(bonus, remaining)

    rates = policy.rates_for_age(age)
    employee = applicable * rates.employee
    employer = applicable * rates.employer

    return BonusContribution(
        bonus_amount=bonus,
        annual_ordinary_base=annual_base,
        remaining_annual_ceiling=remaining,
        applicable_amount=applicable,
        employee_share=round_money(employee),
        employer_share=round_money(employer),
        net_bonus=round_money(bonus - employee),
        sub_account_shares=_allocate(round_money(employee) + round_money(employer), age, policy),
    )
