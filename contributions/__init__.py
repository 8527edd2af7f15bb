"""
Statutory contribution model — versioned rate tables and the pure calculator
that turns gross pay into employee/employer shares, sub-account allocations,
and net take-home pay.
"""

from .policy import (
    CPF_2025,
    DEFAULT_POLICY,
    AllocationBand,
    ContributionPolicy,
    RateBand,
    get_policy,
)
from .calculator import (
    BonusContribution,
    ContributionBreakdown,
    compute_bonus_contribution,
    compute_contribution,
)

__all__ = [
    "CPF_2025",
    "DEFAULT_POLICY",
    "AllocationBand",
    "ContributionPolicy",
    "RateBand",
    "get_policy",
    "BonusContribution",
    "ContributionBreakdown",
    "compute_bonus_contribution",
    "compute_contribution",
]
