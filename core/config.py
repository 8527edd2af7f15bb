"""
Projection configuration.
Passed explicitly into every engine call; nothing here is read from globals.
Contribution rates live in contributions/policy.py (ContributionPolicy).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class ProjectionConfig:
    # age used for contribution brackets when the ledger has no owner age
    default_age: int = 30

    # "anniversary": yearly items pay their full amount in the start month each year
    # "spread":      yearly items contribute amount / 12 every month
    yearly_allocation: Literal["anniversary", "spread"] = "anniversary"

    # whether past months honor recorded historical income overrides
    use_historical_overrides: bool = True

    weekly_factor: float = 4.33
    biweekly_factor: float = 2.17

    # safety policy, expressed in months of baseline net income
    emergency_fund_months: int = 6
    yellow_months: int = 6
    green_months: int = 9

    output_decimals: int = 2
