"""
Contribution policy tables.

A ContributionPolicy is plain data: age bands → contribution rates, age bands →
sub-account allocation, and the wage ceilings. Statutory changes ship as a new
policy version registered in POLICIES; engine code never hard-codes a rate.

Bands are inclusive upper bounds on age, checked in order; the last band has
max_age=None and catches everything above.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

SUB_ACCOUNTS: Tuple[str, ...] = ("ordinary", "special", "medisave")


@dataclass(frozen=True)
class RateBand:
    max_age: Optional[int]
    employee: float
    employer: float


@dataclass(frozen=True)
class AllocationBand:
    """Share of the TOTAL contribution credited to each sub-account."""
    max_age: Optional[int]
    ordinary: float
    special: float
    medisave: float

    def as_dict(self) -> Dict[str, float]:
        return {"ordinary": self.ordinary, "special": self.special, "medisave": self.medisave}


@dataclass(frozen=True)
class ContributionPolicy:
    version: str
    ordinary_wage_ceiling: float  # monthly cap on the contribution base
    annual_wage_ceiling: float  # yearly cap across ordinary + additional wages
    rate_bands: Tuple[RateBand, ...]
    allocation_bands: Tuple[AllocationBand, ...]

    def rates_for_age(self, age: int) -> RateBand:
        return _pick_band(self.rate_bands, age)

    def allocation_for_age(self, age: int) -> AllocationBand:
        return _pick_band(self.allocation_bands, age)


def _pick_band(bands, age: int):
    for band in bands:
        if band.max_age is None or age <= band.max_age:
            return band
    raise ValueError(f"No contribution band covers age {age}; the last band needs max_age=None.")


CPF_2025 = ContributionPolicy(
    version="2025",
    ordinary_wage_ceiling=8000.0,
    annual_wage_ceiling=102000.0,
    rate_bands=(
        RateBand(max_age=55, employee=0.20, employer=0.17),
        RateBand(max_age=60, employee=0.17, employer=0.155),
        RateBand(max_age=65, employee=0.115, employer=0.12),
        RateBand(max_age=70, employee=0.075, employer=0.09),
        RateBand(max_age=None, employee=0.05, employer=0.075),
    ),
    allocation_bands=(
        AllocationBand(max_age=35, ordinary=0.6217, special=0.1622, medisave=0.2162),
        AllocationBand(max_age=45, ordinary=0.5676, special=0.2162, medisave=0.2162),
        AllocationBand(max_age=50, ordinary=0.5135, special=0.2703, medisave=0.2162),
        AllocationBand(max_age=55, ordinary=0.4324, special=0.3514, medisave=0.2162),
        AllocationBand(max_age=60, ordinary=0.4308, special=0.2462, medisave=0.3231),
        AllocationBand(max_age=65, ordinary=0.3404, special=0.1489, medisave=0.5106),
        AllocationBand(max_age=None, ordinary=0.3333, special=0.0909, medisave=0.5758),
    ),
)

POLICIES: Dict[str, ContributionPolicy] = {CPF_2025.version: CPF_2025}

DEFAULT_POLICY = CPF_2025


def get_policy(version: Optional[str] = None) -> ContributionPolicy:
    if version is None:
        return DEFAULT_POLICY
    try:
        return POLICIES[version]
    except KeyError:
        raise ValueError(
            f"Unknown contribution policy version {version!r}. Available: {sorted(POLICIES)}"
        ) from None
