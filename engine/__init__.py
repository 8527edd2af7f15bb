"""
Ledger engine — frequency normalization, override resolution, the monthly
projector, hypothetical overlays, and the single-month income summary.
"""

from .frequency import allocate_to_month, monthly_equivalent, spread_to_month
from .income_summary import IncomeSummary, summarize_income_for_month
from .ledger import LedgerProjection, MonthBucket, SpecialItem, project
from .overrides import ResolvedAmount, resolve_gross_amount
from .scenario import index_by_month, normalize_hypotheticals

__all__ = [
    "allocate_to_month",
    "monthly_equivalent",
    "spread_to_month",
    "IncomeSummary",
    "summarize_income_for_month",
    "LedgerProjection",
    "MonthBucket",
    "SpecialItem",
    "project",
    "ResolvedAmount",
    "resolve_gross_amount",
    "index_by_month",
    "normalize_hypotheticals",
]
