"""
ProjectionResult — the single response object of compute_balance_projection.

Buckets and totals are already rounded to the configured precision when the
result is built. ``to_dict()`` renders the camelCase JSON shape the
tool-calling layer relays; ``to_dataframe()`` the month table.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from core.utils import round_money
from engine.ledger import MonthBucket
from engine.scenario import HypotheticalImpact, ScenarioSummary

from .affordability import AffordabilityAnalysis
from .constraints import ConstraintsEvaluation
from .safe_purchase import SafePurchaseRecommendation
from .safety import SafetyAssessment

# derived values worth shipping alongside the stored fields
_EXTRA_PROPERTIES = {
    MonthBucket: ("month_label",),
    ScenarioSummary: ("net_impact",),
    HypotheticalImpact: ("impact",),
    SafePurchaseRecommendation: ("recommended_month_label",),
    SafetyAssessment: ("reference_month_label",),
    ConstraintsEvaluation: ("any_breached",),
}


def _jsonable(value: Any, decimals: int) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool) or value is None or isinstance(value, (int, str)):
        return value
    if isinstance(value, float):
        return round_money(value, decimals)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if dataclasses.is_dataclass(value):
        out = {
            to_camel(f.name): _jsonable(getattr(value, f.name), decimals)
            for f in dataclasses.fields(value)
        }
        for prop in _EXTRA_PROPERTIES.get(type(value), ()):
            out[to_camel(prop)] = _jsonable(getattr(value, prop), decimals)
        return out
    if isinstance(value, dict):
        return {str(k): _jsonable(v, decimals) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v, decimals) for v in value]
    return value


@dataclass
class ProjectionResult:
    from_month: str
    to_month: str
    month_count: int
    starting_balance: float
    month_buckets: List[MonthBucket]
    total_income: float
    total_expenses: float
    total_net_savings: float
    final_balance: float
    safety_assessment: SafetyAssessment
    affordability_analysis: Optional[AffordabilityAnalysis] = None
    constraints_evaluation: Optional[ConstraintsEvaluation] = None
    scenario_summary: Optional[ScenarioSummary] = None
    safe_purchase_recommendation: Optional[SafePurchaseRecommendation] = None
    hypothetical_impact: Optional[HypotheticalImpact] = None
    assumptions: List[str] = field(default_factory=list)
    notes: List[str] = field(default_factory=list)

    @property
    def cumulative_balances(self) -> List[float]:
        return [b.cumulative_balance for b in self.month_buckets]

    def bucket(self, month: str) -> Optional[MonthBucket]:
        return next((b for b in self.month_buckets if b.month == month), None)

    def to_dict(self, decimals: int = 2) -> Dict[str, Any]:
        """camelCase, JSON-ready; optional sections are omitted when absent."""
        out = _jsonable(self, decimals)
        return {k: v for k, v in out.items() if v is not None}

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {
                "month": b.month,
                "label": b.month_label,
                "salary_income": b.salary_income,
                "bonus_income": b.bonus_income,
                "income": b.income,
                "expenses": b.expenses,
                "net_balance": b.net_balance,
                "cumulative_balance": b.cumulative_balance,
                "hypotheticals": ", ".join(
                    f"{e.type} {e.amount:,.2f}" + (f" ({e.label})" if e.label else "")
                    for e in b.applied_hypotheticals
                ),
            }
            for b in self.month_buckets
        ]
        return pd.DataFrame(rows)
