"""
Caller-supplied balance minimums checked against the
projection (hypotheticals applied). Breaches are reported, never raised.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from core.utils import month_label
from engine.ledger import LedgerProjection


@dataclass(frozen=True)
class ConstraintsEvaluation:
    min_end_balance_required: Optional[float]
    min_monthly_balance_required: Optional[float]
    min_end_balance_breached: bool
    min_monthly_balance_breached: bool
    first_breach_month: Optional[str]
    final_balance: float

    @property
    def any_breached(self) -> bool:
        return self.min_end_balance_breached or self.min_monthly_balance_breached

    def warnings(self) -> List[str]:
        out: List[str] = []
        if self.min_end_balance_breached:
            out.append(
                f"Warning: Final balance (${self.final_balance:,.0f}) is below minimum required "
                f"(${self.min_end_balance_required:,.2f})."
            )
        if self.min_monthly_balance_breached and self.first_breach_month:
            out.append(
                f"Warning: Balance drops below minimum (${self.min_monthly_balance_required:,.2f}) "
                f"starting in {month_label(self.first_breach_month)}."
            )
        return out


def evaluate_constraints(
    projection: LedgerProjection,
    *,
    min_end_balance: Optional[float] = None,
    min_monthly_balance: Optional[float] = None,
) -> Optional[ConstraintsEvaluation]:
    """None when neither constraint was supplied."""
    if min_end_balance is None and min_monthly_balance is None:
        return None

    final = projection.final_balance
    end_breached = min_end_balance is not None and final < min_end_balance

    first_breach: Optional[str] = None
    if min_monthly_balance is not None:
        first_breach = next(
            (b.month for b in projection.buckets if b.cumulative_balance < min_monthly_balance),
            None,
        )

    return ConstraintsEvaluation(
        min_end_balance_required=min_end_balance,
        min_monthly_balance_required=min_monthly_balance,
        min_end_balance_breached=end_breached,
        min_monthly_balance_breached=first_breach is not None,
        first_breach_month=first_breach,
        final_balance=final,
    )
