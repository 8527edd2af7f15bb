"""
Hypothetical scenarios — what-if one-off events overlaid on the ledger.

Events never touch the underlying records. They are indexed by month and
handed to the projector, which adds each to its bucket before computing that
bucket's net balance. Legacy single-event request fields are folded into the
same list first, so there is only one code path.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from core.schema import HypotheticalEvent, ProjectionRequest

from .ledger import LedgerProjection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScenarioSummary:
    hypothetical_count: int
    months_affected: int
    total_hypothetical_income: float
    total_hypothetical_expense: float

    @property
    def net_impact(self) -> float:
        return self.total_hypothetical_income - self.total_hypothetical_expense


@dataclass(frozen=True)
class HypotheticalImpact:
    """Effect of the headline event (first expense, else first income) on the final balance."""
    type: str
    amount: float
    month: str
    label: Optional[str]
    balance_with: float
    balance_without: float
    percent_of_monthly_balance: Optional[float]  # expense as % of that month's net without it

    @property
    def impact(self) -> float:
        return -self.amount if self.type == "expense" else self.amount


def normalize_hypotheticals(request: ProjectionRequest) -> List[HypotheticalEvent]:
    """The request's events as one list; legacy fields are used only when the list is empty."""
    if request.hypotheticals:
        return list(request.hypotheticals)

    events: List[HypotheticalEvent] = []
    if request.hypothetical_expense and request.hypothetical_expense_month:
        events.append(HypotheticalEvent(
            type="expense",
            amount=request.hypothetical_expense,
            month=request.hypothetical_expense_month,
        ))
    if request.hypothetical_income and request.hypothetical_income_month:
        events.append(HypotheticalEvent(
            type="income",
            amount=request.hypothetical_income,
            month=request.hypothetical_income_month,
        ))
    return events


def index_by_month(events: Sequence[HypotheticalEvent]) -> Dict[str, List[HypotheticalEvent]]:
    by_month: Dict[str, List[HypotheticalEvent]] = defaultdict(list)
    for event in events:
        by_month[event.month].append(event)
    return dict(by_month)


def events_outside_range(
    events: Sequence[HypotheticalEvent],
    projection: LedgerProjection,
) -> List[HypotheticalEvent]:
    months = set(projection.months)
    outside = [e for e in events if e.month not in months]
    for e in outside:
        logger.warning(
            "Hypothetical %s of %.2f in %s falls outside %s..%s and was not applied",
            e.type, e.amount, e.month, projection.from_month, projection.to_month,
        )
    return outside


def summarize_scenario(events: Sequence[HypotheticalEvent]) -> Optional[ScenarioSummary]:
    if not events:
        return None
    return ScenarioSummary(
        hypothetical_count=len(events),
        months_affected=len({e.month for e in events}),
        total_hypothetical_income=sum(e.amount for e in events if e.type == "income"),
        total_hypothetical_expense=sum(e.amount for e in events if e.type == "expense"),
    )


def headline_impact(
    events: Sequence[HypotheticalEvent],
    projection: LedgerProjection,
) -> Optional[HypotheticalImpact]:
    """Impact of the first hypothetical expense, or of the first income when there is none."""
    event = next((e for e in events if e.type == "expense"), None)
    if event is None:
        event = next((e for e in events if e.type == "income"), None)
    if event is None:
        return None

    final = projection.final_balance
    applied = event.month in set(projection.months)
    if event.type == "expense":
        without = final + event.amount if applied else final
        bucket = projection.bucket(event.month)
        month_net_without = bucket.net_balance + event.amount if bucket is not None else None
        pct = (
            event.amount / month_net_without * 100.0
            if month_net_without not in (None, 0) else None
        )
    else:
        without = final - event.amount if applied else final
        pct = None

    return HypotheticalImpact(
        type=event.type,
        amount=event.amount,
        month=event.month,
        label=event.label,
        balance_with=final,
        balance_without=without,
        percent_of_monthly_balance=pct,
    )
