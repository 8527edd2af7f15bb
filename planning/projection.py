"""
compute_balance_projection — the engine's single entry point.

    request + ledger snapshot + now  →  ProjectionResult

Steps:
  1. validate the request (ValidationError / ProjectionRangeError before any work)
  2. baseline projection, no hypotheticals; its average monthly income is the
     "monthly net income" every threshold is expressed in
  3. scenario projection with hypotheticals applied (reuses the baseline when
     there are none)
  4. optional solvers on the BASELINE: max affordable expense, safe purchase month
  5. safety classification and constraint checks on the SCENARIO
  6. notes and assumptions

Pure: no I/O, no clock reads. Identical inputs give an identical result.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional, Sequence, Union

from contributions.policy import DEFAULT_POLICY, ContributionPolicy
from core.config import ProjectionConfig
from core.schema import HypotheticalEvent, Ledger, ProjectionRequest
from core.utils import month_label, round_money
from data_prep.validators import coerce_ledger, coerce_request, validate_ledger
from engine.ledger import LedgerProjection, check_range, project
from engine.overrides import Now
from engine.scenario import (
    events_outside_range,
    headline_impact,
    index_by_month,
    normalize_hypotheticals,
    summarize_scenario,
)

from .affordability import AffordabilityAnalysis, solve_max_affordable_expense
from .constraints import ConstraintsEvaluation, evaluate_constraints
from .results import ProjectionResult
from .safe_purchase import SafePurchaseRecommendation, find_safe_purchase_month
from .safety import SafetyAssessment, SafetyStatus, assess_safety

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG = ProjectionConfig()


def _assumptions(config: ProjectionConfig, has_events: bool) -> List[str]:
    out = [
        "Projections use current recurring income and expense records",
        "Contribution-subject incomes are counted at net take-home (gross minus employee contribution)",
        "Starting balance is the total of liquid holdings at the start of the projection",
    ]
    if config.yearly_allocation == "anniversary":
        out.append("Yearly items are paid in full in their anniversary month")
    else:
        out.append("Yearly items are spread evenly across months")
    if config.use_historical_overrides:
        out.append("Past months use recorded income history where available")
    out.append("Enabled future salary milestones apply from their target month onward")
    out.append(
        f"Emergency fund target is {config.emergency_fund_months} months of average net income"
    )
    if has_events:
        out.append("Hypothetical events are one-off and do not change recurring records")
    return out


def _starting_balance_note(ledger: Ledger) -> str:
    if ledger.holdings_count is None:
        return f"Starting balance of ${ledger.starting_holdings:,.2f} supplied with the ledger."
    if ledger.holdings_count == 0:
        return "No holdings found; starting balance is $0.00."
    plural = "s" if ledger.holdings_count != 1 else ""
    return (
        f"Starting balance of ${ledger.starting_holdings:,.2f} from "
        f"{ledger.holdings_count} holding{plural}."
    )


def _notes(
    ledger: Ledger,
    events: Sequence[HypotheticalEvent],
    outside: Sequence[HypotheticalEvent],
    scenario: LedgerProjection,
    safety: SafetyAssessment,
    constraints: Optional[ConstraintsEvaluation],
    affordability: Optional[AffordabilityAnalysis],
    safe_purchase: Optional[SafePurchaseRecommendation],
) -> List[str]:
    notes = [_starting_balance_note(ledger)]

    if not ledger.incomes:
        notes.append("No income records found; thresholds are based on zero income.")
    if not ledger.expenses:
        notes.append("No expense records found.")

    for w in ledger.integrity_warnings:
        notes.append(w.message())
    notes.extend(validate_ledger(ledger).warnings)

    if events:
        applied = len(events) - len(outside)
        months = len({e.month for e in events if e not in outside})
        notes.append(
            f"Applied {applied} hypothetical event{'s' if applied != 1 else ''} "
            f"across {months} month{'s' if months != 1 else ''}."
        )
    for e in outside:
        notes.append(
            f"Hypothetical {e.type} of ${e.amount:,.2f} in {month_label(e.month)} is outside "
            f"{month_label(scenario.from_month)} to {month_label(scenario.to_month)} and was not applied."
        )

    if constraints is not None:
        notes.extend(constraints.warnings())

    if safety.status == SafetyStatus.RED:
        notes.append(f"Safety alert: {safety.recommendation}")
    elif safety.status == SafetyStatus.YELLOW:
        notes.append(f"Caution: {safety.recommendation}")

    if affordability is not None and not affordability.in_range:
        notes.extend(affordability.assumptions)
    if safe_purchase is not None and safe_purchase.recommended_month is None:
        notes.append(safe_purchase.recommendation)
    return notes


def compute_balance_projection(
    request: Union[ProjectionRequest, Mapping[str, Any]],
    ledger: Union[Ledger, Mapping[str, Any]],
    now: Now,
    *,
    config: ProjectionConfig = _DEFAULT_CONFIG,
    policy: ContributionPolicy = DEFAULT_POLICY,
) -> ProjectionResult:
    """
    Month-by-month balance forecast with scenario, safety and solver answers.

    Parameters
    ----------
    request : ProjectionRequest or mapping
        camelCase or snake_case keys; legacy single-event fields are accepted
    ledger : Ledger or mapping
        Read-only snapshot of the owner's records and starting holdings
    now : date-like
        Reference instant; months before the one containing it are historical

    Raises
    ------
    ValidationError
        Malformed request (bad month, non-positive amount, unknown field type)
    ProjectionRangeError
        to_month earlier than from_month
    """
    req = coerce_request(request)
    ledger = coerce_ledger(ledger)
    check_range(req.from_month, req.to_month)

    events = normalize_hypotheticals(req)
    age = ledger.owner_age if ledger.owner_age is not None else config.default_age
    run = dict(now=now, age=age, config=config, policy=policy)

    baseline = project(
        ledger.incomes, ledger.expenses, ledger.starting_holdings,
        req.from_month, req.to_month, **run,
    )
    monthly_net_income = baseline.average_monthly_income

    if events:
        scenario = project(
            ledger.incomes, ledger.expenses, ledger.starting_holdings,
            req.from_month, req.to_month, events_by_month=index_by_month(events), **run,
        )
        outside = events_outside_range(events, scenario)
    else:
        scenario, outside = baseline, []

    affordability = None
    if req.compute_max_affordable_expense_month:
        affordability = solve_max_affordable_expense(
            baseline,
            req.compute_max_affordable_expense_month,
            monthly_net_income=monthly_net_income,
            min_monthly_balance=req.min_monthly_balance,
            floor_months=config.emergency_fund_months,
        )

    safe_purchase = None
    if req.find_safe_month_for_expense:
        safe_purchase = find_safe_purchase_month(
            baseline,
            req.find_safe_month_for_expense,
            monthly_net_income=monthly_net_income,
            threshold_months=config.emergency_fund_months,
        )

    safety = assess_safety(
        scenario,
        events,
        monthly_net_income=monthly_net_income,
        yellow_months=config.yellow_months,
        green_months=config.green_months,
    )
    constraints = evaluate_constraints(
        scenario,
        min_end_balance=req.min_end_balance,
        min_monthly_balance=req.min_monthly_balance,
    )

    decimals = config.output_decimals
    total_income = round_money(scenario.total_income, decimals)
    total_expenses = round_money(scenario.total_expenses, decimals)

    logger.debug(
        "Projection %s..%s: %d months, %d hypothetical(s), safety=%s",
        scenario.from_month, scenario.to_month, scenario.month_count,
        len(events), safety.status.value,
    )

    return ProjectionResult(
        from_month=scenario.from_month,
        to_month=scenario.to_month,
        month_count=scenario.month_count,
        starting_balance=round_money(scenario.starting_balance, decimals),
        month_buckets=scenario.rounded_buckets(decimals),
        total_income=total_income,
        total_expenses=total_expenses,
        total_net_savings=round_money(scenario.total_income - scenario.total_expenses, decimals),
        final_balance=round_money(scenario.final_balance, decimals),
        safety_assessment=safety,
        affordability_analysis=affordability,
        constraints_evaluation=constraints,
        scenario_summary=summarize_scenario(events),
        safe_purchase_recommendation=safe_purchase,
        hypothetical_impact=headline_impact(events, scenario),
        assumptions=_assumptions(config, bool(events)),
        notes=_notes(
            ledger, events, outside, scenario, safety, constraints, affordability, safe_purchase
        ),
    )
