from datetime import date

import numpy as np
import pytest

from core.schema import HypotheticalEvent
from engine.ledger import project
from engine.scenario import index_by_month
from planning.affordability import solve_max_affordable_expense
from planning.constraints import evaluate_constraints
from planning.safe_purchase import find_safe_purchase_month

NOW = date(2025, 1, 15)


@pytest.fixture
def dip_ledger(make_item):
    """Jan 12000, Feb 14000, Mar 6000 (custom 10k bill), Apr 8000."""
    return (
        [make_item("salary", amount=5000.0)],
        [
            make_item("rent", "expense", 3000.0),
            make_item("tax", "expense", 10000.0, "custom", custom_months=[3]),
        ],
    )


def baseline(incomes, expenses, to_month="2025-04", start=10000.0):
    return project(incomes, expenses, start, "2025-01", to_month, now=NOW)


def test_binding_month_is_later_dip(dip_ledger):
    p = baseline(*dip_ledger)
    assert list(p.cumulative_balances()) == [12000.0, 14000.0, 6000.0, 8000.0]

    a = solve_max_affordable_expense(p, "2025-01", monthly_net_income=5000.0, min_monthly_balance=0.0)
    assert a.max_affordable_one_time_expense == 6000.0
    assert a.binding_month == "2025-03"
    assert a.floor_source == "min-monthly-balance"

    late = solve_max_affordable_expense(p, "2025-04", monthly_net_income=5000.0, min_monthly_balance=0.0)
    assert late.max_affordable_one_time_expense == 8000.0


def test_default_floor_is_emergency_fund(dip_ledger):
    p = baseline(*dip_ledger)
    a = solve_max_affordable_expense(p, "2025-01", monthly_net_income=1000.0)
    assert a.balance_floor == 6000.0
    assert a.floor_source == "emergency-fund"
    assert a.max_affordable_one_time_expense == 0.0


def test_target_outside_range_returns_zero(dip_ledger):
    a = solve_max_affordable_expense(baseline(*dip_ledger), "2026-01", monthly_net_income=5000.0)
    assert not a.in_range
    assert a.max_affordable_one_time_expense == 0.0


def test_affordability_postcondition(dip_ledger):
    incomes, expenses = dip_ledger
    p = baseline(incomes, expenses)
    floor = 1000.0
    a = solve_max_affordable_expense(p, "2025-02", monthly_net_income=5000.0, min_monthly_balance=floor)

    def min_after(amount):
        e = HypotheticalEvent(type="expense", amount=amount, month="2025-02")
        q = project(incomes, expenses, 10000.0, "2025-01", "2025-04", now=NOW, events_by_month=index_by_month([e]))
        return q.cumulative_balances()[1:].min()

    assert min_after(a.max_affordable_one_time_expense) >= floor - 0.01
    assert min_after(a.max_affordable_one_time_expense + 0.01) < floor


def test_safe_purchase_earliest_month(simple_ledger):
    p = baseline(simple_ledger.incomes, simple_ledger.expenses, to_month="2025-12")
    r = find_safe_purchase_month(p, 2000.0, monthly_net_income=5000.0)
    assert r.recommended_month == "2025-11"
    assert r.months_to_wait == 10
    assert r.balance_after_purchase >= 6 * 5000.0
    assert not r.is_safe_now

    before = p.bucket("2025-10").cumulative_balance - 2000.0
    assert before < 6 * 5000.0


def test_safe_purchase_now_and_never(simple_ledger):
    p = baseline(simple_ledger.incomes, simple_ledger.expenses, start=50000.0)
    now = find_safe_purchase_month(p, 1000.0, monthly_net_income=5000.0)
    assert now.is_safe_now and now.months_to_wait == 0

    never = find_safe_purchase_month(p, 1_000_000.0, monthly_net_income=5000.0)
    assert never.recommended_month is None
    assert "no month" in never.recommendation


def test_constraints(simple_ledger):
    p = baseline(simple_ledger.incomes, simple_ledger.expenses, to_month="2025-03")
    assert evaluate_constraints(p) is None

    c = evaluate_constraints(p, min_end_balance=20000.0, min_monthly_balance=13000.0)
    assert c.min_end_balance_breached
    assert c.min_monthly_balance_breached
    assert c.first_breach_month == "2025-01"
    assert len(c.warnings()) == 2

    ok = evaluate_constraints(p, min_end_balance=16000.0, min_monthly_balance=12000.0)
    assert not ok.any_breached


def test_cumulative_balances_is_numpy(simple_ledger):
    p = baseline(simple_ledger.incomes, simple_ledger.expenses)
    assert isinstance(p.cumulative_balances(), np.ndarray)
