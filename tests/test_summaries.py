from datetime import date

import pytest

from core.utils import round_money
from engine.income_summary import summarize_income_for_month
from planning.expense_breakdown import expense_breakdown

NOW = date(2025, 1, 15)


@pytest.fixture
def incomes(make_item):
    return [
        make_item("bonus", amount=12000.0, frequency="yearly", start_date="2024-03-01"),
        make_item(
            "salary", amount=5000.0, subject_to_contribution=True,
            historical_overrides=[{"period": "2024-06", "granularity": "monthly", "amount": 4500.0}],
            future_milestones=[{"targetMonth": "2025-06", "amount": 6000.0, "reason": "Promotion"}],
            honor_future_milestones=True,
            category="Employment",
        ),
    ]


def test_current_month_smooths_yearly_income(incomes):
    s = summarize_income_for_month(incomes, "2025-02", now=NOW)
    assert [src.id for src in s.sources] == ["salary", "bonus"]
    salary, bonus = s.sources
    assert salary.monthly_amount == pytest.approx(4000.0)
    assert salary.employee_share == pytest.approx(1000.0)
    assert bonus.gross_amount == pytest.approx(1000.0)
    assert bonus.monthly_amount == pytest.approx(1000.0)
    assert s.total_gross == pytest.approx(6000.0)
    assert s.total_net == pytest.approx(5000.0)
    assert round_money(sum(s.sub_account_totals().values())) == 1850.0


def test_milestone_and_history_statuses(incomes):
    later = summarize_income_for_month(incomes, "2025-07", now=NOW)
    salary = next(src for src in later.sources if src.id == "salary")
    assert salary.gross_amount == 6000.0
    assert salary.status == "Employment (Promotion)"

    past = summarize_income_for_month(incomes, "2024-06", now=NOW)
    salary = next(src for src in past.sources if src.id == "salary")
    assert salary.gross_amount == 4500.0
    assert salary.amount_source == "historical"
    assert salary.status.endswith("(recorded)")



def test_smoothed_yearly_salary_is_capped_at_the_monthly_ceiling(make_item):
    salary = make_item(
        "annual", amount=120000.0, frequency="yearly", start_date="2024-01-01", subject_to_contribution=True,
    )
    s = summarize_income_for_month([salary], "2025-06", now=NOW)
    (src,) = s.sources
    assert src.gross_amount == pytest.approx(10000.0)
    assert src.employee_share == pytest.approx(1600.0)
    assert src.monthly_amount == pytest.approx(8400.0)
    assert round_money(sum(src.sub_account_shares.values())) == round_money(src.employee_share + src.employer_share)

def test_income_summary_dataframe(incomes):
    df = summarize_income_for_month(incomes, "2025-02", now=NOW).to_dataframe()
    assert list(df["name"]) == ["salary", "bonus"]
    assert "ordinary_account" in df.columns


def test_expense_breakdown(make_item):
    expenses = [
        make_item("rent", "expense", 2000.0, category="Housing"),
        make_item("power", "expense", 100.0, category="Housing"),
        make_item("insurance", "expense", 1200.0, "yearly", category="Insurance"),
        make_item("gym", "expense", 600.0, "custom", custom_months=[1, 7], category="Health"),
        make_item("trip", "expense", 5000.0, "one-time", start_date="2025-05-01", category="Travel"),
        make_item("old", "expense", 999.0, category="Housing", is_active=False),
    ]
    b = expense_breakdown(expenses)
    assert b.total_monthly == pytest.approx(2300.0)
    assert b.item_count == 5
    assert list(b.categories["category"]) == ["Housing", "Health", "Insurance", "Travel"]
    housing = b.categories.iloc[0]
    assert housing["count"] == 2
    assert housing["avg_per_item"] == pytest.approx(1050.0)
    assert housing["percentage"] == pytest.approx(2100.0 / 2300.0 * 100.0)
    assert len(b.top(2)) == 2


def test_expense_breakdown_empty():
    b = expense_breakdown([])
    assert b.total_monthly == 0.0
    assert b.categories.empty
