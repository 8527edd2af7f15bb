import json
import logging
import math
from datetime import date

from core.schema import Frequency
from data_prep.record_builder import build_ledger, build_recurring_item, canonicalize_row

SALARY_ROW = {
    "id": 17,
    "userId": "user-1",
    "name": "Salary",
    "amount": "5,000.00",
    "frequency": "monthly",
    "startDate": "2023-04-01T00:00:00.000Z",
    "endDate": None,
    "isActive": "true",
    "subjectToCpf": True,
    "netTakeHome": 4000.0,
    "employeeCpfContribution": 1000.0,
    "employerCpfContribution": 850.0,
    "cpfOrdinaryAccount": 1150.15,
    "cpfSpecialAccount": 300.07,
    "cpfMedisaveAccount": 399.97,
    "pastIncomeHistory": json.dumps([{"period": "2024", "granularity": "yearly", "amount": 54000}]),
    "futureMilestones": json.dumps([{"targetMonth": "2025-07", "amount": 5500, "reason": "Raise"}]),
    "accountForFutureChange": 1,
    "bonusGroups": json.dumps([{"month": 12, "amount": "1.5"}]),
    "accountForBonus": "yes",
    "incomeCategory": "Employment",
}


def test_canonicalize_row_maps_store_columns():
    row = canonicalize_row({"userId": "u", "customMonths": "[1]", "blank": " ", "nan": math.nan})
    assert row == {"owner_id": "u", "custom_months": "[1]"}


def test_full_income_row():
    item, warnings = build_recurring_item(SALARY_ROW, kind="income")
    assert warnings == []
    assert item.id == "17"
    assert item.gross_amount == 5000.0
    assert item.start_date.isoformat() == "2023-04-01"
    assert item.is_active and item.subject_to_contribution
    assert item.historical_overrides[0].amount == 54000
    assert item.future_milestones[0].reason == "Raise"
    assert item.honor_future_milestones
    assert item.bonus_groups[0].multiplier == 1.5
    assert item.account_for_bonus
    assert item.category == "Employment"
    assert item.contribution_snapshot.net_take_home == 4000.0
    assert item.contribution_snapshot.sub_account_shares["medisave"] == 399.97


def test_malformed_side_channel_field_is_dropped_with_warning(caplog):
    row = {"id": "e1", "amount": 400, "frequency": "custom", "customMonths": "[3, 6"}
    with caplog.at_level(logging.WARNING):
        item, warnings = build_recurring_item(row, kind="expense")
    assert item is not None
    assert item.frequency == Frequency.CUSTOM
    assert item.custom_months is None
    assert [w.field_name for w in warnings] == ["custom_months"]
    assert "e1" in caplog.text


def test_out_of_range_custom_months_are_dropped():
    item, warnings = build_recurring_item({"id": "e2", "amount": 1, "frequency": "custom", "customMonths": [0, 13]}, kind="expense")
    assert item.custom_months is None
    assert "out of range" in warnings[0].reason


def test_bad_milestone_list_treated_as_absent():
    row = {"id": "s", "amount": 1, "frequency": "monthly", "futureMilestones": '[{"targetMonth": "July", "amount": 1}]'}
    item, warnings = build_recurring_item(row, kind="income")
    assert item.future_milestones == []
    assert warnings[0].field_name == "future_milestones"


def test_unparseable_core_fields_skip_the_record():
    item, warnings = build_recurring_item({"id": "x", "amount": "lots", "frequency": "monthly"}, kind="expense")
    assert item is None and warnings[0].field_name == "gross_amount"

    item, warnings = build_recurring_item({"id": "y", "amount": 5, "frequency": "daily"}, kind="expense")
    assert item is None and warnings[0].field_name == "frequency"


def test_unparseable_date_is_dropped():
    item, warnings = build_recurring_item({"id": "d", "amount": 5, "frequency": "monthly", "endDate": "not a date"}, kind="expense")
    assert item.end_date is None
    assert warnings[0].field_name == "end_date"


def test_build_ledger_collects_warnings_and_holdings():
    ledger = build_ledger(
        [SALARY_ROW],
        [
            {"id": "rent", "amount": 2000, "frequency": "monthly"},
            {"id": "bad", "amount": "?", "frequency": "monthly"},
        ],
        [{"holdingAmount": 6000}, {"amount": "4,000"}],
        owner_age=40,
    )
    assert [i.id for i in ledger.incomes] == ["17"]
    assert [e.id for e in ledger.expenses] == ["rent"]
    assert ledger.starting_holdings == 10000.0
    assert ledger.holdings_count == 2
    assert ledger.owner_age == 40
    assert len(ledger.integrity_warnings) == 1


def test_partial_dates_fill_from_a_fixed_default():
    row = {"id": "p", "amount": 5, "frequency": "yearly", "startDate": "2025", "endDate": "2026-06"}
    item, warnings = build_recurring_item(row, kind="expense")
    assert warnings == []
    assert item.start_date == date(2025, 1, 1)
    assert item.end_date == date(2026, 6, 1)
