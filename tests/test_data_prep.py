import json

import pandas as pd
import pytest

from core.errors import ValidationError
from core.schema import Ledger
from data_prep import (
    FileRecordRepository,
    coerce_ledger,
    coerce_request,
    load_ledger_from_files,
    load_records_table,
    validate_ledger,
    validate_records_table,
)


@pytest.fixture
def export_dir(tmp_path):
    pd.DataFrame([
        {"id": "1", "userId": "u1", "name": "Salary", "amount": 5000, "frequency": "monthly",
         "futureMilestones": json.dumps([{"targetMonth": "2025-06", "amount": 6000}])},
        {"id": "2", "userId": "u2", "name": "Other", "amount": 9999, "frequency": "monthly",
         "futureMilestones": None},
    ]).to_csv(tmp_path / "incomes.csv", index=False)
    pd.DataFrame([
        {"id": "3", "userId": "u1", "name": "Rent", "amount": 3000, "frequency": "monthly", "customMonths": None},
        {"id": "4", "userId": "u1", "name": "Fees", "amount": 100, "frequency": "custom", "customMonths": "[3, 9]"},
    ]).to_csv(tmp_path / "expenses.csv", index=False)
    pd.DataFrame([
        {"userId": "u1", "holdingAmount": 10000},
        {"userId": "u2", "holdingAmount": 1},
    ]).to_csv(tmp_path / "holdings.csv", index=False)
    return tmp_path


def test_load_records_table_by_suffix(tmp_path):
    pd.DataFrame([{"id": "1", "amount": 1, "frequency": "monthly"}]).to_json(tmp_path / "r.json", orient="records")
    assert list(load_records_table(tmp_path / "r.json")["frequency"]) == ["monthly"]
    with pytest.raises(ValueError):
        load_records_table(tmp_path / "r.parquet")


def test_load_ledger_filters_owner(export_dir):
    ledger = load_ledger_from_files(
        export_dir / "incomes.csv", export_dir / "expenses.csv", export_dir / "holdings.csv", owner_id="u1"
    )
    assert [i.name for i in ledger.incomes] == ["Salary"]
    assert ledger.incomes[0].future_milestones[0].amount == 6000
    assert [e.custom_months for e in ledger.expenses] == [None, [3, 9]]
    assert ledger.starting_holdings == 10000.0
    assert ledger.integrity_warnings == []


def test_file_repository(export_dir):
    repo = FileRecordRepository(export_dir, owner_ages={"u2": 50})
    ledger = repo.load_ledger("u2")
    assert ledger.owner_age == 50
    assert ledger.incomes[0].gross_amount == 9999.0
    assert ledger.expenses == []


def test_validate_records_table():
    table = pd.DataFrame([
        {"id": "1", "amount": 10, "frequency": "monthly"},
        {"id": "1", "amount": -5, "frequency": "fortnightly"},
        {"id": None, "amount": "x", "frequency": "hourly"},
    ])
    result = validate_records_table(table)
    assert not result.is_valid
    assert any("negative amount" in e for e in result.errors)
    assert any("null id" in e for e in result.errors)
    assert any("duplicate" in w for w in result.warnings)
    assert any("hourly" in w for w in result.warnings)
    assert "fortnightly" not in result.summary()

    missing = validate_records_table(pd.DataFrame({"id": []}))
    assert "Missing required columns" in missing.errors[0]


def test_validate_ledger_flags_semantic_problems(make_item):
    ledger = Ledger(
        incomes=[make_item("m", amount=1.0, future_milestones=[{"targetMonth": "2025-05", "amount": 2.0}])],
        expenses=[
            make_item("c", "expense", 1.0, "custom"),
            make_item("o", "expense", 1.0, "one-time"),
            make_item("w", "expense", 1.0, start_date="2025-05-01", end_date="2025-01-01"),
        ],
    )
    warnings = validate_ledger(ledger).warnings
    assert len(warnings) == 4
    assert validate_ledger(Ledger()).summary() == "✓ All checks passed."


def test_coerce_request_structured_errors():
    with pytest.raises(ValidationError) as exc:
        coerce_request({"fromMonth": "2025-13", "toMonth": "2025-03"})
    assert exc.value.errors
    assert exc.value.to_dict()["error"] == "ValidationError"


def test_coerce_ledger_skips_bad_records_with_warnings(make_item):
    ledger = coerce_ledger({
        "incomes": [make_item("kept"), {"id": "s", "grossAmount": 5000, "frequency": "monthly"}],
        "expenses": [
            {"id": "rent", "amount": 3000, "frequency": "monthly"},
            {"id": "nan-amount", "amount": "n/a", "frequency": "monthly"},
            {"id": "no-amount", "frequency": "monthly"},
            "not a record",
        ],
        "startingHoldings": 500,
    })
    assert [i.id for i in ledger.incomes] == ["kept", "s"]
    assert [e.kind for e in ledger.expenses] == ["expense"]
    assert ledger.starting_holdings == 500.0
    skipped = {w.record_id for w in ledger.integrity_warnings}
    assert skipped == {"nan-amount", "no-amount", "expense[3]"}


def test_coerce_ledger_rejects_bad_ledger_fields():
    with pytest.raises(ValidationError) as exc:
        coerce_ledger({"incomes": [], "ownerAge": -1})
    assert "age" in exc.value.errors[0]["field"].lower()
    with pytest.raises(ValidationError):
        coerce_ledger(["not", "a", "ledger"])
