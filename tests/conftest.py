import os
import sys
from datetime import date

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.schema import Ledger, RecurringItem  # noqa: E402

NOW = date(2025, 1, 15)


def _make_item(id="item", kind="income", amount=0.0, frequency="monthly", **kwargs):
    return RecurringItem(
        id=id,
        name=kwargs.pop("name", id),
        kind=kind,
        gross_amount=amount,
        frequency=frequency,
        **kwargs,
    )


@pytest.fixture
def make_item():
    return _make_item


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def simple_ledger():
    """$10,000 holdings, $5,000/month income, $3,000/month expense."""
    return Ledger(
        incomes=[_make_item("salary", "income", 5000.0)],
        expenses=[_make_item("rent", "expense", 3000.0)],
        starting_holdings=10000.0,
        holdings_count=1,
    )
