from datetime import date

import pytest

from core.utils import parse_month
from engine.overrides import contribution_for, is_historical_month, net_amount, resolve_gross_amount

HISTORY = [
    {"period": "2024-06", "granularity": "monthly", "amount": 4500.0},
    {"period": "2024", "granularity": "yearly", "amount": 54000.0},
]
MILESTONES = [
    {"targetMonth": "2025-06", "amount": 6000.0, "reason": "Promotion"},
    {"target_month": "2025-03", "amount": 5500.0},
]


def resolve(item, month, now=date(2025, 1, 15), **kw):
    return resolve_gross_amount(item, parse_month(month), now=now, **kw)


def test_historical_month_boundary():
    now = date(2025, 1, 15)
    assert is_historical_month(parse_month("2024-12"), now)
    assert not is_historical_month(parse_month("2025-01"), now)


def test_monthly_entry_wins_over_yearly(make_item):
    item = make_item(amount=5000.0, historical_overrides=HISTORY)
    r = resolve(item, "2024-06")
    assert (r.gross, r.source, r.already_monthly) == (4500.0, "historical", True)
    assert resolve(item, "2024-07").gross == pytest.approx(4500.0)  # 54000 / 12


def test_history_ignored_for_current_and_future_months(make_item):
    item = make_item(amount=5000.0, historical_overrides=HISTORY)
    assert resolve(item, "2025-01").source == "base"
    assert resolve(item, "2024-06", use_history=False).gross == 5000.0


def test_latest_milestone_applies(make_item):
    item = make_item(amount=5000.0, future_milestones=MILESTONES, honor_future_milestones=True)
    assert resolve(item, "2025-02").source == "base"
    assert resolve(item, "2025-04").gross == 5500.0
    late = resolve(item, "2025-07")
    assert (late.gross, late.source, late.reason) == (6000.0, "milestone", "Promotion")


def test_milestones_need_the_honor_flag(make_item):
    item = make_item(amount=5000.0, future_milestones=MILESTONES)
    assert resolve(item, "2025-07").gross == 5000.0
    assert not item.milestones_supersede_end_date


def test_snapshot_used_only_for_base_amount(make_item):
    item = make_item(
        amount=5000.0,
        subject_to_contribution=True,
        contribution_snapshot={"employee_share": 900.0, "employer_share": 850.0, "net_take_home": 4100.0},
        future_milestones=MILESTONES,
        honor_future_milestones=True,
    )
    base = resolve(item, "2025-02")
    assert net_amount(item, base, age=30) == 4100.0

    raised = resolve(item, "2025-04")
    breakdown = contribution_for(item, raised, age=30)
    assert breakdown.net_take_home == pytest.approx(4400.0)


def test_not_subject_means_gross_is_net(make_item):
    item = make_item(amount=5000.0)
    r = resolve(item, "2025-02")
    assert contribution_for(item, r, age=30) is None
    assert net_amount(item, r, age=30) == 5000.0
