import pytest

from contributions import compute_bonus_contribution, compute_contribution, get_policy
from contributions.policy import CPF_2025
from core.utils import round_money


def test_standard_rates_under_55():
    b = compute_contribution(5000.0, 30)
    assert b.employee_share == pytest.approx(1000.0)
    assert b.employer_share == pytest.approx(850.0)
    assert b.net_take_home == pytest.approx(4000.0)
    assert b.total_contribution == pytest.approx(1850.0)
    assert round_money(sum(b.sub_account_shares.values())) == 1850.0


def test_ordinary_wage_ceiling_caps_the_base():
    b = compute_contribution(10000.0, 30)
    assert b.applicable_amount == 8000.0
    assert b.employee_share == pytest.approx(1600.0)
    assert b.net_take_home == pytest.approx(8400.0)


@pytest.mark.parametrize("age, employee", [(55, 1000.0), (58, 850.0), (63, 575.0), (70, 375.0), (75, 250.0)])
def test_age_bands(age, employee):
    assert compute_contribution(5000.0, age).employee_share == pytest.approx(employee)


def test_allocation_band_follows_age():
    young = compute_contribution(5000.0, 30).sub_account_shares
    older = compute_contribution(5000.0, 62).sub_account_shares
    assert young["ordinary"] > young["medisave"]
    assert older["medisave"] > older["ordinary"]


def test_bonus_limited_by_annual_ceiling():
    b = compute_bonus_contribution(8000.0, 10000.0, 30)
    assert b.annual_ordinary_base == 96000.0
    assert b.remaining_annual_ceiling == 6000.0
    assert b.applicable_amount == 6000.0
    assert b.employee_share == pytest.approx(1200.0)
    assert b.net_bonus == pytest.approx(8800.0)


def test_bonus_below_ceiling_fully_contributory():
    b = compute_bonus_contribution(5000.0, 10000.0, 30)
    assert b.applicable_amount == 10000.0
    assert b.net_bonus == pytest.approx(8000.0)


def test_policy_lookup():
    assert get_policy() is CPF_2025
    assert get_policy("2025") is CPF_2025
    with pytest.raises(ValueError):
        get_policy("1999")


@pytest.mark.parametrize("gross, age", [(5000.0, 30), (5000.0, 62), (3333.33, 40), (7777.77, 50), (10000.0, 70)])
def test_sub_accounts_add_up_to_the_total_contribution(gross, age):
    b = compute_contribution(gross, age)
    assert set(b.sub_account_shares) == {"ordinary", "special", "medisave"}
    assert round_money(sum(b.sub_account_shares.values())) == b.total_contribution


def test_bonus_sub_accounts_add_up_to_the_total():
    b = compute_bonus_contribution(5000.0, 4321.09, 33)
    assert round_money(sum(b.sub_account_shares.values())) == round_money(b.employee_share + b.employer_share)
