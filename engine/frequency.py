"""
Frequency normalization — how much of one recurring record lands in one month.

Two allocation styles:
  allocate_to_month()   calendar-exact: periodic items pay their full amount in
                        the months they actually fall due (used by the projector)
  spread_to_month()     smoothed: periodic items contribute their monthly
                        equivalent every month (used by the single-month summary)

Weekly and bi-weekly items are always converted with the average-weeks factors
(4.33 / 2.17) since they fall due in every month.
"""

from __future__ import annotations

from typing import Iterable, Optional

import pandas as pd

from core.config import ProjectionConfig
from core.schema import Frequency, RecurringItem

_DEFAULT_CONFIG = ProjectionConfig()


def _period(d) -> Optional[pd.Period]:
    return None if d is None else pd.Timestamp(d).to_period("M")


def is_active_in_month(
    item: RecurringItem,
    month: pd.Period,
    *,
    ignore_end_date: bool = False,
) -> bool:
    """Whether the item's start/end window covers any part of ``month``."""
    if not item.is_active:
        return False
    start = _period(item.start_date)
    if start is not None and start > month:
        return False
    end = _period(item.end_date)
    if not ignore_end_date and end is not None and end < month:
        return False
    return True


def _falls_on_cycle(item: RecurringItem, month: pd.Period, every: int) -> bool:
    start = _period(item.start_date)
    if start is None:
        return False
    since = (month - start).n
    return since >= 0 and since % every == 0


def _in_custom_months(custom_months: Optional[Iterable[int]], month: pd.Period) -> bool:
    return custom_months is not None and month.month in set(custom_months)


def allocate_to_month(
    item: RecurringItem,
    amount: float,
    month: pd.Period,
    *,
    config: ProjectionConfig = _DEFAULT_CONFIG,
    ignore_end_date: bool = False,
) -> float:
    """
    Monthly contribution of ``amount`` (the item's per-occurrence amount) to ``month``.

    Parameters
    ----------
    item : RecurringItem
        Record supplying frequency, schedule and start/end window
    amount : float
        Effective per-occurrence amount (after overrides / net conversion)
    month : pd.Period
        Target month (freq "M")
    config : ProjectionConfig
        Supplies the weekly factors and the yearly allocation style
    ignore_end_date : bool
        Treat the end date as absent (an honored milestone schedule supersedes it)
    """
    freq = item.frequency

    # one-time items are pinned to their start month and ignore the end date entirely
    if freq == Frequency.ONE_TIME:
        if not item.is_active:
            return 0.0
        start = _period(item.start_date)
        return float(amount) if start is not None and start == month else 0.0

    if not is_active_in_month(item, month, ignore_end_date=ignore_end_date):
        return 0.0

    if freq == Frequency.MONTHLY:
        return float(amount)
    if freq == Frequency.WEEKLY:
        return float(amount) * config.weekly_factor
    if freq == Frequency.BIWEEKLY:
        return float(amount) * config.biweekly_factor
    if freq == Frequency.YEARLY:
        if config.yearly_allocation == "spread":
            return float(amount) / 12.0
        start = _period(item.start_date)
        anniversary = start.month if start is not None else 1
        return float(amount) if month.month == anniversary else 0.0
    if freq == Frequency.QUARTERLY:
        return float(amount) if _falls_on_cycle(item, month, 3) else 0.0
    if freq == Frequency.SEMI_YEARLY:
        return float(amount) if _falls_on_cycle(item, month, 6) else 0.0
    if freq == Frequency.CUSTOM:
        return float(amount) if _in_custom_months(item.custom_months, month) else 0.0
    return 0.0


def monthly_equivalent(
    amount: float,
    frequency: Frequency,
    custom_months: Optional[Iterable[int]] = None,
    *,
    config: ProjectionConfig = _DEFAULT_CONFIG,
) -> float:
    """Average monthly cost/income of a recurring amount; one-time items count as 0."""
    amount = float(amount)
    if frequency == Frequency.MONTHLY:
        return amount
    if frequency == Frequency.WEEKLY:
        return amount * config.weekly_factor
    if frequency == Frequency.BIWEEKLY:
        return amount * config.biweekly_factor
    if frequency == Frequency.YEARLY:
        return amount / 12.0
    if frequency == Frequency.QUARTERLY:
        return amount / 3.0
    if frequency == Frequency.SEMI_YEARLY:
        return amount / 6.0
    if frequency == Frequency.CUSTOM:
        if not custom_months:
            return 0.0
        return amount * len(set(custom_months)) / 12.0
    return 0.0


def spread_to_month(
    item: RecurringItem,
    amount: float,
    month: pd.Period,
    *,
    config: ProjectionConfig = _DEFAULT_CONFIG,
    ignore_end_date: bool = False,
) -> float:
    """Smoothed allocation: periodic items contribute their monthly equivalent."""
    if item.frequency in (Frequency.ONE_TIME, Frequency.CUSTOM):
        return allocate_to_month(
            item, amount, month, config=config, ignore_end_date=ignore_end_date
        )
    if not is_active_in_month(item, month, ignore_end_date=ignore_end_date):
        return 0.0
    return monthly_equivalent(amount, item.frequency, config=config)
