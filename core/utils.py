from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Union

import numpy as np
import pandas as pd

from .errors import ValidationError

MonthLike = Union[str, date, datetime, pd.Timestamp, pd.Period]

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def excel_round(x, decimals: int = 2):
    """Excel ROUND: half away from zero (vectorized)."""
    m = 10 ** decimals
    x = np.asarray(x, dtype=float)
    return np.sign(x) * (np.floor(np.abs(x) * m + 0.5) / m)


def round_money(x: float, decimals: int = 2) -> float:
    return float(excel_round(x, decimals))


def is_month_string(value: str) -> bool:
    m = _MONTH_RE.match(value)
    return bool(m) and 1 <= int(m.group(2)) <= 12


def parse_month(value: MonthLike) -> pd.Period:
    """Coerce a "YYYY-MM" string (or any date-like) to a monthly Period."""
    if isinstance(value, pd.Period):
        return value.asfreq("M")
    if isinstance(value, str):
        if not is_month_string(value):
            raise ValidationError(
                f"Invalid month {value!r}; expected YYYY-MM.",
                [{"field": "month", "message": f"{value!r} is not a YYYY-MM month"}],
            )
        return pd.Period(value, freq="M")
    return pd.Timestamp(value).to_period("M")


def month_key(period: pd.Period) -> str:
    return period.strftime("%Y-%m")


def month_label(month: MonthLike) -> str:
    """Display label, e.g. "2025-02" -> "Feb 2025"."""
    return parse_month(month).strftime("%b %Y")


def month_range(from_month: MonthLike, to_month: MonthLike) -> List[pd.Period]:
    """Inclusive, chronological list of monthly periods."""
    return list(pd.period_range(parse_month(from_month), parse_month(to_month), freq="M"))

