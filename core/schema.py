"""
Typed input schema — records, ledger snapshot, and projection requests.

These models are validated once, at the repository / request boundary.
Field names are snake_case; every model also accepts the camelCase keys
used by the conversational tool layer (``fromMonth``, ``grossAmount``...).
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from .errors import DataIntegrityWarning
from .utils import is_month_string


class Frequency(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"
    WEEKLY = "weekly"
    BIWEEKLY = "bi-weekly"
    QUARTERLY = "quarterly"
    SEMI_YEARLY = "semi-yearly"
    CUSTOM = "custom"
    ONE_TIME = "one-time"


_FREQUENCY_ALIASES: Dict[str, str] = {
    "biweekly": "bi-weekly",
    "bi_weekly": "bi-weekly",
    "fortnightly": "bi-weekly",
    "annual": "yearly",
    "annually": "yearly",
    "semiyearly": "semi-yearly",
    "semi_yearly": "semi-yearly",
    "half-yearly": "semi-yearly",
    "onetime": "one-time",
    "one_time": "one-time",
    "once": "one-time",
}


def normalize_frequency(value: object) -> object:
    if isinstance(value, str):
        v = value.strip().lower()
        return _FREQUENCY_ALIASES.get(v, v)
    return value


def _check_month(value: str) -> str:
    if not is_month_string(value):
        raise ValueError(f"{value!r} is not a YYYY-MM month")
    return value


MonthStr = Annotated[str, AfterValidator(_check_month)]
FrequencyField = Annotated[Frequency, BeforeValidator(normalize_frequency)]


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class HistoricalOverride(_Model):
    """Recorded gross income for a past month ("2024-03") or year ("2024")."""
    period: str
    granularity: Literal["yearly", "monthly"]
    amount: float

    @model_validator(mode="after")
    def _period_matches_granularity(self) -> "HistoricalOverride":
        if self.granularity == "monthly" and not is_month_string(self.period):
            raise ValueError(f"monthly override period {self.period!r} must be YYYY-MM")
        if self.granularity == "yearly" and not (len(self.period) == 4 and self.period.isdigit()):
            raise ValueError(f"yearly override period {self.period!r} must be YYYY")
        return self


class FutureMilestone(_Model):
    """Scheduled change to an income's gross amount, effective from target_month onward."""
    target_month: MonthStr
    amount: float
    reason: Optional[str] = None


class BonusGroup(_Model):
    """A bonus paid in a calendar month, as a multiple of the base gross amount."""
    month: int = Field(ge=1, le=12)
    multiplier: float = Field(ge=0)


class ContributionSnapshot(_Model):
    """Contribution figures computed for the base amount when the record was saved."""
    employee_share: float = 0.0
    employer_share: float = 0.0
    net_take_home: float
    sub_account_shares: Dict[str, float] = Field(default_factory=dict)


class RecurringItem(_Model):
    id: str
    owner_id: str = ""
    name: str = ""
    kind: Literal["income", "expense"]
    category: Optional[str] = None
    gross_amount: float = Field(ge=0)
    frequency: FrequencyField
    custom_months: Optional[List[int]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True

    # income only
    subject_to_contribution: bool = False
    historical_overrides: List[HistoricalOverride] = Field(default_factory=list)
    future_milestones: List[FutureMilestone] = Field(default_factory=list)
    honor_future_milestones: bool = False
    bonus_groups: List[BonusGroup] = Field(default_factory=list)
    account_for_bonus: bool = False
    contribution_snapshot: Optional[ContributionSnapshot] = None

    @field_validator("custom_months")
    @classmethod
    def _custom_months_in_range(cls, v: Optional[List[int]]) -> Optional[List[int]]:
        if v is None:
            return v
        bad = [m for m in v if not 1 <= m <= 12]
        if bad:
            raise ValueError(f"custom months out of range 1-12: {bad}")
        return sorted(set(v))

    @property
    def milestones_supersede_end_date(self) -> bool:
        return self.honor_future_milestones and len(self.future_milestones) > 0


class Ledger(_Model):
    """Read-only snapshot of one owner's records and liquid holdings."""
    incomes: List[RecurringItem] = Field(default_factory=list)
    expenses: List[RecurringItem] = Field(default_factory=list)
    starting_holdings: float = 0.0
    holdings_count: Optional[int] = None
    owner_age: Optional[int] = Field(default=None, ge=0)
    integrity_warnings: List[DataIntegrityWarning] = Field(default_factory=list)


class HypotheticalEvent(_Model):
    """A what-if one-off income or expense applied to a single month."""
    type: Literal["income", "expense"]
    amount: float = Field(gt=0)
    month: MonthStr
    label: Optional[str] = None


class ProjectionRequest(_Model):
    from_month: MonthStr
    to_month: MonthStr
    hypotheticals: List[HypotheticalEvent] = Field(default_factory=list)
    min_end_balance: Optional[float] = None
    min_monthly_balance: Optional[float] = None
    compute_max_affordable_expense_month: Optional[MonthStr] = None
    find_safe_month_for_expense: Optional[float] = Field(default=None, gt=0)

    # legacy single-event shape; folded into ``hypotheticals`` before use
    hypothetical_expense: Optional[float] = Field(default=None, gt=0)
    hypothetical_expense_month: Optional[MonthStr] = None
    hypothetical_income: Optional[float] = Field(default=None, gt=0)
    hypothetical_income_month: Optional[MonthStr] = None
