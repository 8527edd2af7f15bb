"""
Build typed records from raw repository rows.

Raw rows come from the record store with serialized side-channel fields
(override history, milestones, custom months, bonus groups stored as JSON
text) and loosely typed scalars. Every such field is parsed here, once:

  - a field that fails to parse is treated as ABSENT and reported as a
    DataIntegrityWarning; the rest of the record is kept
  - a record whose core fields (id, amount, frequency) cannot be read is
    skipped with a warning, so one corrupt row never aborts a projection
"""

from __future__ import annotations

import json
import logging
import math
import re
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from dateutil import parser as date_parser
from pydantic import ValidationError as PydanticValidationError

from core.errors import DataIntegrityWarning
from core.schema import (
    BonusGroup,
    ContributionSnapshot,
    FutureMilestone,
    HistoricalOverride,
    Ledger,
    RecurringItem,
)

logger = logging.getLogger(__name__)

# Record-store column names → RecurringItem fields
_FIELD_ALIASES: Dict[str, str] = {
    "userId": "owner_id",
    "user_id": "owner_id",
    "amount": "gross_amount",
    "grossAmount": "gross_amount",
    "subjectToCpf": "subject_to_contribution",
    "subject_to_cpf": "subject_to_contribution",
    "pastIncomeHistory": "historical_overrides",
    "past_income_history": "historical_overrides",
    "accountForFutureChange": "honor_future_milestones",
    "account_for_future_change": "honor_future_milestones",
    "incomeCategory": "category",
    "expenseCategory": "category",
    "employeeCpfContribution": "employee_share",
    "employerCpfContribution": "employer_share",
    "netTakeHome": "net_take_home",
    "cpfOrdinaryAccount": "ordinary_account",
    "cpfSpecialAccount": "special_account",
    "cpfMedisaveAccount": "medisave_account",
}

_SNAPSHOT_KEYS = ("employee_share", "employer_share", "net_take_home")
_ACCOUNT_KEYS = {"ordinary_account": "ordinary", "special_account": "special", "medisave_account": "medisave"}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")

# missing date parts ("2025", "2025-06") fill from here, never from today
_DATE_DEFAULT = datetime(2000, 1, 1)


def _canonical_key(key: str) -> str:
    if key in _FIELD_ALIASES:
        return _FIELD_ALIASES[key]
    return _CAMEL_RE.sub("_", key).lower()


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def canonicalize_row(row: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalize key names and drop missing values (None / NaN / blank)."""
    out: Dict[str, Any] = {}
    for key, value in row.items():
        if _is_missing(value):
            continue
        out.setdefault(_canonical_key(str(key)), value)
    return out


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "t", "yes", "y", "1")
    return bool(value)


def _to_float(value: Any) -> float:
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    return float(value)


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date_parser.parse(str(value), default=_DATE_DEFAULT).date()


def _load_json(value: Any) -> Any:
    return json.loads(value) if isinstance(value, (str, bytes)) else value


class _RowParser:
    """Accumulates warnings while parsing one row."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        self.warnings: List[DataIntegrityWarning] = []

    def warn(self, field_name: str, reason: str, raw: Any = None) -> None:
        w = DataIntegrityWarning(
            record_id=self.record_id,
            field_name=field_name,
            reason=reason,
            raw=None if raw is None else str(raw)[:200],
        )
        logger.warning(w.message())
        self.warnings.append(w)

    def custom_months(self, raw: Any) -> Optional[List[int]]:
        try:
            months = [int(m) for m in _load_json(raw)]
        except (TypeError, ValueError) as exc:
            self.warn("custom_months", f"unparseable: {exc}", raw)
            return None
        bad = [m for m in months if not 1 <= m <= 12]
        if bad:
            self.warn("custom_months", f"months out of range 1-12: {bad}", raw)
            return None
        return months

    def model_list(self, field_name: str, raw: Any, model, rename: Optional[Dict[str, str]] = None):
        try:
            entries = _load_json(raw)
            if not isinstance(entries, list):
                raise ValueError("expected a list")
            out = []
            for entry in entries:
                if rename:
                    entry = {rename.get(k, k): v for k, v in entry.items()}
                out.append(model.model_validate(entry))
            return out
        except (TypeError, ValueError, AttributeError) as exc:
            # pydantic's ValidationError is a ValueError subclass
            self.warn(field_name, f"unparseable: {exc}".splitlines()[0], raw)
            return []

    def date(self, field_name: str, raw: Any) -> Optional[date]:
        try:
            return _to_date(raw)
        except (TypeError, ValueError, OverflowError) as exc:
            self.warn(field_name, f"unparseable date: {exc}", raw)
            return None

    def snapshot(self, row: Mapping[str, Any]) -> Optional[ContributionSnapshot]:
        if "net_take_home" not in row:
            return None
        try:
            values = {k: _to_float(row[k]) for k in _SNAPSHOT_KEYS if k in row}
            accounts = {name: _to_float(row[k]) for k, name in _ACCOUNT_KEYS.items() if k in row}
        except (TypeError, ValueError) as exc:
            self.warn("contribution_snapshot", f"unparseable: {exc}")
            return None
        return ContributionSnapshot(sub_account_shares=accounts, **values)


def build_recurring_item(
    row: Mapping[str, Any],
    *,
    kind: Optional[str] = None,
) -> Tuple[Optional[RecurringItem], List[DataIntegrityWarning]]:
    """
    Parse one raw row into a RecurringItem.

    Returns (item, warnings); item is None when the row had to be skipped.
    """
    clean = canonicalize_row(row)
    record_id = str(clean.get("id", "<no id>"))
    p = _RowParser(record_id)

    if kind is not None:
        clean["kind"] = kind

    if "gross_amount" in clean:
        try:
            clean["gross_amount"] = _to_float(clean["gross_amount"])
        except (TypeError, ValueError):
            p.warn("gross_amount", "not a number; record skipped", clean["gross_amount"])
            return None, p.warnings

    for key in ("is_active", "subject_to_contribution", "honor_future_milestones", "account_for_bonus"):
        if key in clean:
            clean[key] = _to_bool(clean[key])

    for key in ("start_date", "end_date"):
        if key in clean:
            parsed = p.date(key, clean.pop(key))
            if parsed is not None:
                clean[key] = parsed

    if "custom_months" in clean:
        months = p.custom_months(clean.pop("custom_months"))
        if months is not None:
            clean["custom_months"] = months

    if "historical_overrides" in clean:
        clean["historical_overrides"] = p.model_list(
            "historical_overrides", clean["historical_overrides"], HistoricalOverride
        )
    if "future_milestones" in clean:
        clean["future_milestones"] = p.model_list(
            "future_milestones", clean["future_milestones"], FutureMilestone
        )
    if "bonus_groups" in clean:
        clean["bonus_groups"] = p.model_list(
            "bonus_groups", clean["bonus_groups"], BonusGroup, rename={"amount": "multiplier"}
        )

    snapshot = p.snapshot(clean)
    if snapshot is not None:
        clean["contribution_snapshot"] = snapshot
    for key in (*_SNAPSHOT_KEYS, *_ACCOUNT_KEYS):
        clean.pop(key, None)

    for key in ("id", "owner_id", "name", "category"):
        if key in clean:
            clean[key] = str(clean[key])

    fields = set(RecurringItem.model_fields)
    unknown = sorted(set(clean) - fields)
    for key in unknown:
        clean.pop(key)

    try:
        item = RecurringItem.model_validate(clean)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        where = ".".join(str(x) for x in first.get("loc", ())) or "record"
        p.warn(where, f"{first.get('msg', 'invalid')}; record skipped")
        return None, p.warnings

    return item, p.warnings


def _holding_amount(holding: Any) -> float:
    if isinstance(holding, Mapping):
        for key in ("holding_amount", "holdingAmount", "amount"):
            if key in holding and not _is_missing(holding[key]):
                return _to_float(holding[key])
        return 0.0
    return _to_float(holding)


def build_ledger(
    income_rows: Iterable[Mapping[str, Any]],
    expense_rows: Iterable[Mapping[str, Any]],
    holdings: Iterable[Any] = (),
    *,
    owner_age: Optional[int] = None,
) -> Ledger:
    """Assemble a Ledger snapshot, collecting every integrity warning on the way."""
    warnings: List[DataIntegrityWarning] = []
    incomes: List[RecurringItem] = []
    expenses: List[RecurringItem] = []

    for rows, kind, bucket in ((income_rows, "income", incomes), (expense_rows, "expense", expenses)):
        for row in rows:
            item, row_warnings = build_recurring_item(row, kind=kind)
            warnings.extend(row_warnings)
            if item is not None:
                bucket.append(item)

    holdings = list(holdings)
    total = 0.0
    for i, h in enumerate(holdings):
        try:
            total += _holding_amount(h)
        except (TypeError, ValueError):
            w = DataIntegrityWarning(
                record_id=f"holding[{i}]",
                field_name="holding_amount",
                reason="not a number",
                raw=str(h),
            )
            logger.warning(w.message())
            warnings.append(w)

    return Ledger(
        incomes=incomes,
        expenses=expenses,
        starting_holdings=total,
        holdings_count=len(holdings),
        owner_age=owner_age,
        integrity_warnings=warnings,
    )
