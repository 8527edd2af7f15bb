"""
Data quality validation for record tables, ledgers, and requests.

Catches problems early:
- Missing critical columns, null or duplicate record ids
- Negative or unparseable amounts, unknown frequencies
- Custom-frequency records without months, inverted date windows
- Malformed projection requests (raised as core.errors.ValidationError)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from core.errors import DataIntegrityWarning, ValidationError
from core.schema import Frequency, Ledger, ProjectionRequest, RecurringItem, normalize_frequency

from .record_builder import build_recurring_item

logger = logging.getLogger(__name__)

RECORD_TABLE_COLUMNS = ("id", "amount", "frequency")

_KNOWN_FREQUENCIES = {f.value for f in Frequency}


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a record set."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_records_table(
    table: pd.DataFrame,
    *,
    columns: tuple = RECORD_TABLE_COLUMNS,
) -> ValidationResult:
    """
    Run table-level checks on raw income or expense rows.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Schema checks ---
    missing = [c for c in columns if c not in table.columns]
    if missing:
        result.errors.append(f"Missing required columns: {missing}")
        return result

    if len(table) == 0:
        result.warnings.append("Record table is empty (0 rows).")
        return result

    # --- Record ID ---
    if table["id"].isna().any():
        result.errors.append(f"{int(table['id'].isna().sum())} rows have null id.")

    n_dup = int(table["id"].dropna().duplicated().sum())
    if n_dup > 0:
        result.warnings.append(f"{n_dup} duplicate record ids found.")

    # --- Amounts ---
    amounts = pd.to_numeric(table["amount"], errors="coerce")
    n_null = int(amounts.isna().sum())
    n_neg = int((amounts < 0).sum())
    if n_null > 0:
        result.warnings.append(f"{n_null} rows have null/unparseable amount (they will be skipped).")
    if n_neg > 0:
        result.errors.append(f"{n_neg} rows have negative amount.")

    # --- Frequency ---
    freqs = table["frequency"].map(normalize_frequency)
    unknown = sorted({str(f) for f in freqs.dropna() if f not in _KNOWN_FREQUENCIES})
    if unknown:
        result.warnings.append(f"Unknown frequencies (rows will be skipped): {unknown}")

    # --- Dates ---
    for dcol in ["startDate", "endDate"]:
        if dcol in table.columns:
            raw = table[dcol].dropna()
            dts = pd.to_datetime(raw, errors="coerce")
            n_bad = int(dts.isna().sum())
            if n_bad > 0:
                result.warnings.append(f"{n_bad} rows have unparseable {dcol}.")

    return result


def validate_ledger(ledger: Ledger) -> ValidationResult:
    """Semantic checks on an already-typed ledger. Nothing here is fatal."""
    result = ValidationResult()

    for item in [*ledger.incomes, *ledger.expenses]:
        if item.frequency == Frequency.CUSTOM and not item.custom_months:
            result.warnings.append(
                f"Record {item.id}: custom frequency without months; it contributes nothing."
            )
        if item.frequency == Frequency.ONE_TIME and item.start_date is None:
            result.warnings.append(
                f"Record {item.id}: one-time record without a date; it contributes nothing."
            )
        if item.start_date and item.end_date and item.end_date < item.start_date:
            result.warnings.append(
                f"Record {item.id}: end date {item.end_date} is before start date {item.start_date}."
            )
        if item.future_milestones and not item.honor_future_milestones:
            result.warnings.append(
                f"Record {item.id}: has future milestones that are not enabled."
            )

    if ledger.starting_holdings < 0:
        result.warnings.append(
            f"Starting holdings are negative (${ledger.starting_holdings:,.2f})."
        )
    return result


def _structured_errors(exc: PydanticValidationError) -> List[Dict[str, str]]:
    return [
        {
            "field": ".".join(str(x) for x in err.get("loc", ())) or "request",
            "message": err.get("msg", "invalid value"),
        }
        for err in exc.errors()
    ]


def coerce_request(payload: Union[ProjectionRequest, Mapping[str, Any]]) -> ProjectionRequest:
    """Validate a request mapping (camelCase or snake_case keys)."""
    if isinstance(payload, ProjectionRequest):
        return payload
    try:
        return ProjectionRequest.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError("Invalid projection request.", _structured_errors(exc)) from exc


def _coerce_items(raw_items: Any, kind: str, warnings: List[DataIntegrityWarning]) -> List[Any]:
    """Keep parsed items; raw rows go through the record builder one by one."""
    items: List[Any] = []
    for i, raw in enumerate(raw_items or ()):
        if isinstance(raw, RecurringItem):
            items.append(raw)
        elif isinstance(raw, Mapping):
            item, row_warnings = build_recurring_item(raw, kind=kind)
            warnings.extend(row_warnings)
            if item is not None:
                items.append(item)
        else:
            w = DataIntegrityWarning(
                record_id=f"{kind}[{i}]",
                field_name="record",
                reason="not a record; skipped",
                raw=str(raw)[:200],
            )
            logger.warning(w.message())
            warnings.append(w)
    return items


def coerce_ledger(payload: Union[Ledger, Mapping[str, Any]]) -> Ledger:
    """
    Validate a ledger mapping.

    Income and expense records are validated one at a time: a bad record is
    skipped with a DataIntegrityWarning instead of failing the whole ledger.
    Only the ledger-level fields can raise ValidationError.
    """
    if isinstance(payload, Ledger):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError(
            "Invalid ledger snapshot.",
            [{"field": "ledger", "message": f"expected a mapping, got {type(payload).__name__}"}],
        )

    rest = dict(payload)
    warnings: List[DataIntegrityWarning] = []
    incomes = _coerce_items(rest.pop("incomes", None), "income", warnings)
    expenses = _coerce_items(rest.pop("expenses", None), "expense", warnings)
    existing = list(rest.pop("integrity_warnings", None) or ())
    existing += list(rest.pop("integrityWarnings", None) or ())

    try:
        return Ledger.model_validate({
            **rest,
            "incomes": incomes,
            "expenses": expenses,
            "integrity_warnings": existing + warnings,
        })
    except PydanticValidationError as exc:
        raise ValidationError("Invalid ledger snapshot.", _structured_errors(exc)) from exc
