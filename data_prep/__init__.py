"""
Data preparation: record exports, raw-row parsing, validation.
"""

from .loader import FileRecordRepository, load_ledger_from_files, load_records_table
from .record_builder import build_ledger, build_recurring_item, canonicalize_row
from .validators import (
    ValidationResult,
    coerce_ledger,
    coerce_request,
    validate_ledger,
    validate_records_table,
)

__all__ = [
    "FileRecordRepository",
    "load_ledger_from_files",
    "load_records_table",
    "build_ledger",
    "build_recurring_item",
    "canonicalize_row",
    "ValidationResult",
    "coerce_ledger",
    "coerce_request",
    "validate_ledger",
    "validate_records_table",
]
