"""
Core package — input schema, configuration, error taxonomy, and shared utilities.
No business logic lives here.
"""

from .config import ProjectionConfig
from .errors import (
    CashflowEngineError,
    DataIntegrityWarning,
    ProjectionRangeError,
    ValidationError,
)
from .schema import (
    Frequency,
    HypotheticalEvent,
    Ledger,
    ProjectionRequest,
    RecurringItem,
)
from .utils import excel_round, month_range, parse_month

__all__ = [
    "ProjectionConfig",
    "CashflowEngineError",
    "DataIntegrityWarning",
    "ProjectionRangeError",
    "ValidationError",
    "Frequency",
    "HypotheticalEvent",
    "Ledger",
    "ProjectionRequest",
    "RecurringItem",
    "excel_round",
    "month_range",
    "parse_month",
]
