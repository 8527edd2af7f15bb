"""
Error taxonomy.

  ValidationError        malformed input; raised before any computation
  ProjectionRangeError   to_month earlier than from_month
  DataIntegrityWarning   a record field that failed to parse; collected, never raised
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class CashflowEngineError(Exception):
    """Base class for engine errors."""


class ValidationError(CashflowEngineError, ValueError):
    """Input contract violation. ``errors`` holds one {field, message} dict per problem."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.errors: List[Dict[str, str]] = list(errors or [])

    def to_dict(self) -> Dict[str, Any]:
        return {"error": type(self).__name__, "message": str(self), "errors": self.errors}


class ProjectionRangeError(ValidationError):
    """Raised when the requested month range is empty."""


@dataclass(frozen=True)
class DataIntegrityWarning:
    """A malformed record field that was treated as absent."""
    record_id: str
    field_name: str
    reason: str
    raw: Optional[str] = field(default=None, compare=False)

    def message(self) -> str:
        return f"Record {self.record_id}: ignored {self.field_name} ({self.reason})."
