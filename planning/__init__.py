"""
Planning answers built on top of the ledger — affordability, purchase timing,
safety classification, constraint checks, spending breakdowns, and the
compute_balance_projection entry point that ties them together.
"""

from .affordability import AffordabilityAnalysis, solve_max_affordable_expense
from .constraints import ConstraintsEvaluation, evaluate_constraints
from .context import EngineContext, InMemoryRepository, RecordRepository
from .expense_breakdown import ExpenseBreakdown, expense_breakdown
from .projection import compute_balance_projection
from .results import ProjectionResult
from .safe_purchase import SafePurchaseRecommendation, find_safe_purchase_month
from .safety import SafetyAssessment, SafetyStatus, assess_safety, classify_balance

__all__ = [
    "AffordabilityAnalysis",
    "solve_max_affordable_expense",
    "ConstraintsEvaluation",
    "evaluate_constraints",
    "EngineContext",
    "InMemoryRepository",
    "RecordRepository",
    "ExpenseBreakdown",
    "expense_breakdown",
    "compute_balance_projection",
    "ProjectionResult",
    "SafePurchaseRecommendation",
    "find_safe_purchase_month",
    "SafetyAssessment",
    "SafetyStatus",
    "assess_safety",
    "classify_balance",
]
