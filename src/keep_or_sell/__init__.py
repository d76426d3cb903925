"""
Keep vs. sell toolkit for rental property owners.

The package projects whether an owner should keep a rental property or sell
it and redeploy the proceeds into a new one, compares the monthly economics
of the two properties, and grades prospective rental purchases.
"""

from .comparison import (
    compute_candidate_metrics,
    compute_comparison,
    compute_current_metrics,
)
from .debt import compute_debt_service
from .model import compute_decision
from .schemas import (
    ComparisonMetrics,
    CurrentPropertyInputs,
    DebtServiceResult,
    Decision,
    DecisionInputs,
    DecisionResult,
    ExpenseInputs,
    MortgageInputs,
    NewPropertyInputs,
    PaymentFrequency,
    PropertyMetrics,
    RateConvention,
    YearlySnapshot,
)
from .verdict import evaluate_rental_purchase

__all__ = [
    "ComparisonMetrics",
    "CurrentPropertyInputs",
    "DebtServiceResult",
    "Decision",
    "DecisionInputs",
    "DecisionResult",
    "ExpenseInputs",
    "MortgageInputs",
    "NewPropertyInputs",
    "PaymentFrequency",
    "PropertyMetrics",
    "RateConvention",
    "YearlySnapshot",
    "compute_candidate_metrics",
    "compute_comparison",
    "compute_current_metrics",
    "compute_debt_service",
    "compute_decision",
    "evaluate_rental_purchase",
]
