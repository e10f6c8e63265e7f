"""
Data Models Package

This package contains all Pydantic models used by Household Budget.
All records flowing between storage, record operations and the
engine must conform to these schemas.
"""

from household_budget.models.budget import (
    ExpenseDraft,
    ExpenseItem,
    ExpenseType,
    IncomeDraft,
    IncomeItem,
    MonthlyBudget,
    RecordUpdate,
    ValidationIssue,
    ValidationResult,
)
from household_budget.models.reports import (
    BudgetSummary,
    CategoryContributorSplit,
    CategoryGroup,
    ContributorTrendPoint,
    EfficiencyIndicator,
    GroupShare,
    GrowthRates,
    MonthlyComparison,
    TrendPoint,
    TypeBreakdown,
    TypeGroup,
)

__all__ = [
    # Records
    "ExpenseDraft",
    "ExpenseItem",
    "ExpenseType",
    "IncomeDraft",
    "IncomeItem",
    "MonthlyBudget",
    "RecordUpdate",
    "ValidationIssue",
    "ValidationResult",
    # Reports
    "BudgetSummary",
    "CategoryContributorSplit",
    "CategoryGroup",
    "ContributorTrendPoint",
    "EfficiencyIndicator",
    "GroupShare",
    "GrowthRates",
    "MonthlyComparison",
    "TrendPoint",
    "TypeBreakdown",
    "TypeGroup",
]
