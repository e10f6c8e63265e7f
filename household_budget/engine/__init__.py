"""Aggregation engine package."""

from household_budget.engine.aggregation import (
    MonthlyTrend,
    calculate_summary,
    category_shares,
    compare_months,
    contributor_trend,
    expenses_by_category_and_contributor,
    financial_efficiency,
    find_budget,
    group_by_contributor,
    group_expenses_by_category,
    group_expenses_by_type,
    monthly_trend,
    trend_point,
    type_shares,
)
from household_budget.engine.contributors import (
    backfill_contributors,
    contributor_for,
    infer_contributor,
)

__all__ = [
    "MonthlyTrend",
    "backfill_contributors",
    "calculate_summary",
    "category_shares",
    "compare_months",
    "contributor_for",
    "contributor_trend",
    "expenses_by_category_and_contributor",
    "financial_efficiency",
    "find_budget",
    "group_by_contributor",
    "group_expenses_by_category",
    "group_expenses_by_type",
    "infer_contributor",
    "monthly_trend",
    "trend_point",
    "type_shares",
]
