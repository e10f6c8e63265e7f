"""Budget record operations package."""

from household_budget.records.operations import (
    add_expense,
    add_income,
    create_empty_budget,
    generate_budget_id,
    generate_item_id,
    remove_expense,
    remove_income,
    set_percentages,
)

__all__ = [
    "add_expense",
    "add_income",
    "create_empty_budget",
    "generate_budget_id",
    "generate_item_id",
    "remove_expense",
    "remove_income",
    "set_percentages",
]
