"""Validation package."""

from household_budget.validation.validator import (
    DraftValidator,
    parse_amount,
    parse_item_date,
)

__all__ = ["DraftValidator", "parse_amount", "parse_item_date"]
