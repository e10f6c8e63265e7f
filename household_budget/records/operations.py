"""
Budget Record Operations

Construction and validated mutation of monthly budgets.

DESIGN DECISION: Every operation is a pure function. It takes a budget
value and returns a RecordUpdate holding a new budget value; the input
is never modified. Persisting the result is the caller's job.

A rejected operation is not an exception: the RecordUpdate comes back
with applied=False, the original budget, and the validation issues.
"""

import secrets
import string
import time
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Union

from household_budget.categories import CategoryRegistry, default_registry
from household_budget.models.budget import (
    ExpenseDraft,
    ExpenseItem,
    IncomeDraft,
    IncomeItem,
    MonthlyBudget,
    RecordUpdate,
    ValidationIssue,
)
from household_budget.validation import DraftValidator

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _make_id(prefix: str) -> str:
    # millisecond timestamp + 9 random base36 chars
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}_{time.time_ns() // 1_000_000}_{suffix}"


def generate_item_id() -> str:
    return _make_id("item")


def generate_budget_id() -> str:
    return _make_id("budget")


def create_empty_budget(
    month: int,
    year: int,
    *,
    tithe_percentage: Union[Decimal, float, int] = Decimal("10"),
    savings_percentage: Union[Decimal, float, int] = Decimal("10"),
    now: Optional[datetime] = None,
) -> MonthlyBudget:
    """
    Create the budget for a period that has no record yet.

    Raises pydantic.ValidationError for a month outside 1-12 or a
    percentage outside 0-100.
    """
    created = now or _utcnow()
    return MonthlyBudget(
        id=generate_budget_id(),
        month=month,
        year=year,
        incomes=(),
        expenses=(),
        tithe_percentage=Decimal(str(tithe_percentage)),
        savings_percentage=Decimal(str(savings_percentage)),
        created_at=created,
        updated_at=created,
    )


def _rejected(budget: MonthlyBudget, issues: list[ValidationIssue]) -> RecordUpdate:
    return RecordUpdate(budget=budget, applied=False, issues=tuple(issues))


def add_income(
    budget: MonthlyBudget,
    draft: IncomeDraft,
    registry: CategoryRegistry,
    validator: Optional[DraftValidator] = None,
    now: Optional[datetime] = None,
) -> RecordUpdate:
    """
    Append a validated income item.

    An empty description defaults to the subcategory name. The income
    category is the contributor, so it is also stored as `contributor`.
    """
    validator = validator or DraftValidator(registry)
    result = validator.validate_income(draft)
    if result.has_errors:
        return _rejected(budget, result.issues)

    item = IncomeItem(
        id=generate_item_id(),
        description=draft.description or draft.subcategory,
        amount=result.amount,
        category=draft.category,
        subcategory=draft.subcategory,
        date=result.item_date,
        contributor=draft.category,
    )
    updated = budget.model_copy(update={
        "incomes": (*budget.incomes, item),
        "updated_at": now or _utcnow(),
    })
    return RecordUpdate(budget=updated, applied=True, item_id=item.id, issues=tuple(result.issues))


def add_expense(
    budget: MonthlyBudget,
    draft: ExpenseDraft,
    registry: CategoryRegistry,
    validator: Optional[DraftValidator] = None,
    now: Optional[datetime] = None,
) -> RecordUpdate:
    """
    Append a validated expense item.

    The expense type is looked up in the registry once, here, and stored
    on the item. Later registry changes do not touch stored items.
    """
    validator = validator or DraftValidator(registry)
    result = validator.validate_expense(draft)
    if result.has_errors:
        return _rejected(budget, result.issues)

    item = ExpenseItem(
        id=generate_item_id(),
        description=draft.description or draft.subcategory,
        amount=result.amount,
        category=draft.category,
        subcategory=draft.subcategory,
        type=registry.classify_subcategory(draft.category, draft.subcategory),
        date=result.item_date,
        contributor=draft.contributor or None,
    )
    updated = budget.model_copy(update={
        "expenses": (*budget.expenses, item),
        "updated_at": now or _utcnow(),
    })
    return RecordUpdate(budget=updated, applied=True, item_id=item.id, issues=tuple(result.issues))


def _remove(budget: MonthlyBudget, field: str, item_id: str, now: Optional[datetime]) -> RecordUpdate:
    items = getattr(budget, field)
    kept = tuple(item for item in items if item.id != item_id)
    if len(kept) == len(items):
        return _rejected(budget, [ValidationIssue(
            field="id",
            issue_type="not_found",
            message=f"No item with id {item_id} in {field}",
        )])
    updated = budget.model_copy(update={field: kept, "updated_at": now or _utcnow()})
    return RecordUpdate(budget=updated, applied=True, item_id=item_id)


def remove_income(budget: MonthlyBudget, item_id: str, now: Optional[datetime] = None) -> RecordUpdate:
    return _remove(budget, "incomes", item_id, now)


def remove_expense(budget: MonthlyBudget, item_id: str, now: Optional[datetime] = None) -> RecordUpdate:
    return _remove(budget, "expenses", item_id, now)


def set_percentages(
    budget: MonthlyBudget,
    tithe_percentage: Union[str, Decimal, float, int],
    savings_percentage: Union[str, Decimal, float, int],
    validator: Optional[DraftValidator] = None,
    now: Optional[datetime] = None,
) -> RecordUpdate:
    """Change the tithe and savings percentages (0-100 each)."""
    validator = validator or DraftValidator(default_registry())
    issues, tithe, savings = validator.validate_percentages(
        str(tithe_percentage), str(savings_percentage)
    )
    if issues:
        return _rejected(budget, issues)
    updated = budget.model_copy(update={
        "tithe_percentage": tithe,
        "savings_percentage": savings,
        "updated_at": now or _utcnow(),
    })
    return RecordUpdate(budget=updated, applied=True)
