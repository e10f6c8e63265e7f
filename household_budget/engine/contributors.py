"""
Contributor Attribution

Decides which contributor (person or the shared bucket) an income or
expense belongs to, for per-person reports.

Items written by this version carry an explicit `contributor`. Older
records do not; for those the legacy rule applies: the lower-cased
description and subcategory are searched for each contributor's name
aliases, in registry order, and anything unmatched goes to the shared
bucket.
"""

from typing import Union

from household_budget.categories import CategoryRegistry
from household_budget.models.budget import ExpenseItem, IncomeItem, MonthlyBudget

Item = Union[IncomeItem, ExpenseItem]


def infer_contributor(description: str, subcategory: str, registry: CategoryRegistry) -> str:
    """Legacy name-matching heuristic."""
    texts = ((description or "").lower(), (subcategory or "").lower())
    for contributor in registry.contributors:
        for alias in contributor.aliases:
            needle = alias.lower()
            if needle and any(needle in text for text in texts):
                return contributor.key
    return registry.shared_contributor


def contributor_for(item: Item, registry: CategoryRegistry) -> str:
    """Explicit contributor if it is a known key, else the legacy heuristic."""
    if item.contributor and registry.lookup_contributor(item.contributor) is not None:
        return item.contributor
    return infer_contributor(item.description, item.subcategory, registry)


def backfill_contributors(budget: MonthlyBudget, registry: CategoryRegistry) -> MonthlyBudget:
    """
    One-time migration for legacy records.

    Writes the heuristic result onto items without a contributor.
    Items that already have one are left alone, and so are the
    budget's timestamps. Returns the same object when nothing changed.
    """
    def fill(items):
        changed = False
        result = []
        for item in items:
            if item.contributor:
                result.append(item)
            else:
                changed = True
                result.append(item.model_copy(update={
                    "contributor": infer_contributor(item.description, item.subcategory, registry),
                }))
        return tuple(result), changed

    incomes, incomes_changed = fill(budget.incomes)
    expenses, expenses_changed = fill(budget.expenses)
    if not (incomes_changed or expenses_changed):
        return budget
    return budget.model_copy(update={"incomes": incomes, "expenses": expenses})
