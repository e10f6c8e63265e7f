"""Services package."""

from household_budget.services.storage import (
    BudgetStorageInterface,
    ConnectionError,
    FallbackBudgetStorage,
    InMemoryBudgetStorage,
    LocalJsonBudgetStorage,
    NotFoundError,
    StorageError,
)

__all__ = [
    "BudgetStorageInterface",
    "ConnectionError",
    "FallbackBudgetStorage",
    "InMemoryBudgetStorage",
    "LocalJsonBudgetStorage",
    "NotFoundError",
    "StorageError",
]
