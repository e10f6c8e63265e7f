"""
Storage Services Package

Provides the abstract record-store interface and its implementations:
in-memory, local JSON file, Google Sheets, and an ordered fallback
wrapper that chains two of them.
"""

from household_budget.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    NotFoundError,
    StorageError,
)
from household_budget.services.storage.fallback import FallbackBudgetStorage
from household_budget.services.storage.local_json import LocalJsonBudgetStorage
from household_budget.services.storage.memory import InMemoryBudgetStorage

__all__ = [
    # Interface
    "BudgetStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "FallbackBudgetStorage",
    "InMemoryBudgetStorage",
    "LocalJsonBudgetStorage",
]
