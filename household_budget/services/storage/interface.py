"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for budget storage.
This allows us to:
1. Swap Google Sheets for a local file or a real database
2. Use in-memory storage for testing
3. Chain a remote store with a local fallback at the composition root
4. Keep the aggregation engine unaware of where records live

The interface is intentionally small - load, save, get, delete of
month records keyed by user.
"""

from abc import ABC, abstractmethod
from typing import Optional

from household_budget.models.budget import MonthlyBudget


class BudgetStorageInterface(ABC):
    """
    Abstract interface for monthly budget storage.

    Any storage implementation (Google Sheets, local JSON, etc.)
    must implement these methods. Records must round-trip exactly,
    including timestamps and unknown fields.
    """

    @abstractmethod
    async def load_budgets(self, user_key: str) -> list[MonthlyBudget]:
        """
        Load every budget of a user.

        Args:
            user_key: Identifier of the owning user

        Returns:
            Budgets, newest period first

        Raises:
            StorageError: If the backing store cannot be read
        """
        pass

    @abstractmethod
    async def save_budget(self, user_key: str, budget: MonthlyBudget) -> bool:
        """
        Insert or replace a budget (matched by id).

        Returns:
            True if saved successfully

        Raises:
            StorageError: If save fails
        """
        pass

    @abstractmethod
    async def get_budget(self, user_key: str, budget_id: str) -> Optional[MonthlyBudget]:
        """
        Retrieve one budget by id.

        Returns:
            The budget if found, None otherwise
        """
        pass

    @abstractmethod
    async def delete_budget(self, user_key: str, budget_id: str) -> bool:
        """
        Delete a budget and, with it, all of its items.

        Returns:
            True if a budget was deleted, False if none matched
        """
        pass


def newest_first(budgets: list[MonthlyBudget]) -> list[MonthlyBudget]:
    """Order budgets by (year, month) descending, as every store returns them."""
    return sorted(budgets, key=lambda b: b.period, reverse=True)


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
