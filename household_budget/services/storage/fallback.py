"""
Ordered Fallback Storage

Wraps a primary store (typically Google Sheets) and a secondary one
(typically the local JSON file). Every call goes to the primary first;
when it raises StorageError the same call is made on the secondary and
a warning is logged.

DESIGN DECISION: The fallback policy lives here and is assembled only at
the composition root. Neither the record operations nor the engine know
that more than one store exists.
"""

from typing import Awaitable, Callable, Optional, TypeVar

from household_budget.logging_config import get_logger
from household_budget.models.budget import MonthlyBudget
from household_budget.services.storage.interface import (
    BudgetStorageInterface,
    StorageError,
)

T = TypeVar("T")

logger = get_logger(__name__)


class FallbackBudgetStorage(BudgetStorageInterface):

    def __init__(self, primary: BudgetStorageInterface, secondary: BudgetStorageInterface):
        self._primary = primary
        self._secondary = secondary

    async def _call(
        self,
        operation: str,
        user_key: str,
        call: Callable[[BudgetStorageInterface], Awaitable[T]],
    ) -> T:
        try:
            return await call(self._primary)
        except StorageError as e:
            logger.warning(
                "storage_fallback_engaged",
                operation=operation,
                user_key=user_key,
                primary=type(self._primary).__name__,
                secondary=type(self._secondary).__name__,
                error=str(e),
            )
            # If the secondary fails too, its error propagates
            return await call(self._secondary)

    async def load_budgets(self, user_key: str) -> list[MonthlyBudget]:
        return await self._call("load_budgets", user_key, lambda s: s.load_budgets(user_key))

    async def save_budget(self, user_key: str, budget: MonthlyBudget) -> bool:
        return await self._call("save_budget", user_key, lambda s: s.save_budget(user_key, budget))

    async def get_budget(self, user_key: str, budget_id: str) -> Optional[MonthlyBudget]:
        return await self._call("get_budget", user_key, lambda s: s.get_budget(user_key, budget_id))

    async def delete_budget(self, user_key: str, budget_id: str) -> bool:
        return await self._call("delete_budget", user_key, lambda s: s.delete_budget(user_key, budget_id))
