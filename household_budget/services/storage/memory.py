"""
In-Memory Storage

Dict-backed implementation of the storage interface, for tests and
for running without any persistent backend. Records are stored as
serialized documents so that a load returns fresh values, exactly as
a real store would.
"""

from typing import Optional

from household_budget.models.budget import MonthlyBudget
from household_budget.services.storage.interface import (
    BudgetStorageInterface,
    newest_first,
)


class InMemoryBudgetStorage(BudgetStorageInterface):

    def __init__(self):
        self._documents: dict[str, dict[str, dict]] = {}

    async def load_budgets(self, user_key: str) -> list[MonthlyBudget]:
        documents = self._documents.get(user_key, {})
        return newest_first([MonthlyBudget.model_validate(doc) for doc in documents.values()])

    async def save_budget(self, user_key: str, budget: MonthlyBudget) -> bool:
        self._documents.setdefault(user_key, {})[budget.id] = budget.to_document()
        return True

    async def get_budget(self, user_key: str, budget_id: str) -> Optional[MonthlyBudget]:
        doc = self._documents.get(user_key, {}).get(budget_id)
        return MonthlyBudget.model_validate(doc) if doc is not None else None

    async def delete_budget(self, user_key: str, budget_id: str) -> bool:
        return self._documents.get(user_key, {}).pop(budget_id, None) is not None
