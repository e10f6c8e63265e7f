"""
Main Orchestrator for Household Budget

This module ties together the registry, the record operations, the
engine and storage, and defines the session flow:

    load month records → apply one mutation → persist the new record

DESIGN DECISION: The orchestrator enforces the boundaries:
- The engine only ever sees fully loaded, in-memory records
- Mutations of one session run one at a time (asyncio.Lock), so two
  edits can never be applied to the same stale snapshot
- A failed save never loses the in-memory record and never crashes
  the session; it is reported back to the caller

This is also the composition root: the only place that decides which
store is primary and which one is the fallback.
"""

import asyncio
from datetime import date
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from household_budget.categories import CategoryRegistry, default_registry, load_registry
from household_budget.config import BudgetSettings, Settings, get_settings
from household_budget.engine import (
    MonthlyTrend,
    backfill_contributors,
    calculate_summary,
    compare_months,
    find_budget,
    monthly_trend,
)
from household_budget.logging_config import configure_logging, get_logger
from household_budget.models.budget import (
    ExpenseDraft,
    IncomeDraft,
    MonthlyBudget,
    RecordUpdate,
)
from household_budget.models.reports import BudgetSummary, MonthlyComparison
from household_budget.records import (
    add_expense,
    add_income,
    create_empty_budget,
    remove_expense,
    remove_income,
    set_percentages,
)
from household_budget.services.storage import (
    BudgetStorageInterface,
    FallbackBudgetStorage,
    InMemoryBudgetStorage,
    LocalJsonBudgetStorage,
    NotFoundError,
    StorageError,
)
from household_budget.validation import DraftValidator

logger = get_logger(__name__)


class MutationOutcome(BaseModel):
    """What happened to one mutation: the record update plus the save result."""
    model_config = ConfigDict(frozen=True)

    update: RecordUpdate
    saved: bool = False
    save_error: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.update.applied

    @property
    def budget(self) -> MonthlyBudget:
        return self.update.budget


class BudgetSession:
    """
    One user's working set of monthly budgets.

    Flow:
    1. load() → read every month record of the user (empty on failure)
    2. get_or_create(month, year) → the period's record, created lazily
    3. add_* / remove_* / update_percentages → validated mutation + save
    4. summary / trend / comparison → pure engine calls on the snapshot
    """

    def __init__(
        self,
        user_key: str,
        storage: BudgetStorageInterface,
        registry: Optional[CategoryRegistry] = None,
        budget_settings: Optional[BudgetSettings] = None,
        validator: Optional[DraftValidator] = None,
    ):
        self._user_key = user_key
        self._storage = storage
        self._registry = registry or default_registry()
        self._settings = budget_settings or get_settings().budget
        self._validator = validator or DraftValidator(self._registry)
        self._budgets: list[MonthlyBudget] = []
        self._lock = asyncio.Lock()
        self._log = logger.bind(user_key=user_key)

    @property
    def budgets(self) -> list[MonthlyBudget]:
        """Snapshot of the loaded budgets (a copy; records are immutable)."""
        return list(self._budgets)

    @property
    def registry(self) -> CategoryRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Loading / lazy creation
    # -------------------------------------------------------------------------

    async def load(self) -> list[MonthlyBudget]:
        """
        Load the user's budgets.

        If the store is unreachable the previous snapshot is kept (empty
        on first load) so the session stays usable.
        """
        try:
            self._budgets = await self._storage.load_budgets(self._user_key)
            self._log.info("budgets_loaded", count=len(self._budgets))
        except StorageError as e:
            self._log.error("budgets_load_failed", error=str(e), kept=len(self._budgets))
        return self.budgets

    async def get_or_create(self, month: int, year: int) -> MonthlyBudget:
        """The budget of a period, creating and saving an empty one if none exists."""
        async with self._lock:
            existing = find_budget(self._budgets, month, year)
            if existing is not None:
                return existing

            budget = create_empty_budget(
                month,
                year,
                tithe_percentage=self._settings.default_tithe_percentage,
                savings_percentage=self._settings.default_savings_percentage,
            )
            self._budgets.append(budget)
            self._log.info("budget_created", budget_id=budget.id, period=budget.period_key)
            await self._persist(budget)
            return budget

    async def current_budget(self, today: Optional[date] = None) -> MonthlyBudget:
        today = today or date.today()
        return await self.get_or_create(today.month, today.year)

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _find(self, budget_id: str) -> MonthlyBudget:
        for budget in self._budgets:
            if budget.id == budget_id:
                return budget
        raise NotFoundError(f"Budget not loaded in this session: {budget_id}")

    async def _persist(self, budget: MonthlyBudget) -> tuple[bool, Optional[str]]:
        try:
            await self._storage.save_budget(self._user_key, budget)
        except StorageError as e:
            self._log.error("budget_save_failed", budget_id=budget.id, error=str(e))
            return False, str(e)
        self._log.info("budget_saved", budget_id=budget.id, period=budget.period_key)
        return True, None

    async def _apply(
        self,
        budget_id: str,
        action: str,
        operation: Callable[[MonthlyBudget], RecordUpdate],
    ) -> MutationOutcome:
        async with self._lock:
            budget = self._find(budget_id)
            update = operation(budget)

            if not update.applied:
                self._log.warning(
                    "mutation_rejected",
                    action=action,
                    budget_id=budget_id,
                    issues=[i.model_dump() for i in update.issues],
                )
                return MutationOutcome(update=update)

            self._budgets = [
                update.budget if b.id == budget_id else b for b in self._budgets
            ]
            self._log.info(
                action,
                budget_id=budget_id,
                item_id=update.item_id,
                warnings=[i.message for i in update.issues if i.severity == "warning"],
            )
            saved, error = await self._persist(update.budget)
            return MutationOutcome(update=update, saved=saved, save_error=error)

    async def add_income(self, budget_id: str, draft: IncomeDraft) -> MutationOutcome:
        return await self._apply(
            budget_id,
            "income_added",
            lambda b: add_income(b, draft, self._registry, self._validator),
        )

    async def add_expense(self, budget_id: str, draft: ExpenseDraft) -> MutationOutcome:
        return await self._apply(
            budget_id,
            "expense_added",
            lambda b: add_expense(b, draft, self._registry, self._validator),
        )

    async def remove_income(self, budget_id: str, item_id: str) -> MutationOutcome:
        return await self._apply(budget_id, "income_removed", lambda b: remove_income(b, item_id))

    async def remove_expense(self, budget_id: str, item_id: str) -> MutationOutcome:
        return await self._apply(budget_id, "expense_removed", lambda b: remove_expense(b, item_id))

    async def update_percentages(self, budget_id: str, tithe: str, savings: str) -> MutationOutcome:
        return await self._apply(
            budget_id,
            "percentages_updated",
            lambda b: set_percentages(b, tithe, savings, self._validator),
        )

    async def delete_budget(self, budget_id: str) -> bool:
        """Delete a budget (and its items) from storage and from the session."""
        async with self._lock:
            deleted = await self._storage.delete_budget(self._user_key, budget_id)
            self._budgets = [b for b in self._budgets if b.id != budget_id]
            self._log.info("budget_deleted", budget_id=budget_id, found=deleted)
            return deleted

    async def migrate_contributors(self) -> int:
        """
        Write attributed contributors onto legacy items and save the
        budgets that changed. Returns the number of budgets migrated.
        """
        async with self._lock:
            migrated = 0
            result = []
            for budget in self._budgets:
                filled = backfill_contributors(budget, self._registry)
                if filled is not budget:
                    migrated += 1
                    await self._persist(filled)
                result.append(filled)
            self._budgets = result
            self._log.info("contributors_migrated", budgets=migrated)
            return migrated

    # -------------------------------------------------------------------------
    # Reports (pure engine calls on the snapshot)
    # -------------------------------------------------------------------------

    def summary(self, budget_id: str) -> BudgetSummary:
        return calculate_summary(self._find(budget_id))

    def trend(self) -> MonthlyTrend:
        return monthly_trend(self._budgets)

    def compare_with_previous(self, budget_id: str) -> Optional[MonthlyComparison]:
        """Comparison with the preceding calendar month, if it has a record."""
        current = self._find(budget_id)
        month, year = (12, current.year - 1) if current.month == 1 else (current.month - 1, current.year)
        previous = find_budget(self._budgets, month, year)
        if previous is None:
            return None
        return compare_months(current, previous)


# =============================================================================
# COMPOSITION ROOT
# =============================================================================

def create_storage(settings: Optional[Settings] = None) -> BudgetStorageInterface:
    """
    Build the record store selected by configuration.

    sheets + fallback_to_local → Google Sheets first, local JSON second.
    If Google Sheets is not configured, the local store is used alone.
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    local = LocalJsonBudgetStorage(storage_settings.local_data_dir)

    if storage_settings.backend == "memory":
        return InMemoryBudgetStorage()
    if storage_settings.backend == "local":
        return local

    try:
        from household_budget.services.storage.google_sheets import (
            GoogleSheetsBudgetStorage,
            GoogleSheetsClient,
        )
        remote = GoogleSheetsBudgetStorage(GoogleSheetsClient(settings.google_sheets))
    except Exception as e:
        # Sheets not configured - continue with the local store
        logger.warning("remote_storage_unavailable", error=str(e))
        return local

    if storage_settings.fallback_to_local:
        return FallbackBudgetStorage(remote, local)
    return remote


def create_registry(settings: Optional[Settings] = None) -> CategoryRegistry:
    settings = settings or get_settings()
    path = settings.budget.registry_path
    return load_registry(path) if path else default_registry()


def create_session(
    user_key: str,
    settings: Optional[Settings] = None,
    storage: Optional[BudgetStorageInterface] = None,
) -> BudgetSession:
    """
    Factory function to create a fully wired session.

    Args:
        user_key: Owner of the budgets
        settings: Settings to use (defaults to get_settings())
        storage: Explicit store, bypassing the configured one
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, json=app_settings.log_json)

    registry = create_registry(settings)
    return BudgetSession(
        user_key=user_key,
        storage=storage or create_storage(settings),
        registry=registry,
        budget_settings=settings.budget,
    )
