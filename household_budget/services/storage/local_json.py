"""
Local JSON File Storage

One JSON document per user under a data directory:

    {"budgets": [<MonthlyBudget document>, ...]}

DESIGN DECISION: This is the offline/local-cache store. It needs no
account or network, and it is the fallback when the remote store is
unreachable.

Writes go to a temporary file that is then renamed over the original,
so a crash mid-write never leaves a truncated document behind.
"""

import hashlib
import json
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from household_budget.logging_config import get_logger
from household_budget.models.budget import MonthlyBudget
from household_budget.services.storage.interface import (
    BudgetStorageInterface,
    StorageError,
    newest_first,
)

logger = get_logger(__name__)


class LocalJsonBudgetStorage(BudgetStorageInterface):

    def __init__(self, data_dir: str):
        self._data_dir = Path(data_dir)

    def _path_for(self, user_key: str) -> Path:
        slug = re.sub(r"[^A-Za-z0-9_-]", "_", user_key)[:40] or "user"
        digest = hashlib.sha256(user_key.encode("utf-8")).hexdigest()[:12]
        return self._data_dir / f"{slug}-{digest}.json"

    def _read_documents(self, user_key: str) -> list[dict]:
        path = self._path_for(user_key)
        if not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read budgets from {path}: {e}")
        return list(payload.get("budgets", []))

    def _write_documents(self, user_key: str, documents: list[dict]) -> None:
        path = self._path_for(user_key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump({"budgets": documents}, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except OSError as e:
            raise StorageError(f"Failed to write budgets to {path}: {e}")

    async def load_budgets(self, user_key: str) -> list[MonthlyBudget]:
        budgets = []
        for doc in self._read_documents(user_key):
            try:
                budgets.append(MonthlyBudget.model_validate(doc))
            except ValidationError as e:
                # Skip malformed records rather than losing the whole month list
                logger.warning(
                    "budget_document_skipped",
                    user_key=user_key,
                    budget_id=doc.get("id"),
                    error=str(e),
                )
        return newest_first(budgets)

    async def save_budget(self, user_key: str, budget: MonthlyBudget) -> bool:
        documents = [doc for doc in self._read_documents(user_key) if doc.get("id") != budget.id]
        documents.append(budget.to_document())
        self._write_documents(user_key, documents)
        return True

    async def get_budget(self, user_key: str, budget_id: str) -> Optional[MonthlyBudget]:
        for doc in self._read_documents(user_key):
            if doc.get("id") == budget_id:
                try:
                    return MonthlyBudget.model_validate(doc)
                except ValidationError as e:
                    raise StorageError(f"Stored budget {budget_id} is malformed: {e}")
        return None

    async def delete_budget(self, user_key: str, budget_id: str) -> bool:
        documents = self._read_documents(user_key)
        kept = [doc for doc in documents if doc.get("id") != budget_id]
        if len(kept) == len(documents):
            return False
        self._write_documents(user_key, kept)
        return True
