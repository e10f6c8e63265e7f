"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the remote record store because the
household already shares a spreadsheet and can read the month rows
there without any extra tooling.

Each budget is one row. A few summary columns are there for people
reading the sheet; the full record lives in `document_json`, which is
the only column read back, so records round-trip exactly.

TRADEOFFS:
- Every call reads the whole worksheet (fine for a few hundred months)
- No transactions (last write of a row wins)
- Filtering by user happens in Python
"""

import json
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from household_budget.config import GoogleSheetsSettings, get_settings
from household_budget.engine import calculate_summary
from household_budget.logging_config import get_logger
from household_budget.models.budget import MonthlyBudget
from household_budget.services.storage.interface import (
    BudgetStorageInterface,
    ConnectionError,
    StorageError,
    newest_first,
)

logger = get_logger(__name__)

SCOPES = (
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
)

# Column layout of the Budgets worksheet
BUDGET_COLUMNS = [
    "user_key",
    "id",
    "period",
    "total_income",
    "total_expenses",
    "available_amount",
    "updated_at",
    "document_json",
]

_USER_COL = 0
_ID_COL = 1
_DOCUMENT_COL = 7

_RETRY = dict(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    retry=retry_if_exception_type(StorageError),
    reraise=True,
)


class GoogleSheetsClient:
    """
    Opens the budgets worksheet with service-account credentials.

    Nothing touches the network until the worksheet is first needed;
    the opened worksheet is then reused for the life of the client.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._settings = settings or get_settings().google_sheets
        self._worksheet: Optional[gspread.Worksheet] = None

    def _authorize(self) -> gspread.Client:
        path = self._settings.credentials_path
        try:
            credentials = Credentials.from_service_account_file(path, scopes=list(SCOPES))
        except FileNotFoundError:
            raise ConnectionError(f"Service account file missing: {path}")
        except ValueError as e:
            raise ConnectionError(f"Service account file {path} is not usable: {e}")
        return gspread.authorize(credentials)

    @retry(**_RETRY)
    def get_budgets_sheet(self) -> gspread.Worksheet:
        """The Budgets worksheet, created with a header row if absent."""
        if self._worksheet is not None:
            return self._worksheet

        spreadsheet_id = self._settings.spreadsheet_id
        title = self._settings.budgets_sheet_name
        try:
            spreadsheet = self._authorize().open_by_key(spreadsheet_id)
        except gspread.SpreadsheetNotFound:
            raise ConnectionError(f"No spreadsheet with id {spreadsheet_id}")
        except gspread.exceptions.APIError as e:
            raise ConnectionError(f"Google Sheets refused access to {spreadsheet_id}: {e}")

        try:
            worksheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            worksheet = spreadsheet.add_worksheet(title=title, rows=1000, cols=len(BUDGET_COLUMNS))
            worksheet.append_row(BUDGET_COLUMNS)
            logger.info("budgets_sheet_created", title=title)

        self._worksheet = worksheet
        return worksheet


class GoogleSheetsBudgetStorage(BudgetStorageInterface):
    """
    Google Sheets implementation of budget storage.

    Budgets of every user share one worksheet; the first column holds
    the user key.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _budget_to_row(self, user_key: str, budget: MonthlyBudget) -> list:
        """Convert a MonthlyBudget to a spreadsheet row."""
        summary = calculate_summary(budget)
        return [
            user_key,
            budget.id,
            budget.period_key,
            str(summary.total_income),
            str(summary.total_expenses),
            str(summary.available_amount),
            budget.updated_at.isoformat(),
            json.dumps(budget.to_document(), ensure_ascii=False),
        ]

    def _row_to_budget(self, row: list) -> MonthlyBudget:
        """Convert a spreadsheet row to a MonthlyBudget."""
        try:
            document = row[_DOCUMENT_COL]
        except IndexError:
            raise StorageError(f"Row for budget {row[_ID_COL] if len(row) > _ID_COL else '?'} has no document")
        return MonthlyBudget.model_validate_json(document)

    def _user_rows(self, user_key: str) -> list[tuple[int, list]]:
        """(1-based sheet row number, row) for every row of a user."""
        sheet = self._client.get_budgets_sheet()
        all_rows = sheet.get_all_values()
        return [
            (idx, row)
            for idx, row in enumerate(all_rows[1:], start=2)  # row 1 is header
            if row and len(row) > _ID_COL and row[_USER_COL] == user_key
        ]

    @retry(**_RETRY)
    async def load_budgets(self, user_key: str) -> list[MonthlyBudget]:
        """Load all budgets of a user."""
        try:
            rows = self._user_rows(user_key)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to load budgets: {e}")

        budgets = []
        for _, row in rows:
            try:
                budgets.append(self._row_to_budget(row))
            except Exception as e:
                # Skip malformed rows
                logger.warning("budget_row_skipped", user_key=user_key, error=str(e))
        return newest_first(budgets)

    @retry(**_RETRY)
    async def save_budget(self, user_key: str, budget: MonthlyBudget) -> bool:
        """Insert the budget row, or overwrite it if the id already exists."""
        try:
            sheet = self._client.get_budgets_sheet()
            new_row = self._budget_to_row(user_key, budget)
            for idx, row in self._user_rows(user_key):
                if row[_ID_COL] == budget.id:
                    sheet.update(
                        range_name=f"A{idx}",
                        values=[new_row],
                        value_input_option="RAW",
                    )
                    return True
            sheet.append_row(new_row, value_input_option="RAW")
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save budget: {e}")

    async def get_budget(self, user_key: str, budget_id: str) -> Optional[MonthlyBudget]:
        """Retrieve a budget by its ID."""
        try:
            for _, row in self._user_rows(user_key):
                if row[_ID_COL] == budget_id:
                    return self._row_to_budget(row)
            return None
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get budget: {e}")

    async def delete_budget(self, user_key: str, budget_id: str) -> bool:
        """Delete a budget row."""
        try:
            sheet = self._client.get_budgets_sheet()
            for idx, row in self._user_rows(user_key):
                if row[_ID_COL] == budget_id:
                    sheet.delete_rows(idx)
                    return True
            return False
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete budget: {e}")
