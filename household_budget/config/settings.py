"""
Configuration Management for Household Budget

Every setting is read from environment variables (and an optional .env
file) through pydantic-settings.

DESIGN DECISION: One module owns configuration.
This makes it easy to see which storage backends are in play and
lets a bad value fail at startup instead of mid-session.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BudgetSettings(BaseSettings):
    """Defaults applied to new monthly budgets and item drafts."""

    model_config = SettingsConfigDict(
        env_prefix="BUDGET_",
        extra="ignore"
    )

    default_tithe_percentage: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Tithe percentage for newly created budgets"
    )
    default_savings_percentage: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="Savings percentage for newly created budgets"
    )
    max_item_amount: float = Field(
        default=100_000_000.0,
        gt=0,
        description="Amounts above this produce a non-blocking warning"
    )
    registry_path: Optional[str] = Field(
        default=None,
        description="Optional JSON file with a custom category taxonomy"
    )

    @field_validator('registry_path')
    @classmethod
    def validate_registry_path(cls, v: Optional[str]) -> Optional[str]:
        """Fail early if a custom taxonomy was configured but is missing."""
        if v is not None and not Path(v).is_file():
            raise ValueError(f"Category registry file not found: {v}")
        return v


class StorageSettings(BaseSettings):
    """Which record store to use and where local data lives."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        extra="ignore"
    )

    backend: Literal["memory", "local", "sheets"] = Field(
        default="local",
        description="Primary record store"
    )
    local_data_dir: str = Field(
        default=".budget_data",
        description="Directory holding one JSON document per user"
    )
    fallback_to_local: bool = Field(
        default=True,
        description="Fall back to the local store when the remote one fails"
    )


class GoogleSheetsSettings(BaseSettings):
    """Where the remote budgets worksheet lives."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        extra="ignore"
    )

    credentials_path: str = Field(
        ...,
        description="Path to Google service account credentials JSON"
    )
    spreadsheet_id: str = Field(
        ...,
        description="ID of the Google Sheets spreadsheet to use"
    )
    budgets_sheet_name: str = Field(
        default="Budgets",
        description="Name of the sheet holding monthly budgets"
    )

    @field_validator('credentials_path')
    @classmethod
    def validate_credentials_path(cls, v: str) -> str:
        """A missing file only warns; it may be mounted after startup."""
        if not Path(v).exists():
            import warnings
            warnings.warn(
                f"Service account file {v} does not exist. "
                "Remote storage will fail until it is present."
            )
        return v


class AppSettings(BaseSettings):
    """
    Process-wide settings: environment name and logging.

    Read without a prefix (LOG_LEVEL, LOG_JSON, ...).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (False gives console output)"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Entry point to every settings section.

    Each property builds its section on access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sections are built lazily so a partial environment still works
    # (Google Sheets is only required when that backend is selected)

    @property
    def budget(self) -> BudgetSettings:
        return BudgetSettings()

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    The process-wide Settings instance.

    Sections re-read the environment on access; the container itself is
    built once. Tests call get_settings.cache_clear() between cases.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Startup check of every settings section.

    Returns {section: ok} plus {section}_error messages for failures.
    Google Sheets is only checked when it is the selected backend.
    """
    results = {}

    settings = get_settings()

    sections = {
        "budget": lambda: settings.budget,
        "storage": lambda: settings.storage,
        "app": lambda: settings.app,
    }

    try:
        uses_sheets = settings.storage.backend == "sheets"
    except Exception:
        uses_sheets = False
    if uses_sheets:
        sections["google_sheets"] = lambda: settings.google_sheets

    for name, load in sections.items():
        try:
            load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
