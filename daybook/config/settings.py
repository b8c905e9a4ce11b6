"""
Configuration Management for Daybook

Two layers of configuration live here:

1. Runtime settings (pydantic-settings): where the journal folder is,
   batch sizes, cache lifetime, logging. Loaded from environment
   variables and an optional .env file.
2. Ledger configuration (plain pydantic value object): marker symbol,
   keyword -> category map, income keyword, budgets. Loaded from a JSON
   file written by the host application.

DESIGN DECISION: LedgerConfig is frozen. A host that edits categories or
budgets builds a new LedgerConfig and hands it to the service in one step.
No component ever mutates a configuration it was given.
"""

import json
from decimal import Decimal
from functools import lru_cache
from pathlib import Path
from typing import Optional

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


logger = structlog.get_logger(__name__)


DEFAULT_CATEGORIES: dict[str, str] = {
    "cy": "Dining",
    "gw": "Shopping",
    "dk": "Loan",
    "jf": "Utilities",
    "qt": "Other",
    "sr": "Income",
}

# Matched longest-first, so "块钱" wins over "块"
DEFAULT_CURRENCY_UNITS: tuple[str, ...] = ("块钱", "元", "块")


class BudgetConfig(BaseModel):
    """
    Monthly budget thresholds.

    Category budgets are keyed by keyword, not by display name, so that
    renaming a category keeps its budget.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    monthly_total: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Total monthly budget (0 means unset)",
    )
    category_budgets: dict[str, Decimal] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("category_budgets", "categories"),
        description="Keyword -> monthly budget",
    )
    enable_alerts: bool = Field(
        default=False,
        validation_alias=AliasChoices("enable_alerts", "enableAlerts"),
        description="Whether budget status is computed at all",
    )
    alert_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        validation_alias=AliasChoices("alert_threshold", "alertThreshold"),
        description="Progress fraction at which a warning is raised",
    )

    @model_validator(mode="before")
    @classmethod
    def unwrap_monthly_block(cls, data):
        """Accept the nested {"monthly": {"total", "categories"}} layout."""
        if isinstance(data, dict) and isinstance(data.get("monthly"), dict):
            data = dict(data)
            monthly = data.pop("monthly")
            data.setdefault("monthly_total", monthly.get("total", 0))
            data.setdefault("category_budgets", monthly.get("categories", {}))
        return data


class LedgerConfig(BaseModel):
    """
    Everything the core needs to know about the user's bookkeeping
    conventions.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    app_name: str = Field(
        default="Daybook",
        validation_alias=AliasChoices("app_name", "appName"),
    )
    marker: str = Field(
        default="#",
        min_length=1,
        validation_alias=AliasChoices("marker", "expenseEmoji"),
        description="Symbol that must prefix a keyword on a transaction line",
    )
    categories: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORIES),
        description="Keyword -> category display name",
    )
    income_keyword: str = Field(
        default="sr",
        min_length=1,
        validation_alias=AliasChoices("income_keyword", "incomeKeyword"),
    )
    default_category: Optional[str] = Field(
        default="cy",
        validation_alias=AliasChoices("default_category", "defaultCategory"),
        description="Keyword preselected for quick entry",
    )
    journals_path: str = Field(
        default="journals",
        validation_alias=AliasChoices("journals_path", "journalsPath"),
        description="Corpus root holding the dated journal documents",
    )
    currency_units: tuple[str, ...] = Field(
        default=DEFAULT_CURRENCY_UNITS,
        validation_alias=AliasChoices("currency_units", "currencyUnits"),
    )
    currency_symbol: str = Field(
        default="¥",
        validation_alias=AliasChoices("currency_symbol", "currencySymbol"),
    )
    uncategorized_label: str = Field(
        default="uncategorized",
        min_length=1,
    )
    budgets: BudgetConfig = Field(default_factory=BudgetConfig)

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: dict[str, str]) -> dict[str, str]:
        """Keywords and category names must both be non-empty."""
        cleaned = {}
        for keyword, name in v.items():
            keyword = keyword.strip()
            name = name.strip()
            if not keyword or not name:
                raise ValueError("Category keywords and names cannot be empty")
            cleaned[keyword] = name
        return cleaned

    @field_validator("journals_path")
    @classmethod
    def normalize_journals_path(cls, v: str) -> str:
        return v.strip("/")

    @field_validator("currency_units")
    @classmethod
    def sort_units_longest_first(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(sorted((u for u in v if u), key=len, reverse=True))


class DaybookSettings(BaseSettings):
    """
    Runtime settings.

    Loads configuration from environment variables (DAYBOOK_*) and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="DAYBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_dir: Path = Field(
        default=Path("."),
        description="Directory the corpus paths are relative to (the vault)",
    )
    ledger_config_path: Optional[Path] = Field(
        default=None,
        description="JSON file holding the LedgerConfig",
    )
    document_extensions: str = Field(
        default=".md",
        description="Comma-separated list of document file extensions",
    )

    # Record cache
    cache_ttl_seconds: float = Field(
        default=30.0,
        ge=0.0,
        description="How long a loaded record set stays fresh",
    )

    # Bounded concurrency windows
    scan_batch_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Documents tested concurrently in the prefiltered scan",
    )
    traversal_batch_size: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Documents read concurrently in the full traversal",
    )
    read_batch_size: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Documents read concurrently when collecting records",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(
        default=True,
        description="Render log lines as JSON (console renderer otherwise)",
    )

    @property
    def extensions_list(self) -> list[str]:
        """Get document extensions as a list."""
        exts = []
        for ext in self.document_extensions.split(","):
            ext = ext.strip().lower()
            if ext:
                exts.append(ext if ext.startswith(".") else f".{ext}")
        return exts


@lru_cache()
def get_settings() -> DaybookSettings:
    """
    Get runtime settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return DaybookSettings()


def default_ledger_config() -> LedgerConfig:
    return LedgerConfig()


def load_ledger_config(path: Optional[Path]) -> LedgerConfig:
    """
    Load the ledger configuration from a JSON file.

    A missing, unreadable or invalid file falls back to the defaults;
    the reason is logged, never raised.
    """
    if path is None:
        return default_ledger_config()

    path = Path(path)
    if not path.exists():
        logger.info("ledger_config_missing", path=str(path))
        return default_ledger_config()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
        config = LedgerConfig.model_validate(raw)
    except (OSError, ValueError, ValidationError) as e:
        logger.error("ledger_config_invalid", path=str(path), error=str(e))
        return default_ledger_config()

    logger.info(
        "ledger_config_loaded",
        path=str(path),
        keywords=len(config.categories),
        budgets_enabled=config.budgets.enable_alerts,
    )
    return config
