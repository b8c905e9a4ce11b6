"""Configuration package."""

from daybook.config.settings import (
    DEFAULT_CATEGORIES,
    DEFAULT_CURRENCY_UNITS,
    BudgetConfig,
    DaybookSettings,
    LedgerConfig,
    default_ledger_config,
    get_settings,
    load_ledger_config,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "DEFAULT_CURRENCY_UNITS",
    "BudgetConfig",
    "DaybookSettings",
    "LedgerConfig",
    "default_ledger_config",
    "get_settings",
    "load_ledger_config",
]
