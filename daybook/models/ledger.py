"""
Core Data Models for Daybook

These models define the schemas for everything the core hands back to
its callers:
1. TransactionRecord - one bookkeeping line, parsed
2. AggregatedStats - category / daily roll-ups of a record collection
3. BudgetStatus - budget progress and alerts derived from the stats

DESIGN DECISION: Records are frozen. Stats and budget status are built
fresh from a record collection every time and never patched.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    model_validator,
)


# =============================================================================
# ENUMS
# =============================================================================

class AlertType(str, Enum):
    """Budget alert severity."""
    WARNING = "warning"    # progress >= threshold
    EXCEEDED = "exceeded"  # progress >= 1


class TimeRangePreset(str, Enum):
    """Named time ranges offered to the user. Weeks run Monday to Sunday."""
    THIS_WEEK = "this_week"
    LAST_WEEK = "last_week"
    THIS_MONTH = "this_month"
    LAST_MONTH = "last_month"


class SearchTier(str, Enum):
    """Which retrieval strategy produced a document set."""
    ENGINE = "engine"
    PREFILTERED_SCAN = "prefiltered_scan"
    FULL_TRAVERSAL = "full_traversal"


# =============================================================================
# RECORDS
# =============================================================================

class TransactionRecord(BaseModel):
    """
    One transaction parsed out of a journal line.

    `date` is the economic date. It differs from `source_date` (the date of
    the journal document) only when the line carries its own date, which
    marks the record as a backfill.
    """
    model_config = ConfigDict(frozen=True)

    date: dt.date = Field(..., description="Effective transaction date")
    source_date: dt.date = Field(..., description="Date of the containing document")
    keyword: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0, description="Always positive")
    is_income: bool = False
    description: str = ""
    raw_text: str = ""

    @computed_field
    @property
    def is_backfill(self) -> bool:
        return self.date != self.source_date


class DateRange(BaseModel):
    """Inclusive calendar date range."""
    model_config = ConfigDict(frozen=True)

    start: dt.date
    end: dt.date
    label: Optional[str] = None

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("Date range end cannot be before start")
        return self

    def contains(self, day: dt.date) -> bool:
        return self.start <= day <= self.end


# =============================================================================
# AGGREGATED STATS
# =============================================================================

class CategoryStats(BaseModel):
    """Roll-up of every record in one category."""

    total: Decimal = Decimal("0")
    count: int = 0
    records: list[TransactionRecord] = Field(default_factory=list)


class DailyStats(BaseModel):
    """Roll-up of every record on one effective date."""

    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")
    records: list[TransactionRecord] = Field(default_factory=list)

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


class BudgetAlert(BaseModel):
    """An informational budget annotation. Never blocks anything."""
    model_config = ConfigDict(frozen=True)

    type: AlertType
    category: str
    message: str
    progress: Decimal


class CategoryBudgetStatus(BaseModel):
    """Budget progress for a single category."""

    keyword: str
    budget: Decimal
    spent: Decimal
    remaining: Decimal
    progress: Decimal


class BudgetStatus(BaseModel):
    """
    Budget progress derived from stats + budget configuration.

    Has no identity of its own; recomputed whenever stats are.
    `total_progress` may exceed 1.
    """

    total_budget: Decimal
    total_spent: Decimal
    total_remaining: Decimal
    total_progress: Decimal
    categories: dict[str, CategoryBudgetStatus] = Field(default_factory=dict)
    alerts: list[BudgetAlert] = Field(default_factory=list)

    @property
    def has_alerts(self) -> bool:
        return len(self.alerts) > 0


class AggregatedStats(BaseModel):
    """
    Category and daily roll-ups of one record collection.

    CRITICAL: built wholesale by the aggregator for a given collection.
    Callers recompute it whenever the records or the active range change.
    """

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    category_stats: dict[str, CategoryStats] = Field(default_factory=dict)
    daily_stats: dict[dt.date, DailyStats] = Field(default_factory=dict)
    budget_status: Optional[BudgetStatus] = None

    @property
    def balance(self) -> Decimal:
        """Income minus expense."""
        return self.total_income - self.total_expense

    @property
    def record_count(self) -> int:
        return sum(c.count for c in self.category_stats.values())

    def categories_by_total(self) -> list[tuple[str, CategoryStats]]:
        """Categories ordered by total, largest first."""
        return sorted(
            self.category_stats.items(),
            key=lambda item: item[1].total,
            reverse=True,
        )
