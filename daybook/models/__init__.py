"""
Data Models Package

This package contains all Pydantic models used by Daybook.
Everything the core returns to its callers conforms to these schemas.
"""

from daybook.models.ledger import (
    AggregatedStats,
    AlertType,
    BudgetAlert,
    BudgetStatus,
    CategoryBudgetStatus,
    CategoryStats,
    DailyStats,
    DateRange,
    SearchTier,
    TimeRangePreset,
    TransactionRecord,
)
from daybook.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "AggregatedStats",
    "AlertType",
    "BudgetAlert",
    "BudgetStatus",
    "CategoryBudgetStatus",
    "CategoryStats",
    "DailyStats",
    "DateRange",
    "SearchTier",
    "TimeRangePreset",
    "TransactionRecord",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
