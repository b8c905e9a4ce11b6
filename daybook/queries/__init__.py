"""Aggregation and budget package."""

from daybook.queries.aggregator import (
    aggregate,
    filter_by_date_range,
    month_bounds,
    resolve_time_range,
    week_bounds,
)
from daybook.queries.budget import TOTAL_BUDGET_LABEL, BudgetEvaluator

__all__ = [
    "BudgetEvaluator",
    "TOTAL_BUDGET_LABEL",
    "aggregate",
    "filter_by_date_range",
    "month_bounds",
    "resolve_time_range",
    "week_bounds",
]
