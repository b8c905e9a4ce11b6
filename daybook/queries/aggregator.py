"""
Aggregation Engine

DESIGN DECISION: Aggregation is DETERMINISTIC and holds no state.
Stats are rebuilt from the record collection every time the records or
the active time range change. Nothing is updated incrementally.

Every record lands in exactly one category bucket and one date bucket, so:
    sum(category totals) == total_income + total_expense
    sum(daily income)    == total_income
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Union

from daybook.models.ledger import (
    AggregatedStats,
    CategoryStats,
    DailyStats,
    DateRange,
    TimeRangePreset,
    TransactionRecord,
)


PRESET_LABELS = {
    TimeRangePreset.THIS_WEEK: "This week",
    TimeRangePreset.LAST_WEEK: "Last week",
    TimeRangePreset.THIS_MONTH: "This month",
    TimeRangePreset.LAST_MONTH: "Last month",
}


def aggregate(records: Iterable[TransactionRecord]) -> AggregatedStats:
    """
    Roll records up into income/expense totals, category buckets and
    date buckets. The input is never modified and nothing is excluded.
    """
    total_income = Decimal("0")
    total_expense = Decimal("0")
    categories: dict[str, CategoryStats] = {}
    days: dict[date, DailyStats] = {}

    for record in records:
        if record.is_income:
            total_income += record.amount
        else:
            total_expense += record.amount

        bucket = categories.setdefault(record.category, CategoryStats())
        bucket.total += record.amount
        bucket.count += 1
        bucket.records.append(record)

        day = days.setdefault(record.date, DailyStats())
        if record.is_income:
            day.income += record.amount
        else:
            day.expense += record.amount
        day.records.append(record)

    return AggregatedStats(
        total_income=total_income,
        total_expense=total_expense,
        category_stats=categories,
        daily_stats=days,
    )


def _as_date(value: Union[date, str]) -> date:
    return value if isinstance(value, date) else date.fromisoformat(value)


def filter_by_date_range(
    records: Iterable[TransactionRecord],
    start: Union[date, str],
    end: Union[date, str],
) -> list[TransactionRecord]:
    """
    Records whose effective date lies in [start, end], both inclusive.

    Order is preserved, so filtering twice with the same range is a no-op.
    """
    start_date = _as_date(start)
    end_date = _as_date(end)
    return [r for r in records if start_date <= r.date <= end_date]


def week_bounds(day: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing `day`."""
    monday = day - timedelta(days=day.weekday())
    return monday, monday + timedelta(days=6)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def resolve_time_range(
    preset: Union[TimeRangePreset, str],
    today: Optional[date] = None,
) -> DateRange:
    """
    Turn a named preset into a concrete inclusive DateRange.

    Raises:
        ValueError: For an unknown preset name
    """
    preset = TimeRangePreset(preset)
    today = today or date.today()

    if preset == TimeRangePreset.THIS_WEEK:
        start, end = week_bounds(today)
    elif preset == TimeRangePreset.LAST_WEEK:
        start, end = week_bounds(today - timedelta(days=7))
    elif preset == TimeRangePreset.THIS_MONTH:
        start, end = month_bounds(today.year, today.month)
    else:
        first_of_month = today.replace(day=1)
        previous = first_of_month - timedelta(days=1)
        start, end = month_bounds(previous.year, previous.month)

    return DateRange(start=start, end=end, label=PRESET_LABELS[preset])
