"""
Tests for aggregation, date filtering, time presets and budget evaluation.

These are pure functions over record collections: no corpus involved.
"""

import pytest
from datetime import date
from decimal import Decimal

from daybook.config import BudgetConfig
from daybook.models.ledger import AlertType, TimeRangePreset, TransactionRecord
from daybook.queries import (
    TOTAL_BUDGET_LABEL,
    BudgetEvaluator,
    aggregate,
    filter_by_date_range,
    month_bounds,
    resolve_time_range,
    week_bounds,
)


def record(day: int, keyword: str, category: str, amount: str, income: bool = False):
    return TransactionRecord(
        date=date(2024, 3, day),
        source_date=date(2024, 3, day),
        keyword=keyword,
        category=category,
        amount=Decimal(amount),
        is_income=income,
    )


@pytest.fixture
def records():
    return [
        record(12, "sr", "Income", "8000", income=True),
        record(10, "cy", "Dining", "50"),
        record(10, "gw", "Shopping", "120"),
        record(3, "cy", "Dining", "30"),
        record(1, "sr", "Income", "200.50", income=True),
    ]


class TestAggregate:
    """Tests for the aggregation engine."""

    def test_totals(self, records):
        stats = aggregate(records)
        assert stats.total_income == Decimal("8200.50")
        assert stats.total_expense == Decimal("200")
        assert stats.balance == Decimal("8000.50")

    def test_category_totals_cover_everything(self, records):
        """Category totals add up to income plus expense."""
        stats = aggregate(records)
        assert sum(c.total for c in stats.category_stats.values()) == (
            stats.total_income + stats.total_expense
        )
        assert stats.record_count == len(records)

    def test_daily_totals_cover_income(self, records):
        stats = aggregate(records)
        assert sum(d.income for d in stats.daily_stats.values()) == stats.total_income
        assert sum(d.expense for d in stats.daily_stats.values()) == stats.total_expense

    def test_buckets(self, records):
        stats = aggregate(records)
        dining = stats.category_stats["Dining"]
        assert dining.total == Decimal("80")
        assert dining.count == 2
        assert stats.daily_stats[date(2024, 3, 10)].expense == Decimal("170")
        assert len(stats.daily_stats[date(2024, 3, 10)].records) == 2

    def test_empty_input(self):
        stats = aggregate([])
        assert stats.total_income == Decimal("0")
        assert stats.category_stats == {}
        assert stats.daily_stats == {}

    def test_input_not_modified(self, records):
        before = list(records)
        aggregate(records)
        assert records == before


class TestFilterByDateRange:
    """Tests for inclusive date filtering."""

    def test_bounds_are_inclusive(self, records):
        filtered = filter_by_date_range(records, date(2024, 3, 3), date(2024, 3, 10))
        assert [r.date.day for r in filtered] == [10, 10, 3]

    def test_refiltering_is_idempotent(self, records):
        once = filter_by_date_range(records, "2024-03-01", "2024-03-10")
        twice = filter_by_date_range(once, "2024-03-01", "2024-03-10")
        assert once == twice

    def test_accepts_iso_strings(self, records):
        filtered = filter_by_date_range(records, "2024-03-12", "2024-03-12")
        assert len(filtered) == 1

    def test_empty_range(self, records):
        assert filter_by_date_range(records, date(2024, 4, 1), date(2024, 4, 30)) == []


class TestTimeRanges:
    """Tests for the named time presets."""

    def test_week_bounds_monday_to_sunday(self):
        assert week_bounds(date(2024, 3, 15)) == (date(2024, 3, 11), date(2024, 3, 17))
        assert week_bounds(date(2024, 3, 11)) == (date(2024, 3, 11), date(2024, 3, 17))
        assert week_bounds(date(2024, 3, 17)) == (date(2024, 3, 11), date(2024, 3, 17))

    def test_month_bounds_leap_year(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))

    @pytest.mark.parametrize("preset,start,end", [
        (TimeRangePreset.THIS_WEEK, date(2024, 3, 11), date(2024, 3, 17)),
        (TimeRangePreset.LAST_WEEK, date(2024, 3, 4), date(2024, 3, 10)),
        (TimeRangePreset.THIS_MONTH, date(2024, 3, 1), date(2024, 3, 31)),
        (TimeRangePreset.LAST_MONTH, date(2024, 2, 1), date(2024, 2, 29)),
    ])
    def test_presets(self, preset, start, end):
        date_range = resolve_time_range(preset, date(2024, 3, 15))
        assert (date_range.start, date_range.end) == (start, end)
        assert date_range.label

    def test_last_month_in_january(self):
        date_range = resolve_time_range("last_month", date(2024, 1, 20))
        assert (date_range.start, date_range.end) == (date(2023, 12, 1), date(2023, 12, 31))

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            resolve_time_range("next_decade", date(2024, 3, 15))


class TestBudgetEvaluator:
    """Tests for budget progress and alerts."""

    def _stats(self, dining: str):
        return aggregate([record(10, "cy", "Dining", dining)])

    def _budgets(self, **overrides):
        fields = {
            "monthly_total": Decimal("0"),
            "category_budgets": {"cy": Decimal("100")},
            "enable_alerts": True,
            "alert_threshold": 0.8,
        }
        fields.update(overrides)
        return BudgetConfig(**fields)

    def test_disabled_returns_none(self, dictionary):
        evaluator = BudgetEvaluator(dictionary)
        assert evaluator.evaluate(self._stats("50"), self._budgets(enable_alerts=False)) is None

    def test_warning_at_threshold(self, dictionary):
        """Exactly 80% of budget raises one warning."""
        status = BudgetEvaluator(dictionary).evaluate(self._stats("80"), self._budgets())
        assert len(status.alerts) == 1
        assert status.alerts[0].type == AlertType.WARNING
        assert status.alerts[0].category == "Dining"
        assert status.alerts[0].message == "Dining reached 80% of budget"

    def test_exceeded_at_full_budget(self, dictionary):
        status = BudgetEvaluator(dictionary).evaluate(self._stats("100"), self._budgets())
        assert len(status.alerts) == 1
        assert status.alerts[0].type == AlertType.EXCEEDED
        assert status.alerts[0].message == "Dining exceeded budget by ¥0.00"

    def test_no_alert_below_threshold(self, dictionary):
        status = BudgetEvaluator(dictionary).evaluate(self._stats("79"), self._budgets())
        assert status.alerts == []
        assert status.categories["Dining"].progress == Decimal("0.79")

    def test_exceeded_message_amount(self, dictionary):
        status = BudgetEvaluator(dictionary, currency_symbol="$").evaluate(
            self._stats("150.5"), self._budgets()
        )
        assert status.alerts[0].message == "Dining exceeded budget by $50.50"

    def test_unset_total_never_alerts(self, dictionary):
        status = BudgetEvaluator(dictionary).evaluate(self._stats("500"), self._budgets(
            category_budgets={},
        ))
        assert status.total_progress == Decimal("0")
        assert status.alerts == []

    def test_total_budget_alert(self, dictionary):
        status = BudgetEvaluator(dictionary).evaluate(self._stats("900"), self._budgets(
            monthly_total=Decimal("1000"),
            category_budgets={},
        ))
        assert status.total_remaining == Decimal("100")
        assert [a.category for a in status.alerts] == [TOTAL_BUDGET_LABEL]
        assert status.alerts[0].type == AlertType.WARNING

    def test_category_without_activity(self, dictionary):
        status = BudgetEvaluator(dictionary).evaluate(self._stats("10"), self._budgets(
            category_budgets={"gw": Decimal("200")},
        ))
        shopping = status.categories["Shopping"]
        assert shopping.spent == Decimal("0")
        assert shopping.remaining == Decimal("200")
        assert status.alerts == []

    def test_unknown_and_zero_budgets_skipped(self, dictionary):
        status = BudgetEvaluator(dictionary).evaluate(self._stats("10"), self._budgets(
            category_budgets={"zz": Decimal("10"), "gw": Decimal("0")},
        ))
        assert status.categories == {}

    def test_income_does_not_count_as_spending(self, dictionary):
        stats = aggregate([
            record(10, "sr", "Income", "5000", income=True),
            record(10, "cy", "Dining", "10"),
        ])
        status = BudgetEvaluator(dictionary).evaluate(stats, self._budgets(
            monthly_total=Decimal("100"),
        ))
        assert status.total_spent == Decimal("10")
        assert status.alerts == []
