"""
Budget Evaluation

Compares aggregated spending against the configured monthly budgets.

Alert rule (total and per category alike):
    progress >= 1          -> EXCEEDED
    progress >= threshold  -> WARNING
    otherwise              -> no alert

Alerts are read-only annotations on the stats. They never block parsing,
aggregation or retrieval.
"""

from decimal import Decimal
from typing import Optional

from daybook.config import BudgetConfig
from daybook.models.ledger import (
    AggregatedStats,
    AlertType,
    BudgetAlert,
    BudgetStatus,
    CategoryBudgetStatus,
)
from daybook.parsing import CategoryDictionary


TOTAL_BUDGET_LABEL = "Total budget"

ONE = Decimal("1")
ZERO = Decimal("0")


class BudgetEvaluator:
    """
    Derives a BudgetStatus from stats and budget configuration.
    """

    def __init__(
        self,
        dictionary: CategoryDictionary,
        currency_symbol: str = "¥",
    ):
        self._dictionary = dictionary
        self._currency = currency_symbol

    def evaluate(
        self,
        stats: AggregatedStats,
        budget_config: BudgetConfig,
    ) -> Optional[BudgetStatus]:
        """
        Returns None when budgets are disabled.
        """
        if not budget_config.enable_alerts:
            return None

        threshold = Decimal(str(budget_config.alert_threshold))
        total_budget = budget_config.monthly_total
        total_spent = stats.total_expense
        total_progress = total_spent / total_budget if total_budget > 0 else ZERO

        status = BudgetStatus(
            total_budget=total_budget,
            total_spent=total_spent,
            total_remaining=total_budget - total_spent,
            total_progress=total_progress,
        )

        # An unset total budget never alerts
        if total_budget > 0:
            alert = self._alert_for(
                TOTAL_BUDGET_LABEL, total_spent, total_budget, total_progress, threshold
            )
            if alert:
                status.alerts.append(alert)

        for keyword, budget in budget_config.category_budgets.items():
            category = self._dictionary.lookup(keyword)
            if category is None or budget <= 0:
                continue

            bucket = stats.category_stats.get(category)
            spent = bucket.total if bucket else ZERO
            progress = spent / budget

            status.categories[category] = CategoryBudgetStatus(
                keyword=self._dictionary.canonical(keyword) or keyword,
                budget=budget,
                spent=spent,
                remaining=budget - spent,
                progress=progress,
            )

            alert = self._alert_for(category, spent, budget, progress, threshold)
            if alert:
                status.alerts.append(alert)

        return status

    def _alert_for(
        self,
        label: str,
        spent: Decimal,
        budget: Decimal,
        progress: Decimal,
        threshold: Decimal,
    ) -> Optional[BudgetAlert]:
        if progress < threshold:
            return None

        if progress >= ONE:
            over = spent - budget
            return BudgetAlert(
                type=AlertType.EXCEEDED,
                category=label,
                message=f"{label} exceeded budget by {self._currency}{over:.2f}",
                progress=progress,
            )

        return BudgetAlert(
            type=AlertType.WARNING,
            category=label,
            message=f"{label} reached {progress * 100:.0f}% of budget",
            progress=progress,
        )
