"""
Shared fixtures.

Everything runs against the in-memory corpus; nothing touches the network.
File system tests use pytest's tmp_path.
"""

from datetime import date

import pytest

from daybook.audit import AuditLogger
from daybook.config import BudgetConfig, LedgerConfig
from daybook.parsing import CategoryDictionary, RecordParser
from daybook.services.corpus import InMemoryCorpus


# Friday
TODAY = date(2024, 3, 15)


SAMPLE_JOURNALS = {
    "journals/2024-03-10.md": "- #cy 50 lunch\n- #gw 120元 shoes\n- met Alex for coffee\n",
    "journals/2024-03-12.md": "- #sr 8000 salary\n- #cy 2024-03-01 30 dinner\n",
    "journals/2024-03-14.md": "- nothing to record today\n",
    "journals/ideas.md": "- #cy 999 not a journal day\n",
    "pages/recipes.md": "- #cy 10 outside the journal folder\n",
}


@pytest.fixture
def ledger_config() -> LedgerConfig:
    return LedgerConfig()


@pytest.fixture
def budget_config() -> BudgetConfig:
    return BudgetConfig(
        monthly_total="1000",
        category_budgets={"cy": "100", "gw": "500"},
        enable_alerts=True,
        alert_threshold=0.8,
    )


@pytest.fixture
def dictionary(ledger_config) -> CategoryDictionary:
    return CategoryDictionary.from_config(ledger_config)


@pytest.fixture
def parser(ledger_config, dictionary) -> RecordParser:
    return RecordParser(ledger_config, dictionary, today=lambda: TODAY)


@pytest.fixture
def corpus() -> InMemoryCorpus:
    return InMemoryCorpus(SAMPLE_JOURNALS)


@pytest.fixture
def audit_logger() -> AuditLogger:
    return AuditLogger()
