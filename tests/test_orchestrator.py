"""
Flow tests for LedgerService against the in-memory corpus.
"""

import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from daybook.audit import AuditLogger
from daybook.config import BudgetConfig, DaybookSettings, LedgerConfig
from daybook.entry import EntryInputError
from daybook.models.audit import AuditEventType
from daybook.models.ledger import AlertType, DateRange, TimeRangePreset
from daybook.orchestrator import LedgerService, create_app_components
from daybook.retrieval import RecordCache
from daybook.services.corpus import (
    CorpusError,
    CorpusInterface,
    InMemoryCorpus,
    InMemorySearchFacility,
    SearchFacilityInterface,
)
from daybook.services.notifications import CollectingNotifier


TODAY = date(2024, 3, 15)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class RawDictSearch(SearchFacilityInterface):
    async def search(self, term, scoped_path):
        return [{"documentPath": "journals/2024-03-10.md"}]


class ReadOnlyCorpus(CorpusInterface):
    async def list_documents(self, path_prefix):
        return []

    async def read_document(self, handle):
        return ""

    async def document_exists(self, path):
        return True


@pytest.fixture
def notifier():
    return CollectingNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_service(corpus, notifier, audit_logger, clock):
    def _make(config=None, **kwargs):
        kwargs.setdefault("corpus", corpus)
        return LedgerService(
            config=config or LedgerConfig(),
            notifier=notifier,
            audit_logger=audit_logger,
            cache=RecordCache(ttl_seconds=30, clock=clock),
            settings=DaybookSettings(),
            today=lambda: TODAY,
            **kwargs,
        )
    return _make


def event_types(audit_logger: AuditLogger) -> list[AuditEventType]:
    return [e.event_type for e in audit_logger.history]


class TestReload:
    """Tests for the reload flow."""

    def test_reload_returns_records_newest_first(self, make_service, audit_logger):
        service = make_service()
        records = asyncio.run(service.reload())

        assert [r.date for r in records] == [
            date(2024, 3, 12),
            date(2024, 3, 10),
            date(2024, 3, 10),
            date(2024, 3, 1),
        ]
        assert service.last_tier == "prefiltered_scan"

        loaded = [e for e in audit_logger.history if e.event_type == AuditEventType.RECORDS_LOADED]
        assert loaded[0].details["record_count"] == 4
        assert loaded[0].details["date_span"] == ["2024-03-01", "2024-03-12"]
        assert loaded[0].details["recent_counts"]["2024-03-10"] == 2

    def test_second_reload_served_from_cache(self, make_service, corpus, audit_logger):
        service = make_service()
        first = asyncio.run(service.reload())
        reads = corpus.read_count
        second = asyncio.run(service.reload())

        assert first == second
        assert corpus.read_count == reads
        assert AuditEventType.RELOAD_SERVED_FROM_CACHE in event_types(audit_logger)

    def test_cache_expires(self, make_service, corpus, clock):
        service = make_service()
        asyncio.run(service.reload())
        reads = corpus.read_count
        clock.now = 31
        asyncio.run(service.reload())
        assert corpus.read_count > reads

    def test_force_refresh_bypasses_cache(self, make_service, corpus):
        service = make_service()
        asyncio.run(service.reload())
        reads = corpus.read_count
        asyncio.run(service.reload(force_refresh=True))
        assert corpus.read_count > reads

    def test_search_facility_is_used(self, make_service, corpus):
        search = InMemorySearchFacility(corpus)
        service = make_service(search=search)
        records = asyncio.run(service.reload())

        assert service.last_tier == "engine"
        # The engine also reports journals/ideas.md, dated today
        assert records[0].date == TODAY
        assert len(records) == 5

    def test_malformed_search_results_do_not_break_reload(self, make_service, notifier):
        """Bad hits from the search facility fall back to the scan quietly."""
        service = make_service(search=RawDictSearch())
        records = asyncio.run(service.reload())

        assert len(records) == 4
        assert service.last_tier == "prefiltered_scan"
        assert notifier.messages == []

    def test_missing_journal_folder(self, make_service, notifier, audit_logger):
        """A missing folder gives no records and tells the user."""
        service = make_service(config=LedgerConfig(journals_path="diary"))
        records = asyncio.run(service.reload())

        assert records == []
        assert notifier.messages == ["Journal folder not found: diary"]
        assert AuditEventType.CORPUS_ROOT_MISSING in event_types(audit_logger)

    def test_failure_serves_last_known_records(self, make_service, corpus, notifier):
        service = make_service()
        first = asyncio.run(service.reload())

        corpus.fail_listing("disk unavailable")
        second = asyncio.run(service.reload(force_refresh=True))

        assert second == first
        assert notifier.messages == ["Failed to load records, showing cached data"]

    def test_failure_without_cache_gives_empty(self, make_service, corpus, notifier, audit_logger):
        corpus.fail_listing("disk unavailable")
        service = make_service()
        records = asyncio.run(service.reload())

        assert records == []
        assert len(notifier.messages) == 1
        failed = [e for e in audit_logger.history if e.event_type == AuditEventType.RELOAD_FAILED]
        assert failed[0].details["fallback_record_count"] == 0


class TestStats:
    """Tests for filtering and aggregation through the service."""

    def test_default_range_is_this_month(self, make_service):
        service = make_service()
        date_range, records, stats = asyncio.run(service.stats_for_range())

        assert (date_range.start, date_range.end) == (date(2024, 3, 1), date(2024, 3, 31))
        assert len(records) == 4
        assert stats.total_income == Decimal("8000")
        assert stats.total_expense == Decimal("200")
        assert stats.budget_status is None

    def test_preset_selection(self, make_service):
        service = make_service()
        date_range, records, stats = asyncio.run(
            service.stats_for_range(TimeRangePreset.LAST_WEEK)
        )
        assert date_range.start == date(2024, 3, 4)
        assert stats.total_expense == Decimal("170")
        assert stats.total_income == Decimal("0")

    def test_explicit_range(self, make_service):
        service = make_service()
        selection = DateRange(start=date(2024, 3, 1), end=date(2024, 3, 1))
        _, records, _ = asyncio.run(service.stats_for_range(selection))
        assert len(records) == 1
        assert records[0].is_backfill is True

    def test_budget_alerts_attached(self, make_service, budget_config, audit_logger):
        config = LedgerConfig(budgets=budget_config)
        service = make_service(config=config)
        _, _, stats = asyncio.run(service.stats_for_range("this_month"))

        status = stats.budget_status
        assert status is not None
        assert [(a.category, a.type) for a in status.alerts] == [("Dining", AlertType.WARNING)]
        assert AuditEventType.BUDGET_ALERTS_RAISED in event_types(audit_logger)

    def test_compute_stats_on_filtered_records(self, make_service):
        service = make_service()
        records = asyncio.run(service.reload())
        filtered = service.filter_by_date_range(records, "2024-03-10", "2024-03-12")
        stats = service.compute_stats(filtered)
        assert stats.record_count == 3


class TestQuickEntry:
    """Tests for appending entries through the service."""

    def test_record_entry(self, make_service, corpus):
        service = make_service()
        asyncio.run(service.reload())

        record = asyncio.run(service.record_entry("cy", "25 coffee"))
        assert record.amount == Decimal("25")
        assert record.date == TODAY
        assert corpus.content_of("journals/2024-03-15.md") == "- #cy 25 coffee"

        records = asyncio.run(service.reload())
        assert len(records) == 5
        assert records[0].description == "coffee"

    def test_default_category(self, make_service):
        service = make_service()
        record = asyncio.run(service.record_entry(None, "5"))
        assert record.keyword == "cy"

    def test_rejected_entry(self, make_service, audit_logger):
        service = make_service()
        with pytest.raises(EntryInputError):
            asyncio.run(service.record_entry("zz", "5"))
        with pytest.raises(EntryInputError):
            asyncio.run(service.record_entry("cy", "lunch"))
        rejected = [e for e in audit_logger.history if e.event_type == AuditEventType.ENTRY_REJECTED]
        assert len(rejected) == 2

    def test_read_only_corpus(self, make_service):
        service = make_service(corpus=ReadOnlyCorpus())
        with pytest.raises(CorpusError):
            asyncio.run(service.record_entry("cy", "5"))


class TestConfigUpdate:
    """Tests for swapping configuration."""

    def test_update_config_rebuilds_and_drops_cache(self, make_service, corpus, audit_logger):
        service = make_service()
        asyncio.run(service.reload())

        corpus_config = LedgerConfig(categories={"cy": "Eating out", "sr": "Income"})
        asyncio.run(service.update_config(corpus_config))

        assert service.cache.last_known() is None
        records = asyncio.run(service.reload())
        assert {r.category for r in records} == {"Eating out", "Income"}
        assert AuditEventType.CONFIG_UPDATED in event_types(audit_logger)


class TestCreateAppComponents:
    """Tests for the factory."""

    def test_builds_service_over_directory(self, tmp_path):
        journals = tmp_path / "journals"
        journals.mkdir()
        (journals / "2024-03-10.md").write_text("- #fd 12 noodles\n", encoding="utf-8")
        config_path = tmp_path / "ledger.json"
        config_path.write_text(
            json.dumps({"categories": {"fd": "Food", "sr": "Income"}}),
            encoding="utf-8",
        )

        settings = DaybookSettings(
            base_dir=tmp_path,
            ledger_config_path=config_path,
            log_json=False,
        )
        service = create_app_components(settings=settings)
        records = asyncio.run(service.reload())

        assert service.config.categories["fd"] == "Food"
        assert [(r.category, r.amount) for r in records] == [("Food", Decimal("12"))]
