"""
Main Orchestrator for Daybook

This module ties the components together and defines the flows a host
application calls:
1. Reload (locate documents -> read -> parse -> sort, behind the cache)
2. Stats (filter by date range -> aggregate -> evaluate budgets)
3. Quick entry (append a line to today's journal, invalidate the cache)

DESIGN DECISION: reload() never raises. A missing journal folder gives an
empty result, any other failure gives the last cached records (or an empty
result), and both are reported through the notifier.
"""

from collections import Counter
from datetime import date
from typing import Callable, Optional, Union

from daybook.audit import AuditLogger, configure_logging, create_correlation_id
from daybook.config import DaybookSettings, LedgerConfig, get_settings, load_ledger_config
from daybook.entry import EntryInputError, append_entry
from daybook.models.ledger import (
    AggregatedStats,
    DateRange,
    TimeRangePreset,
    TransactionRecord,
)
from daybook.parsing import CategoryDictionary, RecordParser
from daybook.queries import (
    BudgetEvaluator,
    aggregate,
    filter_by_date_range,
    resolve_time_range,
)
from daybook.retrieval import (
    CorpusReader,
    DocumentLocator,
    LocatorError,
    LocatorResult,
    RecordCache,
)
from daybook.services.corpus import (
    CorpusError,
    CorpusInterface,
    CorpusRootMissingError,
    FileSystemCorpus,
    SearchFacilityInterface,
    WritableCorpusInterface,
)
from daybook.services.notifications import LoggingNotifier, Notifier


class LedgerService:
    """
    Entry point for hosts.

    Flow of reload():
    1. Serve fresh cached records if any (unless forced)
    2. Check the journal folder exists
    3. Locate candidate documents (engine -> scan -> traversal)
    4. Read and parse them, newest first
    5. Cache the result
    """

    def __init__(
        self,
        corpus: CorpusInterface,
        config: Optional[LedgerConfig] = None,
        search: Optional[SearchFacilityInterface] = None,
        notifier: Optional[Notifier] = None,
        audit_logger: Optional[AuditLogger] = None,
        cache: Optional[RecordCache] = None,
        settings: Optional[DaybookSettings] = None,
        today: Callable[[], date] = date.today,
    ):
        self._corpus = corpus
        self._search = search
        self._notifier = notifier or LoggingNotifier()
        self._audit = audit_logger or AuditLogger()
        self._settings = settings or DaybookSettings()
        self._cache = cache or RecordCache(ttl_seconds=self._settings.cache_ttl_seconds)
        self._today = today
        self._last_tier: Optional[str] = None
        self._apply_config(config or LedgerConfig())

    def _apply_config(self, config: LedgerConfig) -> None:
        # Everything derived from the config is rebuilt together
        dictionary = CategoryDictionary.from_config(config)
        parser = RecordParser(config, dictionary, today=self._today)
        self._config = config
        self._dictionary = dictionary
        self._parser = parser
        self._evaluator = BudgetEvaluator(dictionary, currency_symbol=config.currency_symbol)
        self._locator = DocumentLocator(
            corpus=self._corpus,
            marker=config.marker,
            search=self._search,
            audit_logger=self._audit,
            scan_batch_size=self._settings.scan_batch_size,
            traversal_batch_size=self._settings.traversal_batch_size,
        )
        self._reader = CorpusReader(
            corpus=self._corpus,
            parser=parser,
            audit_logger=self._audit,
            batch_size=self._settings.read_batch_size,
        )

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def dictionary(self) -> CategoryDictionary:
        return self._dictionary

    @property
    def parser(self) -> RecordParser:
        return self._parser

    @property
    def cache(self) -> RecordCache:
        return self._cache

    @property
    def last_tier(self) -> Optional[str]:
        """Tier that answered the most recent uncached reload."""
        return self._last_tier

    async def update_config(self, config: LedgerConfig) -> None:
        """Swap in a new configuration; cached records are dropped."""
        self._apply_config(config)
        self._cache.clear()
        await self._audit.log_config_updated(
            keyword_count=len(config.categories),
            budgets_enabled=config.budgets.enable_alerts,
        )

    # -------------------------------------------------------------------------
    # Reload
    # -------------------------------------------------------------------------

    async def reload(self, force_refresh: bool = False) -> list[TransactionRecord]:
        """
        Load every transaction in the journal folder, newest first.

        Never raises; see the module docstring for the failure behavior.
        """
        correlation_id = create_correlation_id()
        root = self._config.journals_path
        await self._audit.log_reload_started(root, force_refresh, correlation_id)

        if force_refresh:
            self._cache.invalidate()

        cached = self._cache.get()
        if cached is not None:
            await self._audit.log_served_from_cache(len(cached), correlation_id)
            return cached

        try:
            if not await self._corpus.document_exists(root):
                raise CorpusRootMissingError(root)

            records, _ = await self._cache.get_or_recompute(
                lambda: self._load(root, correlation_id)
            )
            return records

        except CorpusRootMissingError as e:
            await self._audit.log_corpus_root_missing(root, correlation_id)
            self._notifier.notify(str(e))
            return []

        except Exception as e:
            # Whatever escaped every tier: serve the best we have
            if not isinstance(e, (CorpusError, LocatorError)):
                await self._audit.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            fallback = self._cache.last_known() or []
            await self._audit.log_reload_failed(
                corpus_root=root,
                error_message=str(e),
                fallback_count=len(fallback),
                correlation_id=correlation_id,
            )
            if fallback:
                self._notifier.notify("Failed to load records, showing cached data")
            else:
                self._notifier.notify("Failed to load records, please check the journal folder")
            return fallback

    async def _load(self, root: str, correlation_id) -> list[TransactionRecord]:
        located: LocatorResult = await self._locator.locate(
            self._dictionary.keywords_longest_first, root, correlation_id
        )
        self._last_tier = located.tier.value

        records = await self._reader.read_records(located.documents, correlation_id)

        date_counts = Counter(r.date.isoformat() for r in records)
        ordered_dates = sorted(date_counts)
        await self._audit.log_records_loaded(
            corpus_root=root,
            record_count=len(records),
            document_count=len(located.documents),
            tier=located.tier.value,
            date_span=(ordered_dates[0], ordered_dates[-1]) if ordered_dates else None,
            recent_counts={d: date_counts[d] for d in ordered_dates[-5:]},
            correlation_id=correlation_id,
        )
        return records

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def filter_by_date_range(
        self,
        records: list[TransactionRecord],
        start: Union[date, str],
        end: Union[date, str],
    ) -> list[TransactionRecord]:
        """Records dated within [start, end], inclusive."""
        return filter_by_date_range(records, start, end)

    def compute_stats(self, records: list[TransactionRecord]) -> AggregatedStats:
        """Aggregate records and attach the budget status."""
        stats = aggregate(records)
        budget_status = self._evaluator.evaluate(stats, self._config.budgets)
        return stats.model_copy(update={"budget_status": budget_status})

    def default_range(self) -> DateRange:
        """The range shown when nothing else is selected: this month."""
        return resolve_time_range(TimeRangePreset.THIS_MONTH, self._today())

    async def stats_for_range(
        self,
        selection: Union[DateRange, TimeRangePreset, str, None] = None,
        force_refresh: bool = False,
    ) -> tuple[DateRange, list[TransactionRecord], AggregatedStats]:
        """
        Reload (cache permitting), filter to a range and aggregate.

        Returns:
            (resolved range, filtered records, stats)
        """
        if selection is None:
            date_range = self.default_range()
        elif isinstance(selection, DateRange):
            date_range = selection
        else:
            date_range = resolve_time_range(selection, self._today())

        records = await self.reload(force_refresh=force_refresh)
        filtered = self.filter_by_date_range(records, date_range.start, date_range.end)
        stats = self.compute_stats(filtered)

        if stats.budget_status and stats.budget_status.has_alerts:
            await self._audit.log_budget_alerts(
                [a.model_dump(mode="json") for a in stats.budget_status.alerts]
            )
        return date_range, filtered, stats

    # -------------------------------------------------------------------------
    # Quick entry
    # -------------------------------------------------------------------------

    async def record_entry(
        self,
        keyword: Optional[str],
        text: str,
    ) -> TransactionRecord:
        """
        Append a quick entry to today's journal and return it parsed.

        Raises:
            EntryInputError: Bad keyword or input
            CorpusError: The corpus is read-only or the write failed
        """
        correlation_id = create_correlation_id()
        keyword = keyword or self._config.default_category
        if not isinstance(self._corpus, WritableCorpusInterface):
            raise CorpusError("The corpus does not accept writes")
        if not keyword:
            await self._audit.log_entry_rejected("No category selected", correlation_id)
            raise EntryInputError("Please choose a category")

        today = self._today()
        try:
            document, line = await append_entry(
                self._corpus,
                self._config,
                keyword,
                text,
                today,
                dictionary=self._dictionary,
            )
        except EntryInputError as e:
            await self._audit.log_entry_rejected(str(e), correlation_id)
            raise

        self._cache.invalidate()
        await self._audit.log_entry_appended(document.path, line, correlation_id)

        record = self._parser.parse_line(line, today)
        if record is None:
            # format_entry_line always produces a parseable line
            raise EntryInputError(f"Entry could not be parsed back: {line}")
        return record


def create_app_components(
    settings: Optional[DaybookSettings] = None,
    search: Optional[SearchFacilityInterface] = None,
    notifier: Optional[Notifier] = None,
) -> LedgerService:
    """
    Factory function to create a LedgerService over a journal directory.

    Args:
        settings: Runtime settings; read from the environment if omitted
        search: Optional search facility supplied by the host
        notifier: Where user-visible messages go (the log by default)
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.log_json)

    config = load_ledger_config(settings.ledger_config_path)
    corpus = FileSystemCorpus(settings.base_dir, extensions=settings.extensions_list)

    return LedgerService(
        corpus=corpus,
        config=config,
        search=search,
        notifier=notifier,
        settings=settings,
    )
