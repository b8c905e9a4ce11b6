"""
Audit Logger

DESIGN DECISION: Every reload step that can degrade the result is logged:
a tier falling through, a document that could not be read, a stale cache
being served. The records a user sees can always be traced back to where
they came from.

The audit logger:
- Is async so it can be awaited from inside batch tasks
- Never raises; a logging failure must not break a reload
- Supports correlation IDs to trace the events of one reload
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from daybook.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def _processors(json_output: bool) -> list:
    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        renderer,
    ]


# Configure structlog for local logging
structlog.configure(
    processors=_processors(json_output=True),
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    (Re)configure log level and rendering.

    Called once by the application factory with values from settings.
    """
    logging.basicConfig(format="%(message)s", level=level.upper())
    logging.getLogger("daybook").setLevel(level.upper())
    structlog.configure(
        processors=_processors(json_output),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes every event to the structured local log at the event's severity.
    The most recent events are kept in memory for hosts that display them.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("daybook.audit")
        self._history_size = history_size
        self._history: list[AuditEvent] = []

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the event could not be written.
        """
        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

        log_dict = event.to_log_dict()
        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Don't let a broken handler take the reload down with it
            logging.getLogger(__name__).error("audit log write failed: %s", e)
            return False

        return True

    async def log_reload_started(
        self,
        corpus_root: str,
        force_refresh: bool,
        correlation_id: UUID,
    ) -> None:
        """Log the start of a reload."""
        await self.log(AuditEventBuilder.reload_started(
            corpus_root=corpus_root,
            force_refresh=force_refresh,
            correlation_id=correlation_id,
        ))

    async def log_served_from_cache(
        self,
        record_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.reload_served_from_cache(
            record_count=record_count,
            correlation_id=correlation_id,
        ))

    async def log_records_loaded(
        self,
        corpus_root: str,
        record_count: int,
        document_count: int,
        tier: str,
        date_span: Optional[tuple[str, str]],
        recent_counts: dict[str, int],
        correlation_id: UUID,
    ) -> None:
        """Log a successful reload with its date distribution."""
        await self.log(AuditEventBuilder.records_loaded(
            corpus_root=corpus_root,
            record_count=record_count,
            document_count=document_count,
            tier=tier,
            date_span=date_span,
            recent_counts=recent_counts,
            correlation_id=correlation_id,
        ))

    async def log_reload_failed(
        self,
        corpus_root: str,
        error_message: str,
        fallback_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.reload_failed(
            corpus_root=corpus_root,
            error_message=error_message,
            fallback_count=fallback_count,
            correlation_id=correlation_id,
        ))

    async def log_corpus_root_missing(
        self,
        corpus_root: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.corpus_root_missing(
            corpus_root=corpus_root,
            correlation_id=correlation_id,
        ))

    async def log_tier_selected(
        self,
        tier: str,
        document_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.search_tier_selected(
            tier=tier,
            document_count=document_count,
            correlation_id=correlation_id,
        ))

    async def log_tier_failed(
        self,
        tier: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a retrieval tier falling through to the next one."""
        await self.log(AuditEventBuilder.search_tier_failed(
            tier=tier,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_document_read_failed(
        self,
        path: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a skipped document."""
        await self.log(AuditEventBuilder.document_read_failed(
            path=path,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_budget_alerts(
        self,
        alerts: list[dict],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.budget_alerts_raised(
            alerts=alerts,
            correlation_id=correlation_id,
        ))

    async def log_entry_appended(
        self,
        path: str,
        line: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.entry_appended(
            path=path,
            line=line,
            correlation_id=correlation_id,
        ))

    async def log_entry_rejected(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.entry_rejected(
            reason=reason,
            correlation_id=correlation_id,
        ))

    async def log_config_updated(
        self,
        keyword_count: int,
        budgets_enabled: bool,
    ) -> None:
        await self.log(AuditEventBuilder.config_updated(
            keyword_count=keyword_count,
            budgets_enabled=budgets_enabled,
        ))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        await self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a reload or a quick entry.
    Pass it through all subsequent operations.
    """
    return uuid4()
