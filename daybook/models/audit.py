"""
Audit Models for Daybook

Every significant step of a reload (which tier answered, which documents
could not be read, how many records came back) is recorded as an event.
This provides:
1. Traceability of where a record set came from
2. Debugging information when a tier or document fails
3. A record of user-triggered writes (quick entries)

DESIGN DECISION: Audit events are append-only. They are emitted, never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Reload lifecycle
    RELOAD_STARTED = "reload_started"
    RELOAD_SERVED_FROM_CACHE = "reload_served_from_cache"
    RECORDS_LOADED = "records_loaded"
    RELOAD_FAILED = "reload_failed"
    CORPUS_ROOT_MISSING = "corpus_root_missing"

    # Retrieval tiers
    SEARCH_TIER_SELECTED = "search_tier_selected"
    SEARCH_TIER_FAILED = "search_tier_failed"

    # Documents
    DOCUMENT_READ_FAILED = "document_read_failed"

    # Budget
    BUDGET_ALERTS_RAISED = "budget_alerts_raised"

    # User actions
    ENTRY_APPENDED = "entry_appended"
    ENTRY_REJECTED = "entry_rejected"
    CONFIG_UPDATED = "config_updated"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'document', 'corpus', 'entry')"
    )
    entity_ref: Optional[str] = Field(
        default=None,
        description="Reference to the entity (document path, corpus root)"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one reload)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_ref": self.entity_ref,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.reload_started(root, force_refresh, correlation_id)
        event = AuditEventBuilder.document_read_failed(path, error, correlation_id)
    """

    @staticmethod
    def reload_started(
        corpus_root: str,
        force_refresh: bool,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RELOAD_STARTED,
            entity_type="corpus",
            entity_ref=corpus_root,
            correlation_id=correlation_id,
            description=f"Reloading records from {corpus_root}",
            details={"force_refresh": force_refresh},
        )

    @staticmethod
    def reload_served_from_cache(
        record_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RELOAD_SERVED_FROM_CACHE,
            severity=AuditSeverity.DEBUG,
            correlation_id=correlation_id,
            description=f"Served {record_count} cached records",
            details={"record_count": record_count},
        )

    @staticmethod
    def records_loaded(
        corpus_root: str,
        record_count: int,
        document_count: int,
        tier: str,
        date_span: Optional[tuple[str, str]],
        recent_counts: dict[str, int],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_LOADED,
            entity_type="corpus",
            entity_ref=corpus_root,
            correlation_id=correlation_id,
            description=(
                f"Loaded {record_count} records from {document_count} documents"
            ),
            details={
                "record_count": record_count,
                "document_count": document_count,
                "tier": tier,
                "date_span": list(date_span) if date_span else None,
                "recent_counts": recent_counts,
            },
        )

    @staticmethod
    def reload_failed(
        corpus_root: str,
        error_message: str,
        fallback_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RELOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="corpus",
            entity_ref=corpus_root,
            correlation_id=correlation_id,
            description="Reload failed, serving best-effort result",
            error_message=error_message,
            details={"fallback_record_count": fallback_count},
        )

    @staticmethod
    def corpus_root_missing(
        corpus_root: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CORPUS_ROOT_MISSING,
            severity=AuditSeverity.WARNING,
            entity_type="corpus",
            entity_ref=corpus_root,
            correlation_id=correlation_id,
            description=f"Journal folder not found: {corpus_root}",
        )

    @staticmethod
    def search_tier_selected(
        tier: str,
        document_count: int,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SEARCH_TIER_SELECTED,
            entity_type="tier",
            entity_ref=tier,
            correlation_id=correlation_id,
            description=f"Tier {tier} located {document_count} documents",
            details={"document_count": document_count},
        )

    @staticmethod
    def search_tier_failed(
        tier: str,
        error_message: str,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SEARCH_TIER_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="tier",
            entity_ref=tier,
            correlation_id=correlation_id,
            description=f"Tier {tier} failed, falling through",
            error_message=error_message,
        )

    @staticmethod
    def document_read_failed(
        path: str,
        error_message: str,
        correlation_id: Optional[UUID]
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DOCUMENT_READ_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="document",
            entity_ref=path,
            correlation_id=correlation_id,
            description=f"Skipped unreadable document: {path}",
            error_message=error_message,
        )

    @staticmethod
    def budget_alerts_raised(
        alerts: list[dict],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_ALERTS_RAISED,
            severity=AuditSeverity.INFO,
            correlation_id=correlation_id,
            description=f"{len(alerts)} budget alerts raised",
            details={"alerts": alerts},
        )

    @staticmethod
    def entry_appended(
        path: str,
        line: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_APPENDED,
            entity_type="document",
            entity_ref=path,
            correlation_id=correlation_id,
            description=f"Entry appended to {path}",
            details={"line": line},
            is_user_action=True,
        )

    @staticmethod
    def entry_rejected(
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ENTRY_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="entry",
            correlation_id=correlation_id,
            description="Quick entry rejected",
            error_message=reason,
            is_user_action=True,
        )

    @staticmethod
    def config_updated(
        keyword_count: int,
        budgets_enabled: bool
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CONFIG_UPDATED,
            description="Ledger configuration replaced",
            details={
                "keyword_count": keyword_count,
                "budgets_enabled": budgets_enabled,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
