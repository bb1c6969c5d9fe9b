"""
Audit Models for the Finance Ledger

Every change to the ledger is logged for audit purposes.
This provides:
1. Traceability of adds, edits and deletes
2. Debugging information when imports or storage fail
3. Ability to reconstruct what happened to a record

DESIGN DECISION: Audit events are append-only log lines. They are never
persisted next to the records, so a corrupt record file cannot take the
history down with it.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Record lifecycle
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    DELETE_CANCELLED = "delete_cancelled"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Import / export
    RECORDS_IMPORTED = "records_imported"
    IMPORT_FAILED = "import_failed"
    RECORDS_EXPORTED = "records_exported"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
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

    # Context
    record_id: Optional[str] = Field(
        default=None,
        description="Transaction id this event relates to"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import)"
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
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "record_id": self.record_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_json_line(self) -> str:
        """Single-line JSON form, handy for appending to a log file."""
        return json.dumps(self.to_log_dict(), ensure_ascii=False)


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created(record_id, "Lunch", "12.5")
        event = AuditEventBuilder.import_failed("invalid JSON")
    """

    @staticmethod
    def record_created(
        record_id: str,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            record_id=record_id,
            correlation_id=correlation_id,
            description=f"Record created: {description[:100]} - {amount}",
            details={
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        record_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            record_id=record_id,
            correlation_id=correlation_id,
            description=f"Record updated: {', '.join(changed_fields) or 'no changes'}",
            details={
                "changed_fields": changed_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        record_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            record_id=record_id,
            correlation_id=correlation_id,
            description="Record deleted after confirmation",
            is_user_action=True,
        )

    @staticmethod
    def delete_cancelled(
        record_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DELETE_CANCELLED,
            severity=AuditSeverity.DEBUG,
            record_id=record_id,
            correlation_id=correlation_id,
            description="Delete requested without confirmation",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        errors: dict[str, str],
        record_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            record_id=record_id,
            correlation_id=correlation_id,
            description=f"Validation failed with {len(errors)} issues",
            details={
                "fields": sorted(errors),
            },
            is_user_action=True,
        )

    @staticmethod
    def records_imported(
        accepted: int,
        skipped: int,
        policy: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_IMPORTED,
            correlation_id=correlation_id,
            description=f"Imported {accepted} records ({skipped} skipped)",
            details={
                "accepted": accepted,
                "skipped": skipped,
                "policy": policy,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_failed(
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            correlation_id=correlation_id,
            description="Import rejected",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def records_exported(
        record_count: int,
        destination: Optional[str] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_EXPORTED,
            correlation_id=correlation_id,
            description=f"Exported {record_count} records",
            details={
                "record_count": record_count,
                "destination": destination,
            },
            is_user_action=True,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={
                "operation": operation,
            },
        )
