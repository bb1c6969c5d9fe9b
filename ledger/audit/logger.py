"""
Audit Logger

DESIGN DECISION: Every change to the ledger is logged.
This provides:
1. Traceability of adds, edits, deletes and imports
2. Debugging capability when storage misbehaves

The audit logger:
- Is synchronous; every ledger operation finishes within one user action
- Gracefully handles failures (a logging problem never breaks a save)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(debug: bool = False) -> None:
    """Route stdlib logging (and so structlog) to stderr at the chosen level."""
    logging.basicConfig(
        format="%(message)s",
        level=logging.DEBUG if debug else logging.INFO,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes every event as a structured log line. Optionally keeps the
    events in memory so a UI can show recent history.
    """

    def __init__(self, keep_history: bool = False, history_limit: int = 200):
        self._logger = structlog.get_logger("ledger.audit")
        self._keep_history = keep_history
        self._history_limit = history_limit
        self._history: list[AuditEvent] = []

    @property
    def history(self) -> list[AuditEvent]:
        """Recorded events, newest first (empty unless keep_history)."""
        return list(reversed(self._history))

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if writing the log line failed. Never raises.
        """
        if self._keep_history:
            self._history.append(event)
            del self._history[:-self._history_limit]

        log_dict = event.to_log_dict()
        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            logging.getLogger(__name__).error("audit logging failed: %s", e)
            return False
        return True

    def log_record_created(
        self,
        record_id: str,
        description: str,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new record."""
        self.log(AuditEventBuilder.record_created(
            record_id=record_id,
            description=description,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_record_updated(
        self,
        record_id: str,
        changed_fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an edit."""
        self.log(AuditEventBuilder.record_updated(
            record_id=record_id,
            changed_fields=changed_fields,
            correlation_id=correlation_id,
        ))

    def log_record_deleted(
        self,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.record_deleted(
            record_id=record_id,
            correlation_id=correlation_id,
        ))

    def log_delete_cancelled(
        self,
        record_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.delete_cancelled(
            record_id=record_id,
            correlation_id=correlation_id,
        ))

    def log_validation_failed(
        self,
        errors: dict[str, str],
        record_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected add or edit."""
        self.log(AuditEventBuilder.validation_failed(
            errors=errors,
            record_id=record_id,
            correlation_id=correlation_id,
        ))

    def log_records_imported(
        self,
        accepted: int,
        skipped: int,
        policy: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.records_imported(
            accepted=accepted,
            skipped=skipped,
            policy=policy,
            correlation_id=correlation_id,
        ))

    def log_import_failed(
        self,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.import_failed(
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_records_exported(
        self,
        record_count: int,
        destination: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.records_exported(
            record_count=record_count,
            destination=destination,
            correlation_id=correlation_id,
        ))

    def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed storage read or write."""
        self.log(AuditEventBuilder.storage_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., an import).
    """
    return uuid4()
