"""
Data Models Package

This package contains all Pydantic models used in the Finance Ledger.
All data flowing through the system must conform to these schemas.
"""

from ledger.models.transaction import (
    DashboardSummary,
    FlowResult,
    HighlightedRecord,
    ImportPolicy,
    ImportResult,
    TransactionDraft,
    TransactionRecord,
    ValidationIssue,
    format_amount,
    generate_record_id,
    utc_timestamp,
)
from ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "DashboardSummary",
    "FlowResult",
    "HighlightedRecord",
    "ImportPolicy",
    "ImportResult",
    "TransactionDraft",
    "TransactionRecord",
    "ValidationIssue",
    "format_amount",
    "generate_record_id",
    "utc_timestamp",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
