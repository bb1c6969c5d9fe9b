"""
Tests for the Finance Ledger models

Test strategy:
1. Unit tests for individual components (models, validators, search)
2. Flow tests against in-memory storage
3. No real files outside pytest's tmp_path
"""

import re
from decimal import Decimal

import pytest

from ledger.models.transaction import (
    DashboardSummary,
    FlowResult,
    ImportPolicy,
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


class TestTransactionModels:
    """Tests for transaction Pydantic models."""

    def test_record_creation(self):
        """Test TransactionRecord creation with generated id and timestamps."""
        record = TransactionRecord(
            description="Lunch",
            amount=12.5,
            category="Food",
            date="2025-01-31",
        )
        assert record.id.startswith("txn_")
        assert record.amount == 12.5
        assert record.created_at is not None
        assert record.updated_at is not None

    def test_record_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValueError):
            TransactionRecord(
                description="Refund",
                amount=-1,
                category="Food",
                date="2025-01-31",
            )

    def test_record_json_uses_camel_case_timestamps(self):
        """Test the persisted shape matches the browser format."""
        record = TransactionRecord(
            id="txn_abc",
            description="Lunch",
            amount=12.5,
            category="Food",
            date="2025-01-31",
            created_at="2025-01-31T12:00:00.000Z",
            updated_at="2025-01-31T12:00:00.000Z",
        )
        data = record.to_json_dict()
        assert data == {
            "id": "txn_abc",
            "description": "Lunch",
            "amount": 12.5,
            "category": "Food",
            "date": "2025-01-31",
            "createdAt": "2025-01-31T12:00:00.000Z",
            "updatedAt": "2025-01-31T12:00:00.000Z",
        }

    def test_record_accepts_aliases(self):
        """Test records can be validated from camelCase JSON."""
        record = TransactionRecord.model_validate({
            "id": "txn_1",
            "description": "Bus",
            "amount": 2,
            "category": "Transport",
            "date": "2025-01-02",
            "createdAt": "2025-01-02T08:00:00.000Z",
        })
        assert record.created_at == "2025-01-02T08:00:00.000Z"

    def test_from_raw_keeps_values_as_is(self):
        """Test that raw construction does not coerce or drop anything."""
        record = TransactionRecord.from_raw({
            "id": "txn_x",
            "description": "Imported",
            "amount": "not a number",
            "category": "Misc",
            "date": "yesterday",
            "createdAt": "2024-01-01T00:00:00.000Z",
            "note": "kept",
        })
        assert record.amount == "not a number"
        assert record.date == "yesterday"
        data = record.to_json_dict()
        assert data["note"] == "kept"
        assert data["createdAt"] == "2024-01-01T00:00:00.000Z"
        assert data["updatedAt"] is None

    def test_from_raw_fills_missing_fields(self):
        """Test that missing fields do not break attribute access."""
        record = TransactionRecord.from_raw({"id": "txn_y"})
        assert record.description == ""
        assert record.amount == 0

    def test_draft_fields_are_optional(self):
        """Test TransactionDraft accepts partial input."""
        draft = TransactionDraft(description="Lunch")
        assert draft.amount is None
        assert draft.date is None


class TestHelpers:
    """Tests for id, timestamp and amount helpers."""

    def test_generate_record_id_is_unique(self):
        """Test ids do not collide within the same millisecond."""
        ids = {generate_record_id() for _ in range(200)}
        assert len(ids) == 200
        assert all(i.startswith("txn_") for i in ids)

    def test_utc_timestamp_format(self):
        """Test timestamps look like JavaScript toISOString()."""
        assert re.fullmatch(
            r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z",
            utc_timestamp(),
        )

    @pytest.mark.parametrize("amount,expected", [
        (12.0, "12"),
        (12.5, "12.5"),
        (0.5, "0.5"),
        (12.34, "12.34"),
        (0, "0"),
        (7, "7"),
        ("3.10", "3.10"),
        (None, ""),
    ])
    def test_format_amount(self, amount, expected):
        """Test amounts render as plain decimal strings."""
        assert format_amount(amount) == expected


class TestResultModels:
    """Tests for flow, validation and dashboard models."""

    def test_flow_result_defaults(self):
        result = FlowResult(ok=True)
        assert result.errors == {}
        assert result.warnings == []
        assert result.record is None

    def test_validation_issue_severity_pattern(self):
        """Test severity is restricted to known values."""
        with pytest.raises(ValueError):
            ValidationIssue(
                field="description",
                issue_type="duplicate_word",
                message="x",
                severity="fatal",
            )

    def test_dashboard_summary(self):
        summary = DashboardSummary(
            total_count=2,
            total_amount=Decimal("15.25"),
            top_category="Food",
        )
        assert summary.cap_status == ""
        assert summary.over_cap is False

    def test_import_policy_values(self):
        """Test policy string values."""
        assert ImportPolicy("lax") is ImportPolicy.LAX
        assert ImportPolicy.STRICT.value == "strict"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            description="Record created",
        )
        assert event.event_type == AuditEventType.RECORD_CREATED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEventBuilder.record_created(
            record_id="txn_1",
            description="Lunch",
            amount="12.5",
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "record_created"
        assert log_dict["record_id"] == "txn_1"
        assert log_dict["details"]["amount"] == "12.5"
        assert log_dict["is_user_action"] is True

    def test_audit_event_builder_validation_failed(self):
        """Test AuditEventBuilder.validation_failed lists fields, not values."""
        event = AuditEventBuilder.validation_failed(
            errors={"date": "Date must be YYYY-MM-DD.", "amount": "bad"},
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["fields"] == ["amount", "date"]

    def test_audit_event_builder_storage_error(self):
        event = AuditEventBuilder.storage_error(
            operation="add",
            error_message="disk full",
        )
        assert event.event_type == AuditEventType.STORAGE_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.error_message == "disk full"

    def test_audit_event_to_json_line(self):
        event = AuditEventBuilder.records_imported(accepted=2, skipped=1, policy="lax")
        line = event.to_json_line()
        assert "\n" not in line
        assert '"records_imported"' in line


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
