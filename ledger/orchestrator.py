"""
Main Orchestrator for the Finance Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Records (form input → normalise → validate → store → persist)
2. Search (pattern → filter → highlight)
3. Transfer (export to JSON, import from JSON)

DESIGN DECISION: The orchestrator enforces the boundaries:
- No record changes without passing validation
- No delete without explicit confirmation
- Import errors become a status message, never an exception
- Every change is audited

The composition root (create_app_components) owns the RecordStore and
hands it to every flow. Nothing here keeps module-level state.
"""

from pathlib import Path
from typing import Optional, Union
from uuid import UUID

import structlog

from ledger.audit import AuditLogger, create_correlation_id
from ledger.config import LedgerSettings, get_settings
from ledger.models.transaction import (
    DashboardSummary,
    FlowResult,
    HighlightedRecord,
    ImportPolicy,
    ImportResult,
    TransactionDraft,
    TransactionRecord,
    format_amount,
    utc_timestamp,
)
from ledger.queries import summarize
from ledger.search import search_records
from ledger.services.storage import (
    InMemoryStorage,
    KeyValueStorageInterface,
    LocalFileStorage,
    RecordNotFoundError,
    StorageError,
)
from ledger.store import DEFAULT_EXPORT_FILENAME, ImportFormatError, RecordStore
from ledger.validation import description_warnings, normalize_draft, validate


logger = structlog.get_logger(__name__)

STATUS_EXPORTED = "Exported!"
STATUS_IMPORTED = "Imported!"
STATUS_IMPORT_FAILED = "Import failed: invalid JSON"


class RecordFlow:
    """
    Orchestrates adding, editing and deleting transactions.

    Flow:
    1. Normalise form input (trim, collapse spaces)
    2. Validate → field errors block the change
    3. Apply to the store
    4. Persist
    5. Audit
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
        warn_duplicate_words: bool = True,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._warn_duplicate_words = warn_duplicate_words

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self._audit_logger

    def _check(
        self,
        draft: TransactionDraft,
        record_id: Optional[str],
        correlation_id: Optional[UUID],
    ) -> tuple[TransactionDraft, FlowResult]:
        cleaned = normalize_draft(draft)
        errors = validate(cleaned)
        warnings = description_warnings(cleaned) if self._warn_duplicate_words else []

        if errors and self._audit_logger:
            self._audit_logger.log_validation_failed(
                errors=errors,
                record_id=record_id,
                correlation_id=correlation_id,
            )
        return cleaned, FlowResult(ok=not errors, errors=errors, warnings=warnings)

    def _persist(self, operation: str, correlation_id: Optional[UUID]) -> None:
        try:
            self._store.save()
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_storage_error(
                    operation=operation,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

    def add(
        self,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> FlowResult:
        """
        Validate a draft and save it as a new record.

        Returns:
            FlowResult; result.record is set only when ok

        Raises:
            StorageError: If the record could not be persisted
        """
        correlation_id = correlation_id or create_correlation_id()
        cleaned, result = self._check(draft, None, correlation_id)
        if not result.ok:
            return result

        now = utc_timestamp()
        record = TransactionRecord(
            description=cleaned.description,
            amount=float(cleaned.amount),
            category=cleaned.category,
            date=cleaned.date,
            created_at=now,
            updated_at=now,
        )
        self._store.add(record)
        self._persist("add", correlation_id)

        if self._audit_logger:
            self._audit_logger.log_record_created(
                record_id=record.id,
                description=record.description,
                amount=record.amount_text,
                correlation_id=correlation_id,
            )

        result.record = record
        return result

    def edit(
        self,
        record_id: str,
        draft: TransactionDraft,
        correlation_id: Optional[UUID] = None,
    ) -> FlowResult:
        """
        Re-validate and apply an edit.

        The id and created_at are kept; updated_at is refreshed. Every
        record sharing the id (duplicates from an import) gets the edit.

        Raises:
            RecordNotFoundError: No record with that id
            StorageError: If the change could not be persisted
        """
        correlation_id = correlation_id or create_correlation_id()
        existing = self._store.get(record_id)
        if existing is None:
            raise RecordNotFoundError(f"No record with id {record_id!r}")

        cleaned, result = self._check(draft, record_id, correlation_id)
        if not result.ok:
            return result

        changes = {
            "description": cleaned.description,
            "amount": float(cleaned.amount),
            "category": cleaned.category,
            "date": cleaned.date,
        }
        changed_fields = [
            name for name, value in changes.items()
            if getattr(existing, name, None) != value
        ]
        updated = self._store.update(record_id, {**changes, "updated_at": utc_timestamp()})
        self._persist("edit", correlation_id)

        if self._audit_logger:
            self._audit_logger.log_record_updated(
                record_id=record_id,
                changed_fields=changed_fields,
                correlation_id=correlation_id,
            )

        result.record = updated[0]
        return result

    def delete(
        self,
        record_id: str,
        confirmed: bool,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Delete a record. Nothing happens unless the user confirmed.

        Returns:
            True if a record was removed
        """
        correlation_id = correlation_id or create_correlation_id()
        if not confirmed:
            if self._audit_logger:
                self._audit_logger.log_delete_cancelled(
                    record_id=record_id,
                    correlation_id=correlation_id,
                )
            return False

        if not self._store.remove(record_id):
            return False
        self._persist("delete", correlation_id)

        if self._audit_logger:
            self._audit_logger.log_record_deleted(
                record_id=record_id,
                correlation_id=correlation_id,
            )
        return True

    def draft_for(self, record_id: str) -> TransactionDraft:
        """
        Pre-fill an edit form from a saved record.

        Raises:
            RecordNotFoundError: No record with that id
        """
        record = self._store.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"No record with id {record_id!r}")
        return TransactionDraft(
            description=str(record.description),
            amount=format_amount(record.amount),
            category=str(record.category),
            date=str(record.date),
        )


class SearchFlow:
    """Runs the search box and the dashboard against the current store."""

    def __init__(
        self,
        store: RecordStore,
        spending_cap: float = 0.0,
        currency_symbol: str = "$",
    ):
        self._store = store
        self.spending_cap = spending_cap
        self.currency_symbol = currency_symbol

    def search(
        self,
        pattern: Optional[str] = "",
        case_insensitive: bool = True,
    ) -> list[HighlightedRecord]:
        """Newest-first matching records. The pattern is trimmed first."""
        return search_records(
            self._store.records,
            (pattern or "").strip(),
            case_insensitive,
        )

    def dashboard(self, cap: Optional[float] = None) -> DashboardSummary:
        return summarize(
            self._store.records,
            cap=self.spending_cap if cap is None else cap,
            currency_symbol=self.currency_symbol,
        )


class TransferFlow:
    """
    Orchestrates export and import.

    Import appends to the collection and persists. Failures are reported
    as a status message; the collection is untouched when parsing fails.
    """

    def __init__(
        self,
        store: RecordStore,
        audit_logger: Optional[AuditLogger] = None,
        policy: ImportPolicy = ImportPolicy.LAX,
        export_filename: str = DEFAULT_EXPORT_FILENAME,
    ):
        self._store = store
        self._audit_logger = audit_logger
        self.policy = policy
        self.export_filename = export_filename

    def export_json(self) -> str:
        """Pretty-printed JSON of every record (for a download button)."""
        payload = self._store.export_json()
        if self._audit_logger:
            self._audit_logger.log_records_exported(record_count=len(self._store))
        return payload

    def export_to_file(self, directory: Union[str, Path]) -> tuple[Path, str]:
        """
        Write the export file into a directory.

        Returns:
            (path, status_message)
        """
        path = self._store.export_to_file(directory, self.export_filename)
        if self._audit_logger:
            self._audit_logger.log_records_exported(
                record_count=len(self._store),
                destination=str(path),
            )
        return path, STATUS_EXPORTED

    def import_text(
        self,
        text: Union[str, bytes],
        policy: Optional[ImportPolicy] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[Optional[ImportResult], str]:
        """
        Import records from JSON text.

        Returns:
            (result, status_message); result is None when the import failed
        """
        correlation_id = correlation_id or create_correlation_id()
        policy = policy or self.policy

        try:
            result = self._store.import_json(text, policy)
        except ImportFormatError as e:
            logger.info("import_rejected", error=str(e))
            if self._audit_logger:
                self._audit_logger.log_import_failed(
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return None, STATUS_IMPORT_FAILED

        try:
            self._store.save()
        except StorageError as e:
            # Accepted records stay in memory; there is no rollback
            if self._audit_logger:
                self._audit_logger.log_storage_error(
                    operation="import",
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            return result, f"Import failed: {e}"

        if self._audit_logger:
            self._audit_logger.log_records_imported(
                accepted=result.accepted_count,
                skipped=result.skipped,
                policy=result.policy.value,
                correlation_id=correlation_id,
            )
        return result, STATUS_IMPORTED


def create_storage(settings: LedgerSettings) -> KeyValueStorageInterface:
    """Local file storage at settings.data_file."""
    return LocalFileStorage(settings.data_file)


def create_app_components(
    settings: Optional[LedgerSettings] = None,
    storage: Optional[KeyValueStorageInterface] = None,
    keep_history: bool = False,
) -> tuple[RecordFlow, SearchFlow, TransferFlow, RecordStore]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to get_settings()
        storage: Storage backend; defaults to the local data file.
                 Pass InMemoryStorage() for tests.
        keep_history: Keep audit events in memory for display

    Returns:
        (record_flow, search_flow, transfer_flow, store)
    """
    settings = settings or get_settings()

    if storage is None:
        try:
            storage = create_storage(settings)
        except Exception as e:
            logger.warning("storage_unavailable", error=str(e))
            storage = InMemoryStorage()

    audit_logger = AuditLogger(keep_history=keep_history)

    store = RecordStore(storage, key=settings.storage_key)
    store.load()

    record_flow = RecordFlow(
        store=store,
        audit_logger=audit_logger,
        warn_duplicate_words=settings.warn_duplicate_words,
    )
    search_flow = SearchFlow(
        store=store,
        spending_cap=settings.spending_cap,
        currency_symbol=settings.currency_symbol,
    )
    transfer_flow = TransferFlow(
        store=store,
        audit_logger=audit_logger,
        policy=settings.import_policy,
        export_filename=settings.export_filename,
    )

    return record_flow, search_flow, transfer_flow, store
