"""
Record Store

Owns the ordered collection of transactions and its persistence.

DESIGN DECISION: The store is an explicit object created by the
composition root and handed to the flows. There is no module-level
record list.

PERSISTENCE FORMAT:
- A JSON array of record objects under ONE key in key-value storage
- Export writes the same array, pretty-printed
- Import appends; it never replaces and never de-duplicates by id

FAILURE RULES:
- Anything wrong while loading (unreadable medium, bad JSON, not an
  array) is treated as an empty collection
- Import errors (bad JSON, not an array) raise ImportFormatError BEFORE
  the collection is touched
"""

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Optional, Union

import structlog

from ledger.models.transaction import ImportPolicy, ImportResult, TransactionRecord
from ledger.services.storage.interface import (
    KeyValueStorageInterface,
    RecordNotFoundError,
    StorageError,
)
from ledger.validation.validator import validate


DEFAULT_STORAGE_KEY = "finance:records_v1"
DEFAULT_EXPORT_FILENAME = "finance_records.json"

REQUIRED_IMPORT_FIELDS = ("id", "description", "category", "date")

logger = structlog.get_logger(__name__)


class ImportFormatError(ValueError):
    """Import text is not JSON, or its top level is not an array."""
    pass


def _passes_structure_check(raw: Any) -> bool:
    """Truthy id, description, category, date and a non-null amount."""
    if not isinstance(raw, dict):
        return False
    if not all(raw.get(field) for field in REQUIRED_IMPORT_FIELDS):
        return False
    return raw.get("amount") is not None


def parse_import(
    text: Union[str, bytes],
    policy: ImportPolicy = ImportPolicy.LAX,
) -> ImportResult:
    """
    Parse an import file.

    Args:
        text: File contents
        policy: LAX keeps every structurally complete element as-is,
                STRICT additionally requires the field validators to pass

    Returns:
        ImportResult with accepted records and the skipped count

    Raises:
        ImportFormatError: Malformed JSON or non-array top level
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"Import file is not UTF-8: {e}")

    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Invalid JSON: {e}")

    if not isinstance(parsed, list):
        raise ImportFormatError("Invalid structure: top level must be an array")

    accepted = []
    skipped = 0
    for raw in parsed:
        if not _passes_structure_check(raw):
            skipped += 1
            continue
        if policy == ImportPolicy.STRICT and validate(raw):
            skipped += 1
            continue
        accepted.append(TransactionRecord.from_raw(raw))

    return ImportResult(policy=policy, accepted=accepted, skipped=skipped)


class RecordStore:
    """
    Ordered transaction collection bound to a key in key-value storage.

    Insertion order is storage order. Display code reverses it for
    newest-first views.
    """

    def __init__(
        self,
        storage: KeyValueStorageInterface,
        key: str = DEFAULT_STORAGE_KEY,
    ):
        self._storage = storage
        self._key = key
        self._records: list[TransactionRecord] = []

    @property
    def key(self) -> str:
        return self._key

    @property
    def records(self) -> list[TransactionRecord]:
        """Copy of the collection in insertion order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[TransactionRecord]:
        return iter(list(self._records))

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def load(self) -> list[TransactionRecord]:
        """
        Replace the in-memory collection with what storage holds.

        Never raises: failures give an empty collection.
        """
        try:
            raw = self._storage.get_item(self._key)
        except StorageError as e:
            logger.warning("record_load_failed", key=self._key, error=str(e))
            self._records = []
            return self.records

        if not raw:
            self._records = []
            return self.records

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("record_load_unparsable", key=self._key, error=str(e))
            parsed = []

        if not isinstance(parsed, list):
            logger.warning("record_load_not_array", key=self._key)
            parsed = []

        self._records = [
            TransactionRecord.from_raw(item) for item in parsed if isinstance(item, dict)
        ]
        return self.records

    def save(self) -> None:
        """
        Write the collection to storage as compact JSON.

        Raises:
            StorageError: If the storage write fails
        """
        payload = json.dumps(
            [record.to_json_dict() for record in self._records],
            ensure_ascii=False,
            separators=(",", ":"),
        )
        self._storage.set_item(self._key, payload)

    # -------------------------------------------------------------------------
    # Collection operations (callers save explicitly)
    # -------------------------------------------------------------------------

    def get(self, record_id: str) -> Optional[TransactionRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def add(self, record: TransactionRecord) -> TransactionRecord:
        self._records.append(record)
        return record

    def extend(self, records: list[TransactionRecord]) -> int:
        self._records.extend(records)
        return len(records)

    def update(self, record_id: str, changes: dict[str, Any]) -> list[TransactionRecord]:
        """
        Apply changes to every record with this id, keeping positions.

        Ids are not unique after an import round trip; all copies change
        together, just as remove() drops all of them.

        Returns:
            The updated records in collection order

        Raises:
            RecordNotFoundError: No record with that id
        """
        updated = []
        for index, existing in enumerate(self._records):
            if existing.id == record_id:
                self._records[index] = existing.model_copy(update=changes)
                updated.append(self._records[index])
        if not updated:
            raise RecordNotFoundError(f"No record with id {record_id!r}")
        return updated

    def remove(self, record_id: str) -> bool:
        """Remove every record with this id. Returns False if none existed."""
        before = len(self._records)
        self._records = [r for r in self._records if r.id != record_id]
        return len(self._records) != before

    def clear(self) -> None:
        self._records = []

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def export_json(self) -> str:
        """Pretty-printed JSON array of the collection."""
        return json.dumps(
            [record.to_json_dict() for record in self._records],
            ensure_ascii=False,
            indent=2,
        )

    def export_to_file(
        self,
        directory: Union[str, Path],
        filename: str = DEFAULT_EXPORT_FILENAME,
    ) -> Path:
        """Write export_json() to directory/filename and return the path."""
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(self.export_json(), encoding="utf-8")
        return path

    def import_json(
        self,
        text: Union[str, bytes],
        policy: ImportPolicy = ImportPolicy.LAX,
    ) -> ImportResult:
        """
        Parse an import and append the accepted records.

        The collection is only changed after the whole text parsed.
        Callers persist with save().

        Raises:
            ImportFormatError: Malformed JSON or non-array top level
        """
        result = parse_import(text, policy)
        self.extend(result.accepted)
        return result
