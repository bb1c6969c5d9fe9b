"""Record store package."""

from ledger.store.record_store import (
    DEFAULT_EXPORT_FILENAME,
    DEFAULT_STORAGE_KEY,
    ImportFormatError,
    RecordStore,
    parse_import,
)

__all__ = [
    "DEFAULT_EXPORT_FILENAME",
    "DEFAULT_STORAGE_KEY",
    "ImportFormatError",
    "RecordStore",
    "parse_import",
]
