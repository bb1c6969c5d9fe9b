"""Services package."""

from ledger.services.storage import (
    InMemoryStorage,
    KeyValueStorageInterface,
    LocalFileStorage,
    RecordNotFoundError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    "InMemoryStorage",
    "KeyValueStorageInterface",
    "LocalFileStorage",
    "RecordNotFoundError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
