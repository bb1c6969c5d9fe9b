"""
Storage Services Package

Provides the abstract key-value interface and concrete implementations.
The local JSON file is the default backend, but it is designed to be swappable.
"""

from ledger.services.storage.interface import (
    KeyValueStorageInterface,
    RecordNotFoundError,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from ledger.services.storage.local_file import LocalFileStorage
from ledger.services.storage.memory import InMemoryStorage

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "RecordNotFoundError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryStorage",
    "LocalFileStorage",
]
