"""
Abstract Storage Interface

DESIGN DECISION: The ledger persists to a string-keyed store, the same
shape as a browser's localStorage. This allows us to:
1. Keep the on-disk format identical to the browser version
2. Use in-memory storage for testing
3. Swap the local file for something else later

The interface is intentionally tiny - strings in, strings out.
JSON encoding of records is the Record Store's job, not the storage's.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for string key-value storage.

    Any storage implementation (local file, memory, ...)
    must implement these methods.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent

        Raises:
            StorageReadError: If the backing medium cannot be read
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store a string under a key, replacing any previous value.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """
        Remove a key. Removing an absent key is not an error.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List stored keys."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """The backing medium could not be read or parsed."""
    pass


class StorageWriteError(StorageError):
    """The backing medium could not be written."""
    pass


class RecordNotFoundError(StorageError):
    """No record with the requested id."""
    pass
