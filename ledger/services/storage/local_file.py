"""
Local File Storage Implementation

DESIGN DECISION: The key-value store lives in a single JSON object on disk
({key: string_value}). This mirrors localStorage: values are opaque
strings, so the records array is JSON encoded twice (once by the Record
Store, once here as a string value).

TRADEOFFS:
- The whole file is rewritten on every change (fine for a personal ledger)
- No locking; a single process is assumed
- Writes go to a temp file and are moved into place so a crash never
  leaves half a file behind
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ledger.services.storage.interface import (
    KeyValueStorageInterface,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)


class LocalFileStorage(KeyValueStorageInterface):
    """
    Key-value storage backed by one JSON file.

    A missing file is an empty store. The file is created on first write.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        """Load the whole file. Missing file -> empty dict."""
        if not self._path.exists():
            return {}
        try:
            raw = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageReadError(f"Failed to read {self._path}: {e}")

        if not raw.strip():
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Storage file {self._path} is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise StorageReadError(
                f"Storage file {self._path} must hold a JSON object, got {type(data).__name__}"
            )
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write_file(self, payload: str) -> None:
        """Atomic write via .tmp + os.replace()."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            os.replace(tmp, self._path)
        finally:
            if tmp.exists():
                tmp.unlink()

    def _write_all(self, data: dict[str, str]) -> None:
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        try:
            self._write_file(payload)
        except OSError as e:
            logger.error("storage_write_failed", path=str(self._path), error=str(e))
            raise StorageWriteError(f"Failed to write {self._path}: {e}")

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except StorageReadError:
            # A corrupt file is replaced rather than blocking every save
            logger.warning("storage_file_reset", path=str(self._path))
            data = {}
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def keys(self) -> list[str]:
        return list(self._read_all())
