"""
Key-Value Slot Implementations

FileSlot keeps one UTF-8 JSON file per key inside a data directory.
Writes go to a temporary file first and are moved into place with
os.replace(), so a crash mid-write leaves the previous value intact.

MemorySlot keeps values in a dict. It is used by the tests and by callers
that embed the ledger without wanting anything on disk.
"""

import os
from pathlib import Path
from typing import Optional

from pocketledger.services.storage.interface import KeyValueSlot, PersistenceError


class FileSlot(KeyValueSlot):
    """Slot backed by <data_dir>/<key>.json files."""

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Failed to read {path}: {e}")

    def write(self, key: str, data: str) -> None:
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(data)
            os.replace(tmp, path)
        except OSError as e:
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            raise PersistenceError(f"Failed to write {path}: {e}")


class MemorySlot(KeyValueSlot):
    """Slot backed by a plain dict."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._values: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, data: str) -> None:
        self._values[key] = data
