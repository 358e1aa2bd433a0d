"""Key-value storage slots"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from ..core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStorage(ABC):
    """A set of named slots holding serialized strings"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...


class MemoryStorage(KeyValueStorage):
    """Session-scoped storage; contents vanish with the process"""

    def __init__(self):
        self.slots: dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self.slots.get(key)

    def set(self, key: str, value: str) -> None:
        self.slots[key] = value

    def delete(self, key: str) -> None:
        self.slots.pop(key, None)


class FileStorage(KeyValueStorage):
    """Durable storage with one JSON file per key"""

    def __init__(self, directory: Union[str, os.PathLike]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        safe_key = "".join(c if c.isalnum() or c in "-_." else "_" for c in key)
        return self.directory / f"{safe_key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(value, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}") from e
        logger.debug(f"Wrote slot {key} to {path}")

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Failed to delete {path}: {e}") from e
