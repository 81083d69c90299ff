"""
Key-value backends.

A backend stores string values under string keys, the way browser local
storage does. ``FileStorage`` keeps one file per key inside a directory;
``MemoryStorage`` keeps everything in a dict and is what the tests use.

Backends raise StorageUnavailableError on any I/O failure. Callers that must
not fail (the repositories) catch it.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Union

from flowdoc.core.errors import StorageUnavailableError


class KeyValueStorage:
    """Interface shared by all backends."""

    def get_item(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove_item(self, key: str) -> None:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage, optionally capped to mimic a storage quota."""

    def __init__(self, quota: Optional[int] = None):
        self._items: Dict[str, str] = {}
        self.quota = quota

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota is not None:
            used = sum(len(v) for k, v in self._items.items() if k != key)
            if used + len(value) > self.quota:
                raise StorageUnavailableError(f"Storage quota exceeded writing {key}", key=key)
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)


class FileStorage(KeyValueStorage):
    """One ``<key>.json`` file per key under ``directory``."""

    _SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def _path(self, key: str) -> Path:
        if not self._SAFE_KEY.match(key):
            raise StorageUnavailableError(f"Invalid storage key: {key!r}", key=key)
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageUnavailableError(f"Could not read {path}: {e}", key=key) from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file and rename so readers never see half a value
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp, path)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StorageUnavailableError(f"Could not write {path}: {e}", key=key) from e

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageUnavailableError(f"Could not remove {path}: {e}", key=key) from e

    def keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
