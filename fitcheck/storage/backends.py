"""Durable key/value media for serialized lists."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    """Persist and read one serialized blob per key."""

    def read_list(self, key: str) -> str | None:
        ...

    def write_list(self, key: str, payload: str) -> None:
        ...


class MemoryStorage:
    """In-process storage, for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def read_list(self, key: str) -> str | None:
        return self.data.get(key)

    def write_list(self, key: str, payload: str) -> None:
        self.data[key] = payload


class JsonFileStorage:
    """One JSON file per key inside a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        """Get file path for a key."""
        return self.directory / f"{key}.json"

    def read_list(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def write_list(self, key: str, payload: str) -> None:
        """Replace the stored blob atomically."""
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d bytes to %s", len(payload), self._path(key))
