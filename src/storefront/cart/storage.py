"""Durable local storage for the shopper session.

Defines the key/value contract the cart store persists through, with a
file-backed adapter for real sessions and an in-memory adapter for tests.
Values are opaque strings; callers own their serialization.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class LocalStorage(ABC):
    """Abstract key/value storage that survives across sessions."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value for ``key``, or None when absent."""
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``. Absent keys are ignored."""
        ...


class MemoryStorage(LocalStorage):
    """Storage kept in a dict; shared between store instances to simulate a reload."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value
        self.writes.append((key, value))

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStorage(LocalStorage):
    """Storage persisted as one JSON object (key -> string) in a file.

    Every write rewrites the whole file through a temporary file and an
    atomic rename, so a crash mid-write leaves the previous content intact.
    An unreadable file is treated as empty; the next write replaces it.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path).expanduser()

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            logger.warning("storage_unreadable", path=str(self.path), error=str(exc))
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("storage_corrupted", path=str(self.path))
            return {}

        if not isinstance(data, dict):
            logger.warning("storage_corrupted", path=str(self.path))
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
