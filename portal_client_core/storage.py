"""Durable key-value stores for the session mirror."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path

_LOGGER = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String-keyed, string-valued persistent store."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value for key, or None."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key. Missing keys are ignored."""

    def get_many(self, keys: Iterable[str]) -> list[str | None]:
        """Return the values for keys, in order."""
        return [self.get(key) for key in keys]

    def set_many(self, values: Mapping[str, str]) -> None:
        """Store every key in values."""
        for key, value in values.items():
            self.set(key, value)

    def remove_many(self, keys: Iterable[str]) -> None:
        """Delete every key in keys."""
        for key in keys:
            self.remove(key)


class MemoryStore(KeyValueStore):
    """In-process store; survives nothing beyond the object itself."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        return dict(self._data)


class JsonFileStore(KeyValueStore):
    """Store persisted as one JSON object on disk.

    Every write rewrites the file through a temporary sibling and a rename,
    so a crash never leaves a half-written file. An unreadable or corrupt
    file reads as empty. The *_many methods touch the file once per call.
    """

    def __init__(self, file_path: Path) -> None:
        self.file_path = Path(file_path)
        self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> dict[str, str]:
        if not self.file_path.exists():
            return {}
        try:
            payload = json.loads(self.file_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as err:
            _LOGGER.warning("Ignoring unreadable store %s: %s", self.file_path, err)
            return {}
        if not isinstance(payload, dict):
            _LOGGER.warning("Ignoring malformed store %s", self.file_path)
            return {}
        return {str(key): str(value) for key, value in payload.items()}

    def _write(self, data: dict[str, str]) -> None:
        tmp_path = self.file_path.with_suffix(self.file_path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        tmp_path.replace(self.file_path)

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def get_many(self, keys: Iterable[str]) -> list[str | None]:
        data = self._read()
        return [data.get(key) for key in keys]

    def set_many(self, values: Mapping[str, str]) -> None:
        data = self._read()
        data.update(values)
        self._write(data)

    def remove_many(self, keys: Iterable[str]) -> None:
        data = self._read()
        removed = [key for key in keys if data.pop(key, None) is not None]
        if removed:
            self._write(data)
