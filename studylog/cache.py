"""Fallback key/value cache for StudyLog.

Holds the tracking start date so the app stays usable when the durable
store is unreachable. Injected into the Entry Store as a ``FallbackCache``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from studylog.fileio import read_json, write_json_atomic

logger = logging.getLogger(__name__)

START_DATE_KEY = "study-tracker-start-date"


class FallbackCache(Protocol):
    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class MemoryCache:
    """Process-local cache, for tests and throwaway sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value


class FileCache:
    """Small JSON object on disk. Best effort: I/O problems are logged, not raised."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, str]:
        try:
            data = read_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable cache %s: %s", self.path, e)
            return {}
        return {str(k): str(v) for k, v in data.items() if v is not None}

    def get(self, key: str) -> str | None:
        return self._load().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        if data.get(key) == value:
            return
        data[key] = value
        try:
            write_json_atomic(self.path, data)
        except OSError as e:
            logger.error("Could not write cache %s: %s", self.path, e)
