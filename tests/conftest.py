"""Shared test fixtures for StudyLog tests."""

from __future__ import annotations

import json
import os
from datetime import date
from pathlib import Path
from typing import Any, Callable

import pytest
import yaml

from studylog.backends import StoreError
from studylog.cache import MemoryCache
from studylog.store import EntryStore
from studylog.tracker import StudyTracker

# Wednesday; the week runs Mon 2024-01-15 .. Sun 2024-01-21
TODAY = date(2024, 1, 17)


class MemoryStore:
    """In-memory ``study_logs`` collection with switchable failures."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows: dict[str, dict[str, Any]] = {r["date"]: dict(r) for r in (rows or [])}
        self.fail_reads = False
        self.fail_writes = False
        self.calls: list[tuple[str, Any]] = []

    def fetch_all(self) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", None))
        if self.fail_reads:
            raise StoreError("store offline")
        return [self.rows[k] for k in sorted(self.rows)]

    def fetch_earliest(self) -> dict[str, Any] | None:
        self.calls.append(("fetch_earliest", None))
        if self.fail_reads:
            raise StoreError("store offline")
        return self.rows[min(self.rows)] if self.rows else None

    def upsert(self, record: dict[str, Any]) -> None:
        self.calls.append(("upsert", record))
        if self.fail_writes:
            raise StoreError("write rejected")
        self.rows[record["date"]] = dict(record)

    def delete(self, day: str) -> None:
        self.calls.append(("delete", day))
        if self.fail_writes:
            raise StoreError("write rejected")
        self.rows.pop(day, None)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def make_tracker(memory_store: MemoryStore, memory_cache: MemoryCache) -> Callable[..., StudyTracker]:
    """Build an unloaded tracker over the in-memory store with a fixed today."""

    def _make(today: date = TODAY, store: MemoryStore | None = None) -> StudyTracker:
        entry_store = EntryStore(store or memory_store, memory_cache)
        return StudyTracker(entry_store, today_fn=lambda: today)

    return _make


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace with config and a few logged days."""
    root = tmp_path / "workspace"
    (root / "data").mkdir(parents=True)

    config = {
        "timezone": "UTC",
        "backend": "file",
        "table": "study_logs",
        "log_level": "DEBUG",
    }
    (root / "config.yaml").write_text(
        yaml.dump(config, default_flow_style=False), encoding="utf-8"
    )

    logs = {
        "study_logs": [
            {"date": "2024-01-08", "hours": 2},
            {"date": "2024-01-10", "hours": 3.5},
            {"date": "2024-01-15", "hours": 1},
        ]
    }
    (root / "data" / "study_logs.json").write_text(
        json.dumps(logs, indent=2), encoding="utf-8"
    )

    os.environ["STUDYLOG_ROOT"] = str(root)
    yield root
    if "STUDYLOG_ROOT" in os.environ:
        del os.environ["STUDYLOG_ROOT"]
