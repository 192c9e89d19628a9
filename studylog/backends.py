"""Durable storage backends for the ``study_logs`` collection.

The rest of StudyLog only talks to the small ``DurableStore`` interface.
Records on this interface are plain dicts in wire format:
``{"date": "YYYY-MM-DD", "hours": <number>}``, unique per date.

Two implementations:
- ``FileStore``: a JSON file in the workspace (default, works offline)
- ``SupabaseStore``: a remote Supabase/PostgREST table
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from supabase import Client, create_client

from studylog.config import Settings
from studylog.fileio import read_json, write_json_atomic
from studylog.workspace import entries_path, workspace_root

logger = logging.getLogger(__name__)

COLLECTION = "study_logs"


class StoreError(RuntimeError):
    """Raised by a durable store when a read or write did not go through."""


class DurableStore(Protocol):
    """Minimal interface the Entry Store needs from persistent storage."""

    def fetch_all(self) -> list[dict[str, Any]]: ...
    def fetch_earliest(self) -> dict[str, Any] | None: ...
    def upsert(self, record: dict[str, Any]) -> None: ...
    def delete(self, day: str) -> None: ...


# ── Local JSON file ───────────────────────────────────────────


class FileStore:
    """``study_logs`` kept as a JSON document: ``{"study_logs": [...]}``."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def _load(self) -> dict[str, dict[str, Any]]:
        try:
            data = read_json(self.path)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Cannot read {self.path}: {e}") from e
        rows = data.get(COLLECTION) or []
        return {str(r.get("date", "")): r for r in rows if isinstance(r, dict)}

    def _save(self, rows: dict[str, dict[str, Any]]) -> None:
        ordered = [rows[k] for k in sorted(rows)]
        try:
            write_json_atomic(self.path, {COLLECTION: ordered})
        except OSError as e:
            raise StoreError(f"Cannot write {self.path}: {e}") from e

    def fetch_all(self) -> list[dict[str, Any]]:
        rows = self._load()
        return [rows[k] for k in sorted(rows)]

    def fetch_earliest(self) -> dict[str, Any] | None:
        rows = self.fetch_all()
        return rows[0] if rows else None

    def upsert(self, record: dict[str, Any]) -> None:
        rows = self._load()
        rows[str(record["date"])] = {"date": str(record["date"]), "hours": record["hours"]}
        self._save(rows)

    def delete(self, day: str) -> None:
        rows = self._load()
        if rows.pop(day, None) is not None:
            self._save(rows)


# ── Supabase ──────────────────────────────────────────────────


class SupabaseStore:
    """``study_logs`` as a Supabase table with a unique ``date`` column."""

    def __init__(self, client: Client, table: str = COLLECTION) -> None:
        self.client = client
        self.table = table

    @classmethod
    def from_settings(cls, settings: Settings) -> SupabaseStore:
        client = create_client(settings.supabase_url, settings.supabase_key)
        return cls(client, table=settings.table)

    def fetch_all(self) -> list[dict[str, Any]]:
        try:
            response = (
                self.client.table(self.table)
                .select("date, hours")
                .order("date", desc=False)
                .execute()
            )
        except Exception as e:
            raise StoreError(f"Failed to load {self.table}: {e}") from e
        return list(response.data or [])

    def fetch_earliest(self) -> dict[str, Any] | None:
        try:
            response = (
                self.client.table(self.table)
                .select("date")
                .order("date", desc=False)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise StoreError(f"Failed to query earliest {self.table} row: {e}") from e
        rows = response.data or []
        return rows[0] if rows else None

    def upsert(self, record: dict[str, Any]) -> None:
        try:
            self.client.table(self.table).upsert(
                {"date": record["date"], "hours": record["hours"]},
                on_conflict="date",
            ).execute()
        except Exception as e:
            raise StoreError(f"Failed to upsert {record['date']}: {e}") from e

    def delete(self, day: str) -> None:
        try:
            self.client.table(self.table).delete().eq("date", day).execute()
        except Exception as e:
            raise StoreError(f"Failed to delete {day}: {e}") from e


def make_durable_store(settings: Settings, root: Path | None = None) -> DurableStore:
    """Build the configured backend, falling back to the local file."""
    if root is None:
        root = workspace_root()
    if settings.backend == "supabase":
        if settings.supabase_url and settings.supabase_key:
            logger.info("Using Supabase table %r", settings.table)
            return SupabaseStore.from_settings(settings)
        logger.warning(
            "Supabase backend selected but SUPABASE_URL/SUPABASE_ANON_KEY missing; "
            "using local file store"
        )
    return FileStore(entries_path(root))
