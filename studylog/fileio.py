"""Workspace file I/O for StudyLog.

The file backend keeps the whole ``study_logs`` collection in one JSON
document and the start-date cache in another, and both are rewritten on
every change. Writes therefore go to a temp file in the same directory and
are renamed over the target, so a crash mid-write leaves the previous
collection intact. ``config.yaml`` goes through the same path.
"""

from __future__ import annotations

import fcntl
import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml


def read_text(path: Path) -> str:
    """File contents, or "" for a workspace file that was never written."""
    if not path.exists():
        return ""
    return path.read_text(encoding="utf-8")


def read_json(path: Path) -> dict[str, Any]:
    """Load a JSON document (study_logs.json, cache.json).

    A missing or blank file is an empty document, as is a top-level value
    that is not an object. Corrupt content raises ``json.JSONDecodeError``:
    the file store turns it into ``StoreError``, the cache logs and ignores it.
    """
    text = read_text(path)
    if not text.strip():
        return {}
    result = json.loads(text)
    return result if isinstance(result, dict) else {}


def read_yaml(path: Path) -> dict[str, Any]:
    """Load config.yaml. Missing, blank or non-mapping content gives {}."""
    text = read_text(path)
    if not text.strip():
        return {}
    result = yaml.safe_load(text)
    return result if isinstance(result, dict) else {}


def _atomic_write(path: Path, content: str, suffix: str) -> None:
    # Temp file in the target directory so the rename stays on one filesystem
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}_", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        os.replace(temp_path, path)
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Replace a JSON document in one step. Dates must already be ISO strings."""
    _atomic_write(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", suffix=".json")


def write_yaml_atomic(path: Path, data: dict[str, Any]) -> None:
    """Replace config.yaml, keeping key order as given."""
    content = yaml.safe_dump(data, default_flow_style=False, allow_unicode=True, sort_keys=False)
    _atomic_write(path, content, suffix=".yaml")
