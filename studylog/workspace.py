"""Workspace root, timezone, path helpers for StudyLog."""

from __future__ import annotations

import logging
import os
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from studylog.fileio import read_yaml, write_yaml_atomic

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "timezone": "UTC",
    "backend": "file",
    "table": "study_logs",
    "log_level": "INFO",
}


def workspace_root() -> Path:
    """Get the workspace root directory (contains config.yaml and data/)."""
    return Path(
        os.environ.get("STUDYLOG_ROOT", str(Path.home() / "studylog"))
    ).expanduser().resolve()


def get_user_timezone(root: Path | None = None) -> ZoneInfo:
    """Get user's timezone from config.yaml, defaulting to UTC."""
    if root is None:
        root = workspace_root()
    try:
        config = read_yaml(config_path(root))
        if config and config.get("timezone"):
            return ZoneInfo(str(config["timezone"]))
    except (OSError, ValueError, yaml.YAMLError, ZoneInfoNotFoundError) as e:
        logger.warning("Falling back to UTC, could not read timezone: %s", e)
    return ZoneInfo("UTC")


def now_local(root: Path | None = None) -> datetime:
    """Get current datetime in user's timezone."""
    return datetime.now(get_user_timezone(root))


def today(root: Path | None = None) -> date:
    """Get today's date in user's timezone."""
    return now_local(root).date()


def today_str(root: Path | None = None) -> str:
    """Get today's date string (YYYY-MM-DD) in user's timezone."""
    return today(root).isoformat()


def init_workspace(root: Path | None = None) -> Path:
    """Create the workspace layout with a default config.yaml if missing."""
    if root is None:
        root = workspace_root()
    (root / "data").mkdir(parents=True, exist_ok=True)
    path = config_path(root)
    if not path.exists():
        write_yaml_atomic(path, dict(DEFAULT_CONFIG))
        logger.info("Created default config at %s", path)
    return root


# ── Path helpers ──────────────────────────────────────────────

def config_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "config.yaml"


def entries_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "study_logs.json"


def cache_path(root: Path | None = None) -> Path:
    if root is None:
        root = workspace_root()
    return root / "data" / "cache.json"
