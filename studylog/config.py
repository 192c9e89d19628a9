"""Configuration loading and logging setup for StudyLog.

Settings come from ``config.yaml`` in the workspace root, with environment
variables taking precedence:

    STUDYLOG_BACKEND     file | supabase
    SUPABASE_URL         remote project URL
    SUPABASE_ANON_KEY    remote anon key
    STUDYLOG_LOG_LEVEL   DEBUG, INFO, WARNING, ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from studylog.fileio import read_yaml
from studylog.workspace import DEFAULT_CONFIG, config_path, workspace_root

logger = logging.getLogger(__name__)

VALID_BACKENDS = {"file", "supabase"}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class Settings:
    timezone: str = "UTC"
    backend: str = "file"
    table: str = "study_logs"
    supabase_url: str = ""
    supabase_key: str = ""
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Settings:
        if not d or not isinstance(d, dict):
            return cls()
        backend = str(d.get("backend", "file") or "file").strip().lower()
        if backend not in VALID_BACKENDS:
            logger.warning("Unknown backend %r in config, using 'file'", backend)
            backend = "file"
        return cls(
            timezone=str(d.get("timezone", "UTC") or "UTC"),
            backend=backend,
            table=str(d.get("table", "study_logs") or "study_logs"),
            supabase_url=str(d.get("supabase_url", "") or ""),
            supabase_key=str(d.get("supabase_key", "") or ""),
            log_level=str(d.get("log_level", "INFO") or "INFO").upper(),
        )

    def to_dict(self) -> dict[str, Any]:
        # Credentials are never echoed back
        return {
            "timezone": self.timezone,
            "backend": self.backend,
            "table": self.table,
            "supabaseConfigured": bool(self.supabase_url and self.supabase_key),
            "logLevel": self.log_level,
        }


def load_settings(root: Path | None = None) -> Settings:
    """Load config.yaml and apply environment overrides."""
    if root is None:
        root = workspace_root()

    data: dict[str, Any] = dict(DEFAULT_CONFIG)
    try:
        data.update(read_yaml(config_path(root)))
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", config_path(root), e)

    env_map = {
        "STUDYLOG_BACKEND": "backend",
        "SUPABASE_URL": "supabase_url",
        "SUPABASE_ANON_KEY": "supabase_key",
        "STUDYLOG_LOG_LEVEL": "log_level",
    }
    for env_name, key in env_map.items():
        value = os.environ.get(env_name)
        if value:
            data[key] = value

    return Settings.from_dict(data)


def setup_logging(level: str = "INFO", handler: logging.Handler | None = None) -> None:
    """Configure root logging once; later calls only adjust the level.

    The terminal UI passes its own handler so records do not corrupt the screen.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=numeric,
            format=LOG_FORMAT,
            handlers=[handler] if handler is not None else None,
        )
    root_logger.setLevel(numeric)
