"""Study tracker: in-memory entries, hour reconciliation and dashboard getters.

``StudyTracker`` is the single façade the presentation layers use. It keeps
the session's EntrySet and start date, applies hour deltas optimistically and
hands durable writes to the Entry Store.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable

from studylog import aggregation
from studylog.backends import make_durable_store
from studylog.cache import FileCache
from studylog.config import load_settings
from studylog.models import DashboardSummary, EntrySet, PendingWrite, StudyEntry, WeeklyDataPoint, parse_day
from studylog.store import EntryStore
from studylog.workspace import cache_path, today as workspace_today, workspace_root

logger = logging.getLogger(__name__)

# Longest leading float literal, same reading as a browser's parseFloat
_NUMBER_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

HOURS_PRECISION = 4


def coerce_hours(value: Any) -> float:
    """Permissively turn user input into an hour delta.

    '2.5' -> 2.5, '1.5h' -> 1.5, '-1' -> -1.0, 'abc'/None/'' -> 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        m = _NUMBER_PREFIX.match(str(value))
        if not m:
            return 0.0
        number = float(m.group(1))
    if not math.isfinite(number):
        return 0.0
    return number


class StudyTracker:
    def __init__(
        self,
        store: EntryStore,
        today_fn: Callable[[], date] | None = None,
    ) -> None:
        self.store = store
        self.entries = EntrySet()
        self.start_date: date | None = None
        self.is_loaded = False
        self._today_fn = today_fn or workspace_today

    def today(self) -> date:
        return self._today_fn()

    def load(self) -> None:
        """Load entries and the start date once at session start."""
        self.entries = self.store.load_entries()
        self.start_date = self.store.load_start_date(self.today())
        self.is_loaded = True

    # ── Reconciliation ─────────────────────────────────────────

    def log_hours(
        self,
        day: date | datetime | str,
        additional_hours: Any,
        flush: bool = True,
    ) -> StudyEntry | None:
        """Add a signed hour delta to a day's total.

        The total is floored at zero; a zero total deletes the day's entry.
        Logging before the start date moves the start date back to that day.
        Returns the resulting entry, or None when the day has no entry.
        """
        day = parse_day(day)
        delta = coerce_hours(additional_hours)
        if delta == 0:
            return self.entries.get(day)

        current = self.entries.hours_for(day)
        new_hours = max(0.0, round(current + delta, HOURS_PRECISION))

        if new_hours == 0:
            removed = self.entries.remove(day)
            if removed is not None:
                self.store.delete(day, flush=flush)
            result = None
        else:
            result = StudyEntry(date=day, hours=new_hours)
            self.entries.put(result)
            self.store.upsert(day, new_hours, flush=flush)

        if self.start_date is None or day < self.start_date:
            logger.info("Start date moved to %s", day.isoformat())
            self.start_date = day
            self.store.save_start_date(day)

        return result

    def get_hours_for_date(self, day: date | datetime | str) -> float:
        return self.entries.hours_for(parse_day(day))

    # ── Pending writes ─────────────────────────────────────────

    @property
    def pending_writes(self) -> list[PendingWrite]:
        return self.store.pending

    def flush(self) -> list[PendingWrite]:
        return self.store.flush()

    def retry_failed(self) -> list[PendingWrite]:
        return self.store.retry_failed()

    # ── Aggregation getters ────────────────────────────────────

    def lifetime_average(self) -> float:
        return aggregation.lifetime_average(self.entries, self.start_date, self.today())

    def running_average_until(self, day: date | datetime | str) -> float:
        return aggregation.running_average_until(self.entries, self.start_date, parse_day(day))

    def weekly_average(self, week_start: date | datetime | str) -> float:
        return aggregation.weekly_average(self.entries, parse_day(week_start))

    def current_week_average(self) -> float:
        return aggregation.current_week_average(self.entries, self.today())

    def last_week_average(self) -> float:
        return aggregation.last_week_average(self.entries, self.today())

    def week_over_week_change(self) -> float:
        return aggregation.week_over_week_change(self.entries, self.today())

    def weekly_chart_series(self) -> list[WeeklyDataPoint]:
        return aggregation.weekly_chart_series(self.entries, self.today())

    def total_days(self) -> int:
        return aggregation.total_days(self.start_date, self.today())

    def total_hours(self) -> float:
        return aggregation.total_hours(self.entries)

    def summary(self) -> DashboardSummary:
        return aggregation.compute_dashboard(
            self.entries,
            self.start_date,
            self.today(),
            pending_writes=len(self.store.pending),
        )


def open_tracker(root: Path | None = None) -> StudyTracker:
    """Build a loaded tracker for the workspace from its config.yaml."""
    if root is None:
        root = workspace_root()
    settings = load_settings(root)
    store = EntryStore(make_durable_store(settings, root), FileCache(cache_path(root)))
    tracker = StudyTracker(store, today_fn=lambda: workspace_today(root))
    tracker.load()
    return tracker
