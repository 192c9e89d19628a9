"""Typed dataclasses for the StudyLog data model.

Models use from_dict/to_dict for JSON serialization.
camelCase in JSON is mapped to snake_case in Python.
Dates are ISO strings (YYYY-MM-DD) on the wire and ``datetime.date`` in Python.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterator


def parse_day(value: date | datetime | str) -> date:
    """Coerce a date, datetime or ISO string into a calendar day.

    Raises ValueError for strings that are not ISO dates.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    # Timestamps from the remote store may carry a time component
    return date.fromisoformat(text[:10])


# ── Entries ───────────────────────────────────────────────────


@dataclass
class StudyEntry:
    """One calendar day's recorded study hours."""

    date: date
    hours: float

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StudyEntry:
        return cls(date=parse_day(d["date"]), hours=float(d.get("hours", 0.0)))

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "hours": self.hours}


@dataclass
class EntrySet:
    """Study entries keyed by date. At most one entry per day, all with hours > 0."""

    by_date: dict[date, StudyEntry] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: list[StudyEntry]) -> EntrySet:
        s = cls()
        for e in entries:
            s.put(e)
        return s

    def __len__(self) -> int:
        return len(self.by_date)

    def __contains__(self, day: object) -> bool:
        return day in self.by_date

    def __iter__(self) -> Iterator[StudyEntry]:
        return iter(self.sorted())

    def get(self, day: date) -> StudyEntry | None:
        return self.by_date.get(day)

    def hours_for(self, day: date) -> float:
        entry = self.by_date.get(day)
        return entry.hours if entry else 0.0

    def put(self, entry: StudyEntry) -> None:
        if entry.hours <= 0:
            raise ValueError(f"Entry for {entry.date.isoformat()} must have positive hours")
        self.by_date[entry.date] = entry

    def remove(self, day: date) -> StudyEntry | None:
        return self.by_date.pop(day, None)

    def sorted(self) -> list[StudyEntry]:
        return [self.by_date[d] for d in sorted(self.by_date)]

    def between(self, start: date, end: date) -> list[StudyEntry]:
        """Entries with start <= date <= end, oldest first."""
        return [e for e in self.sorted() if start <= e.date <= end]

    def earliest(self) -> date | None:
        return min(self.by_date) if self.by_date else None

    def total_hours(self) -> float:
        return sum(e.hours for e in self.by_date.values())

    def to_list(self) -> list[dict[str, Any]]:
        return [e.to_dict() for e in self.sorted()]


# ── Durable writes ────────────────────────────────────────────


@dataclass
class PendingWrite:
    """A durable-store write whose outcome is not yet known, or which failed."""

    op: str = "upsert"  # upsert, delete
    date: date | None = None
    hours: float = 0.0
    status: str = "pending"  # pending, failed
    attempts: int = 0
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self.op,
            "date": self.date.isoformat() if self.date else None,
            "hours": self.hours,
            "status": self.status,
            "attempts": self.attempts,
            "error": self.error,
        }


# ── Aggregation ───────────────────────────────────────────────


@dataclass
class WeeklyDataPoint:
    week_index: int = 0
    week_label: str = ""
    week_start: date | None = None
    average: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "week": self.week_index,
            "weekLabel": self.week_label,
            "weekStart": self.week_start.isoformat() if self.week_start else None,
            "average": round(self.average, 3),
        }


@dataclass
class DashboardSummary:
    today: date | None = None
    start_date: date | None = None
    lifetime_average: float = 0.0
    current_week_average: float = 0.0
    last_week_average: float = 0.0
    week_over_week_change: float = 0.0
    total_days: int = 0
    total_hours: float = 0.0
    active_weeks: int = 0
    chart: list[WeeklyDataPoint] = field(default_factory=list)
    pending_writes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "today": self.today.isoformat() if self.today else None,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "lifetimeAverage": round(self.lifetime_average, 3),
            "currentWeekAverage": round(self.current_week_average, 3),
            "lastWeekAverage": round(self.last_week_average, 3),
            "weekOverWeekChange": round(self.week_over_week_change, 1),
            "totalDays": self.total_days,
            "totalHours": round(self.total_hours, 2),
            "activeWeeks": self.active_weeks,
            "chart": [p.to_dict() for p in self.chart],
            "pendingWrites": self.pending_writes,
        }


# ── Calendar ──────────────────────────────────────────────────


@dataclass
class CalendarDay:
    date: date
    hours: float = 0.0
    level: int = 0  # heatmap bucket 0..5
    tone: str = "muted"  # muted, secondary, primary
    running_average: float = 0.0
    is_today: bool = False
    is_future: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "hours": self.hours,
            "level": self.level,
            "tone": self.tone,
            "runningAverage": round(self.running_average, 2),
            "isToday": self.is_today,
            "isFuture": self.is_future,
        }
