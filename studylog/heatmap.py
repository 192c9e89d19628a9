"""Calendar heatmap, trend and input helpers shared by the web and terminal UIs."""

from __future__ import annotations

import calendar
from datetime import date

from studylog.models import CalendarDay
from studylog.tracker import StudyTracker, coerce_hours

WEEKDAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

# Upper bounds (exclusive) of heatmap buckets 1..4; 8h and above is bucket 5
HEATMAP_THRESHOLDS = [2, 4, 6, 8]

QUICK_HOURS = [-1, -0.5, 0.5, 1, 1.5, 2, 3]
STEP_HOURS = 0.5

# Hours per day that fill the progress ring
PROGRESS_MAX_HOURS = 12


def heatmap_level(hours: float) -> int:
    """Bucket a day's hours into 0 (nothing) .. 5 (8h or more)."""
    if hours <= 0:
        return 0
    for level, bound in enumerate(HEATMAP_THRESHOLDS, start=1):
        if hours < bound:
            return level
    return len(HEATMAP_THRESHOLDS) + 1


def heatmap_tone(hours: float) -> str:
    if hours <= 0:
        return "muted"
    if hours < 4:
        return "secondary"
    return "primary"


def progress_percentage(value: float, max_value: float = PROGRESS_MAX_HOURS) -> float:
    if max_value <= 0:
        return 0.0
    return min(value / max_value * 100, 100.0)


def trend(change: float) -> tuple[str, str]:
    """Direction and label for a week-over-week change, e.g. ('up', '+12% from last week')."""
    if change > 0:
        direction = "up"
    elif change < 0:
        direction = "down"
    else:
        direction = "flat"
    sign = "+" if change > 0 else ""
    return direction, f"{sign}{change:.0f}% from last week"


def step_hours(text: str, direction: int) -> str:
    """Nudge an hours input by half an hour up (+1) or down (-1)."""
    value = coerce_hours(text) + STEP_HOURS * direction
    return f"{value:g}"


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_grid(
    year: int,
    month: int,
    tracker: StudyTracker,
    today: date | None = None,
) -> tuple[int, list[CalendarDay]]:
    """Cells for one month of a Monday-first calendar.

    Returns (padding, days) where padding is the number of blank cells
    before the 1st.
    """
    if today is None:
        today = tracker.today()
    first = date(year, month, 1)
    padding = first.weekday()
    _, n_days = calendar.monthrange(year, month)

    days = []
    for n in range(1, n_days + 1):
        d = date(year, month, n)
        hours = tracker.get_hours_for_date(d)
        days.append(
            CalendarDay(
                date=d,
                hours=hours,
                level=heatmap_level(hours),
                tone=heatmap_tone(hours),
                running_average=tracker.running_average_until(d),
                is_today=d == today,
                is_future=d > today,
            )
        )
    return padding, days


def month_weeks(padding: int, days: list[CalendarDay]) -> list[list[CalendarDay | None]]:
    """Split a month grid into rows of seven, padding with None."""
    cells: list[CalendarDay | None] = [None] * padding + list(days)
    while len(cells) % 7:
        cells.append(None)
    return [cells[i : i + 7] for i in range(0, len(cells), 7)]
