"""Averaging and trend computations over a snapshot of study entries.

Every function is pure: it reads an EntrySet, the start date and "today"
and returns a number or a list of data points. Weeks are Monday-aligned and
always divided by 7, so a week in progress is compared on the same basis as
a finished one.
"""

from __future__ import annotations

from datetime import date, timedelta

from studylog.models import DashboardSummary, EntrySet, WeeklyDataPoint

DAYS_PER_WEEK = 7
CHART_WEEKS = 8


def days_between(later: date, earlier: date) -> int:
    return (later - earlier).days


def week_start(day: date) -> date:
    """Monday on or before *day*."""
    return day - timedelta(days=day.weekday())


def week_label(day: date) -> str:
    """Short label like 'Jan 8'."""
    return f"{day.strftime('%b')} {day.day}"


# ── Totals ────────────────────────────────────────────────────


def total_hours(entries: EntrySet) -> float:
    return entries.total_hours()


def total_days(start_date: date | None, today: date) -> int:
    """Days from the start date through today, both inclusive."""
    if start_date is None:
        return 0
    return days_between(today, start_date) + 1


# ── Averages ──────────────────────────────────────────────────


def lifetime_average(entries: EntrySet, start_date: date | None, today: date) -> float:
    """Total hours divided by every day since the start date."""
    if start_date is None or len(entries) == 0:
        return 0.0
    days = total_days(start_date, today)
    if days <= 0:
        return 0.0
    return entries.total_hours() / days


def running_average_until(entries: EntrySet, start_date: date | None, day: date) -> float:
    """Average daily hours from the start date through *day* inclusive."""
    if start_date is None or day < start_date:
        return 0.0
    days = days_between(day, start_date) + 1
    hours = sum(e.hours for e in entries.between(start_date, day))
    return hours / days


def weekly_average(entries: EntrySet, start: date) -> float:
    """Hours logged in [start, start + 6 days], divided by 7."""
    end = start + timedelta(days=DAYS_PER_WEEK - 1)
    hours = sum(e.hours for e in entries.between(start, end))
    return hours / DAYS_PER_WEEK


def current_week_average(entries: EntrySet, today: date) -> float:
    return weekly_average(entries, week_start(today))


def last_week_average(entries: EntrySet, today: date) -> float:
    return weekly_average(entries, week_start(today - timedelta(weeks=1)))


def week_over_week_change(entries: EntrySet, today: date) -> float:
    """Percent change of this week's average over last week's.

    With nothing logged last week: 100 if there is activity now, else 0.
    """
    current = current_week_average(entries, today)
    last = last_week_average(entries, today)
    if last == 0:
        return 100.0 if current > 0 else 0.0
    return (current - last) / last * 100


def weekly_chart_series(
    entries: EntrySet, today: date, weeks: int = CHART_WEEKS
) -> list[WeeklyDataPoint]:
    """Weekly averages for the last *weeks* weeks, oldest first, current week last."""
    series = []
    for i in range(weeks - 1, -1, -1):
        start = week_start(today - timedelta(weeks=i))
        series.append(
            WeeklyDataPoint(
                week_index=weeks - i,
                week_label=week_label(start),
                week_start=start,
                average=weekly_average(entries, start),
            )
        )
    return series


def active_weeks(series: list[WeeklyDataPoint]) -> int:
    return sum(1 for p in series if p.average > 0)


# ── Summary ───────────────────────────────────────────────────


def compute_dashboard(
    entries: EntrySet,
    start_date: date | None,
    today: date,
    pending_writes: int = 0,
) -> DashboardSummary:
    """Bundle every headline number for one render of the dashboard."""
    chart = weekly_chart_series(entries, today)
    return DashboardSummary(
        today=today,
        start_date=start_date,
        lifetime_average=lifetime_average(entries, start_date, today),
        current_week_average=current_week_average(entries, today),
        last_week_average=last_week_average(entries, today),
        week_over_week_change=week_over_week_change(entries, today),
        total_days=total_days(start_date, today),
        total_hours=total_hours(entries),
        active_weeks=active_weeks(chart),
        chart=chart,
        pending_writes=pending_writes,
    )
