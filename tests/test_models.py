"""Tests for studylog/models.py — entries, entry sets and serialization."""

from datetime import date, datetime

import pytest

from studylog.models import (
    CalendarDay,
    EntrySet,
    PendingWrite,
    StudyEntry,
    WeeklyDataPoint,
    parse_day,
)


def test_parse_day():
    assert parse_day("2024-01-10") == date(2024, 1, 10)
    assert parse_day("2024-01-10T08:00:00+00:00") == date(2024, 1, 10)
    assert parse_day(datetime(2024, 1, 10, 23, 59)) == date(2024, 1, 10)
    assert parse_day(date(2024, 1, 10)) == date(2024, 1, 10)
    with pytest.raises(ValueError):
        parse_day("10/01/2024")


def test_study_entry_from_dict():
    e = StudyEntry.from_dict({"date": "2024-01-10", "hours": "2.5"})
    assert e.date == date(2024, 1, 10)
    assert e.hours == 2.5
    assert e.to_dict() == {"date": "2024-01-10", "hours": 2.5}


def test_entry_set_keeps_one_entry_per_day():
    s = EntrySet()
    s.put(StudyEntry(date(2024, 1, 10), 1))
    s.put(StudyEntry(date(2024, 1, 10), 3))
    assert len(s) == 1
    assert s.hours_for(date(2024, 1, 10)) == 3
    assert s.hours_for(date(2024, 1, 11)) == 0


def test_entry_set_rejects_non_positive_hours():
    s = EntrySet()
    with pytest.raises(ValueError):
        s.put(StudyEntry(date(2024, 1, 10), 0))
    with pytest.raises(ValueError):
        s.put(StudyEntry(date(2024, 1, 10), -1))
    assert len(s) == 0


def test_entry_set_ordering_and_ranges():
    s = EntrySet.from_entries([
        StudyEntry(date(2024, 1, 12), 1),
        StudyEntry(date(2024, 1, 3), 2),
        StudyEntry(date(2024, 1, 8), 4),
    ])
    assert [e.date.day for e in s] == [3, 8, 12]
    assert [e.date.day for e in s.between(date(2024, 1, 3), date(2024, 1, 8))] == [3, 8]
    assert s.earliest() == date(2024, 1, 3)
    assert s.total_hours() == 7
    assert s.remove(date(2024, 1, 8)).hours == 4
    assert s.remove(date(2024, 1, 8)) is None
    assert EntrySet().earliest() is None


def test_to_dict_shapes():
    assert PendingWrite(op="delete", date=date(2024, 1, 10)).to_dict() == {
        "op": "delete",
        "date": "2024-01-10",
        "hours": 0.0,
        "status": "pending",
        "attempts": 0,
        "error": "",
    }
    point = WeeklyDataPoint(week_index=8, week_label="Jan 15", week_start=date(2024, 1, 15), average=5 / 7)
    assert point.to_dict() == {"week": 8, "weekLabel": "Jan 15", "weekStart": "2024-01-15", "average": 0.714}
    day = CalendarDay(date=date(2024, 1, 10), hours=2, level=2, running_average=1 / 3)
    assert day.to_dict()["runningAverage"] == 0.33
