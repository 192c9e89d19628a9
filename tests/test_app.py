"""Tests for ui/app.py — dashboard page and JSON API."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from ui.app import app, get_tracker


@pytest.fixture
def tracker(make_tracker):
    t = make_tracker()
    t.load()
    return t


@pytest.fixture
def client(tracker):
    app.dependency_overrides[get_tracker] = lambda: tracker
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


def test_summary_on_empty_history(client):
    data = client.get("/api/summary").json()
    assert data["ok"] is True
    s = data["summary"]
    assert s["today"] == "2024-01-17"
    assert s["lifetimeAverage"] == 0
    assert s["totalDays"] == 1
    assert len(s["chart"]) == 8
    assert s["trend"] == {"direction": "flat", "label": "0% from last week"}


def test_log_and_read_back(client, tracker):
    r = client.post("/api/log", json={"date": "2024-01-15", "hours": "2.5"})
    assert r.status_code == 200
    body = r.json()
    assert body["hours"] == 2.5
    assert body["pending"] == []

    r = client.post("/api/log", json={"date": "2024-01-10", "hours": 1})
    assert r.json()["startDate"] == "2024-01-10"

    entries = client.get("/api/entries").json()
    assert entries["startDate"] == "2024-01-10"
    assert [e["date"] for e in entries["entries"]] == ["2024-01-10", "2024-01-15"]

    one = client.get("/api/entries/2024-01-15").json()
    assert one["hours"] == 2.5
    assert tracker.get_hours_for_date(date(2024, 1, 15)) == 2.5


def test_log_rejects_future_and_invalid_dates(client):
    assert client.post("/api/log", json={"date": "2024-01-18", "hours": 1}).status_code == 400
    assert client.post("/api/log", json={"date": "not-a-date", "hours": 1}).status_code == 400
    assert client.post("/api/log", json={"hours": 1}).status_code == 400
    assert client.get("/api/entries/garbage").status_code == 400


def test_chart_and_calendar(client):
    client.post("/api/log", json={"date": "2024-01-16", "hours": 7})

    weeks = client.get("/api/chart").json()["weeks"]
    assert len(weeks) == 8
    assert weeks[-1]["weekStart"] == "2024-01-15"
    assert weeks[-1]["average"] == 1.0

    cal = client.get("/api/calendar", params={"year": 2024, "month": 1}).json()
    assert cal["padding"] == 0
    assert len(cal["days"]) == 31
    assert cal["days"][15]["hours"] == 7
    assert cal["days"][15]["level"] == 4
    assert client.get("/api/calendar", params={"month": 13}).status_code == 422


def test_pending_writes_and_retry(client, memory_store):
    memory_store.fail_writes = True
    body = client.post("/api/log", json={"date": "2024-01-12", "hours": 3}).json()
    assert body["hours"] == 3
    assert body["pending"][0]["status"] == "failed"

    pending = client.get("/api/pending").json()
    assert pending["consistent"] is False
    assert len(pending["pending"]) == 1

    assert client.post("/api/pending/retry").json()["ok"] is False
    memory_store.fail_writes = False
    assert client.post("/api/pending/retry").json() == {"ok": True, "pending": []}
    assert client.get("/api/pending").json()["consistent"] is True


def test_form_post_redirects_to_month(client, tracker):
    r = client.post("/log", data={"date": "2023-12-30", "hours": "1.5h"}, follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/?year=2023&month=12"
    assert tracker.get_hours_for_date(date(2023, 12, 30)) == 1.5


def test_index_renders(client):
    client.post("/api/log", json={"date": "2024-01-17", "hours": 2})
    r = client.get("/")
    assert r.status_code == 200
    assert "Study Tracker" in r.text
    assert "January 2024" in r.text
    assert "/?year=2023&month=12" in r.text


@pytest.mark.parametrize("path", ["/", "/api/calendar"])
@pytest.mark.parametrize("year", [0, 10000])
def test_out_of_range_year_is_rejected(client, path, year):
    r = client.get(path, params={"year": year, "month": 1})
    assert r.status_code == 422
