from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import Body, Depends, FastAPI, Form, HTTPException, Query, status
from fastapi.responses import HTMLResponse, RedirectResponse

from studylog import (
    PROGRESS_MAX_HOURS,
    QUICK_HOURS,
    WEEKDAY_NAMES,
    StudyTracker,
    init_workspace,
    load_settings,
    month_grid,
    month_weeks,
    open_tracker,
    parse_day,
    progress_percentage,
    setup_logging,
    shift_month,
    trend,
)

# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


STYLE = """
body { font-family: system-ui, sans-serif; background: #f7f7fb; color: #1d1d29; margin: 0; }
.container { max-width: 960px; margin: 0 auto; padding: 24px; }
.card { background: #fff; border-radius: 16px; padding: 20px; margin: 16px 0; border: 1px solid #e6e6ef; }
.muted { color: #777790; } .small { font-size: 13px; }
.stats { display: grid; grid-template-columns: repeat(4, 1fr); gap: 12px; }
.stat b { font-size: 22px; display: block; }
.ring { font-size: 44px; font-weight: 700; text-align: center; }
.trend { display: inline-block; padding: 4px 12px; border-radius: 999px; font-size: 14px; }
.trend.up { background: #e3f7ea; color: #167a3c; } .trend.down { background: #fde8e8; color: #b42323; }
.trend.flat { background: #eee; color: #666; }
.bars { display: flex; align-items: flex-end; gap: 8px; height: 140px; }
.bar { flex: 1; background: #6c5ce7; border-radius: 6px 6px 0 0; min-height: 2px; }
.bar-label { flex: 1; text-align: center; font-size: 11px; }
table.cal { width: 100%; border-collapse: separate; border-spacing: 4px; }
table.cal td { text-align: center; border-radius: 8px; padding: 6px 2px; vertical-align: top; }
.lvl-0 { background: #f0f0f5; } .lvl-1 { background: #ddd6fe; } .lvl-2 { background: #c4b5fd; }
.lvl-3 { background: #a78bfa; } .lvl-4 { background: #8b5cf6; color: #fff; } .lvl-5 { background: #6d28d9; color: #fff; }
.today { outline: 2px solid #6c5ce7; } .future { opacity: 0.4; }
.pending { color: #b42323; }
"""


# ── App ───────────────────────────────────────────────────────

app = FastAPI(title="StudyLog UI", version="0.1.0")

_tracker: StudyTracker | None = None


def get_tracker() -> StudyTracker:
    """The session's tracker, loaded on first use."""
    global _tracker
    if _tracker is None:
        root = init_workspace()
        setup_logging(load_settings(root).log_level)
        _tracker = open_tracker(root)
    return _tracker


def _log(tracker: StudyTracker, day_text: str, hours: Any) -> date:
    try:
        day = parse_day(day_text)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid date: {day_text!r}")
    if day > tracker.today():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot log hours in the future")
    tracker.log_hours(day, hours)
    return day


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/", response_class=HTMLResponse)
def index(
    year: int | None = Query(default=None, ge=1, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    tracker: StudyTracker = Depends(get_tracker),
) -> HTMLResponse:
    today = tracker.today()
    year = year or today.year
    month = month or today.month

    s = tracker.summary()
    direction, trend_label = trend(s.week_over_week_change)
    ring_pct = progress_percentage(s.lifetime_average)

    peak = max([p.average for p in s.chart] + [0.0])
    bars = []
    labels = []
    for p in s.chart:
        height = (p.average / peak * 100) if peak > 0 else 0
        bars.append(f'<div class="bar" style="height:{height:.0f}%" title="{p.average:.2f} h/day"></div>')
        labels.append(f'<div class="bar-label muted">{_escape(p.week_label)}</div>')

    padding, days = month_grid(year, month, tracker, today)
    rows = []
    for week in month_weeks(padding, days):
        cells = []
        for cell in week:
            if cell is None:
                cells.append("<td></td>")
                continue
            classes = [f"lvl-{cell.level}"]
            if cell.is_today:
                classes.append("today")
            if cell.is_future:
                classes.append("future")
            hours_txt = f'<div class="small">{cell.hours:g}h</div>' if cell.hours > 0 else ""
            form = ""
            if not cell.is_future:
                form = (
                    f'<form method="post" action="/log">'
                    f'<input type="hidden" name="date" value="{cell.date.isoformat()}" />'
                    f'<input name="hours" size="3" placeholder="+h" />'
                    f"</form>"
                )
            cells.append(
                f'<td class="{" ".join(classes)}" title="Running avg: {cell.running_average:.2f} hrs/day">'
                f"<div>{cell.date.day}</div>{hours_txt}{form}</td>"
            )
        rows.append("<tr>" + "".join(cells) + "</tr>")

    prev_y, prev_m = shift_month(year, month, -1)
    next_y, next_m = shift_month(year, month, 1)
    month_name = date(year, month, 1).strftime("%B %Y")
    pending = len(tracker.pending_writes)
    pending_html = (
        f'<div class="pending small">{pending} unsaved change(s). '
        f'<form method="post" action="/retry" style="display:inline"><button>Retry</button></form></div>'
        if pending
        else ""
    )
    quick = ", ".join(f"{h:+g}h" for h in QUICK_HOURS)

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Study Tracker</title>
  <style>{STYLE}</style>
</head>
<body>
  <div class="container">
    <header>
      <h1>Study Tracker</h1>
      <div class="muted small">Track your progress, build consistency</div>
      {pending_html}
    </header>

    <section class="card" style="text-align:center">
      <div class="muted small">LIFETIME AVERAGE · your daily study average since day one</div>
      <div class="ring">{s.lifetime_average:.1f}h</div>
      <div class="muted small">{ring_pct:.0f}% of {PROGRESS_MAX_HOURS}h/day</div>
      <span class="trend {direction}">{_escape(trend_label)}</span>
    </section>

    <section class="stats">
      <div class="card stat"><span class="muted small">This Week</span><b>{s.current_week_average:.1f}h</b><span class="muted small">avg per day</span></div>
      <div class="card stat"><span class="muted small">Total Hours</span><b>{s.total_hours:.0f}</b><span class="muted small">all time</span></div>
      <div class="card stat"><span class="muted small">Days Tracked</span><b>{s.total_days}</b><span class="muted small">since start</span></div>
      <div class="card stat"><span class="muted small">Study Days</span><b>{s.active_weeks}</b><span class="muted small">active weeks</span></div>
    </section>

    <section class="card">
      <h2>Weekly Trend</h2>
      <div class="muted small">Average hours per day over the last 8 weeks</div>
      <div class="bars">{''.join(bars)}</div>
      <div style="display:flex; gap:8px">{''.join(labels)}</div>
    </section>

    <section class="card">
      <h2>Log Your Hours</h2>
      <div class="muted small">Type hours into a day and press Enter. Negative values subtract. Quick values: {_escape(quick)}</div>
      <div style="display:flex; justify-content:space-between; margin:12px 0">
        <a href="/?year={prev_y}&month={prev_m}">&larr;</a>
        <b>{_escape(month_name)}</b>
        <a href="/?year={next_y}&month={next_m}">&rarr;</a>
      </div>
      <table class="cal">
        <tr>{''.join(f'<th class="muted small">{d}</th>' for d in WEEKDAY_NAMES)}</tr>
        {''.join(rows)}
      </table>
    </section>

    <footer class="muted small">v0.1</footer>
  </div>
</body>
</html>"""
    return HTMLResponse(html)


@app.post("/log")
def log_form(
    date_str: str = Form(..., alias="date"),
    hours: str = Form(""),
    tracker: StudyTracker = Depends(get_tracker),
) -> RedirectResponse:
    day = _log(tracker, date_str, hours)
    return RedirectResponse(url=f"/?year={day.year}&month={day.month}", status_code=303)


@app.post("/retry")
def retry_form(tracker: StudyTracker = Depends(get_tracker)) -> RedirectResponse:
    tracker.retry_failed()
    return RedirectResponse(url="/", status_code=303)


# ── JSON API ──────────────────────────────────────────────────

@app.get("/api/summary")
def api_summary(tracker: StudyTracker = Depends(get_tracker)) -> dict[str, Any]:
    s = tracker.summary()
    direction, label = trend(s.week_over_week_change)
    data = s.to_dict()
    data["trend"] = {"direction": direction, "label": label}
    data["progressPct"] = round(progress_percentage(s.lifetime_average), 1)
    return {"ok": True, "summary": data}


@app.get("/api/entries")
def api_entries(tracker: StudyTracker = Depends(get_tracker)) -> dict[str, Any]:
    return {
        "ok": True,
        "startDate": tracker.start_date.isoformat() if tracker.start_date else None,
        "entries": tracker.entries.to_list(),
    }


@app.get("/api/entries/{day}")
def api_entry(day: str, tracker: StudyTracker = Depends(get_tracker)) -> dict[str, Any]:
    try:
        d = parse_day(day)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid date: {day!r}")
    return {
        "ok": True,
        "date": d.isoformat(),
        "hours": tracker.get_hours_for_date(d),
        "runningAverage": round(tracker.running_average_until(d), 3),
    }


@app.post("/api/log")
def api_log(payload: dict[str, Any] = Body(...), tracker: StudyTracker = Depends(get_tracker)) -> dict[str, Any]:
    if "date" not in payload:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="date is required")
    day = _log(tracker, str(payload["date"]), payload.get("hours"))
    return {
        "ok": True,
        "date": day.isoformat(),
        "hours": tracker.get_hours_for_date(day),
        "startDate": tracker.start_date.isoformat() if tracker.start_date else None,
        "pending": [w.to_dict() for w in tracker.pending_writes],
    }


@app.get("/api/chart")
def api_chart(tracker: StudyTracker = Depends(get_tracker)) -> dict[str, Any]:
    return {"ok": True, "weeks": [p.to_dict() for p in tracker.weekly_chart_series()]}


@app.get("/api/calendar")
def api_calendar(
    year: int | None = Query(default=None, ge=1, le=9999),
    month: int | None = Query(default=None, ge=1, le=12),
    tracker: StudyTracker = Depends(get_tracker),
) -> dict[str, Any]:
    today = tracker.today()
    year = year or today.year
    month = month or today.month
    padding, days = month_grid(year, month, tracker, today)
    return {
        "ok": True,
        "year": year,
        "month": month,
        "padding": padding,
        "days": [d.to_dict() for d in days],
    }


@app.get("/api/pending")
def api_pending(tracker: StudyTracker = Depends(get_tracker)) -> dict[str, Any]:
    writes = tracker.pending_writes
    return {"ok": True, "consistent": not writes, "pending": [w.to_dict() for w in writes]}


@app.post("/api/pending/retry")
def api_pending_retry(tracker: StudyTracker = Depends(get_tracker)) -> dict[str, Any]:
    failed = tracker.retry_failed()
    return {"ok": not failed, "pending": [w.to_dict() for w in failed]}
