#!/usr/bin/env python3
"""StudyLog TUI — interactive terminal study tracker powered by Textual."""

from __future__ import annotations

from datetime import date

from rich.text import Text
from textual import on, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.logging import TextualHandler
from textual.widgets import DataTable, Footer, Header, Input, Label, Static

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
    step_hours,
    trend,
    workspace_root,
)


# ── Stylesheet ─────────────────────────────────────────────────

APP_CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#left-pane {
    width: 1fr;
    min-width: 30;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#right-pane {
    width: 2fr;
    min-width: 40;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#stats-panel {
    height: auto;
    padding: 1 2;
    border: tall $primary-background-darken-2;
}

#chart-table {
    height: auto;
    max-height: 12;
}

#calendar-table {
    height: auto;
}

#log-row {
    height: auto;
    margin: 1 0 0 0;
}

#date-input, #hours-input {
    width: 1fr;
    height: 3;
}

#day-info {
    height: auto;
    padding: 0 1;
    color: $text-muted;
}

#status-bar {
    dock: bottom;
    height: 1;
    background: $primary-background;
    color: $text-muted;
    padding: 0 2;
}
"""

LEVEL_STYLES = {
    0: "dim",
    1: "on #3b3552",
    2: "on #4c3f7a",
    3: "on #5e47a8",
    4: "bold on #7450d6",
    5: "bold on #8b5cf6",
}


# ── App ────────────────────────────────────────────────────────


class StudyLogApp(App):
    """Dashboard, weekly chart and calendar heatmap for logged study hours."""

    TITLE = "Study Tracker"
    CSS = APP_CSS

    BINDINGS = [
        Binding("[", "prev_month", "Prev month"),
        Binding("]", "next_month", "Next month"),
        Binding("t", "this_month", "Today"),
        Binding("ctrl+up", "step_up", "+0.5h"),
        Binding("ctrl+down", "step_down", "-0.5h"),
        Binding("r", "retry", "Retry saves"),
        Binding("f5", "reload", "Reload"),
        Binding("escape", "blur_focus", "Back"),
        Binding("q", "quit_app", "Quit"),
    ]

    def __init__(self, tracker: StudyTracker) -> None:
        super().__init__()
        self.tracker = tracker
        today = tracker.today()
        self._year = today.year
        self._month = today.month

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Label("Lifetime Average", classes="section-title"),
                Static(id="stats-panel"),
                Label("Weekly Trend (avg h/day, last 8 weeks)", classes="section-title"),
                DataTable(id="chart-table", cursor_type="none"),
                id="left-pane",
            ),
            Vertical(
                Label("", id="month-title", classes="section-title"),
                DataTable(id="calendar-table", cursor_type="cell"),
                Horizontal(
                    Input(placeholder="date (YYYY-MM-DD, blank = today)", id="date-input"),
                    Input(placeholder="+hours (e.g. 1.5 or -0.5)", id="hours-input"),
                    id="log-row",
                ),
                Static(id="day-info"),
                id="right-pane",
            ),
            id="main-layout",
        )
        yield Static(id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        chart: DataTable = self.query_one("#chart-table", DataTable)
        chart.add_columns("Week", "Avg", "")
        calendar_table: DataTable = self.query_one("#calendar-table", DataTable)
        calendar_table.add_columns(*WEEKDAY_NAMES)
        self._refresh_all()

    # ── Rendering ──────────────────────────────────────────────

    def _refresh_all(self) -> None:
        self._render_stats()
        self._render_chart()
        self._render_calendar()
        self._render_status()

    def _render_stats(self) -> None:
        s = self.tracker.summary()
        _, trend_label = trend(s.week_over_week_change)
        pct = progress_percentage(s.lifetime_average)
        lines = [
            f"[b]{s.lifetime_average:.2f}h[/b] per day  ({pct:.0f}% of {PROGRESS_MAX_HOURS}h)",
            trend_label,
            "",
            f"This week    {s.current_week_average:.1f}h avg/day",
            f"Total hours  {s.total_hours:.0f}",
            f"Days tracked {s.total_days}",
            f"Active weeks {s.active_weeks}",
        ]
        self.query_one("#stats-panel", Static).update("\n".join(lines))

    def _render_chart(self) -> None:
        chart: DataTable = self.query_one("#chart-table", DataTable)
        chart.clear()
        series = self.tracker.weekly_chart_series()
        peak = max([p.average for p in series] + [0.0])
        for p in series:
            width = round(p.average / peak * 20) if peak > 0 else 0
            chart.add_row(p.week_label, f"{p.average:.2f}", "█" * width)

    def _render_calendar(self) -> None:
        today = self.tracker.today()
        title = date(self._year, self._month, 1).strftime("%B %Y")
        self.query_one("#month-title", Label).update(title)

        table: DataTable = self.query_one("#calendar-table", DataTable)
        table.clear()
        padding, days = month_grid(self._year, self._month, self.tracker, today)
        for week in month_weeks(padding, days):
            row = []
            for cell in week:
                if cell is None:
                    row.append(Text(""))
                    continue
                label = f"{cell.date.day:>2}"
                if cell.hours > 0:
                    label += f" {cell.hours:g}h"
                style = LEVEL_STYLES[cell.level]
                if cell.is_today:
                    style += " underline"
                if cell.is_future:
                    style = "dim italic"
                row.append(Text(label, style=style))
            table.add_row(*row)

    def _render_status(self) -> None:
        pending = self.tracker.pending_writes
        if pending:
            failed = sum(1 for w in pending if w.status == "failed")
            msg = f"{len(pending)} unsaved change(s), {failed} failed. Press r to retry."
        else:
            msg = f"All changes saved · {workspace_root()}"
        self.query_one("#status-bar", Static).update(msg)

    # ── Calendar selection ─────────────────────────────────────

    @on(DataTable.CellSelected, "#calendar-table")
    def _on_day_selected(self, event: DataTable.CellSelected) -> None:
        padding, days = month_grid(self._year, self._month, self.tracker)
        index = event.coordinate.row * 7 + event.coordinate.column - padding
        if not 0 <= index < len(days):
            return
        cell = days[index]
        if cell.is_future:
            return
        self.query_one("#date-input", Input).value = cell.date.isoformat()
        self.query_one("#day-info", Static).update(
            f"{cell.date.strftime('%A, %B %d, %Y')}: {cell.hours:g}h logged · "
            f"running average {cell.running_average:.2f} hrs/day"
        )
        self.query_one("#hours-input", Input).focus()

    # ── Logging hours ──────────────────────────────────────────

    @on(Input.Submitted, "#date-input, #hours-input")
    def _on_log_submitted(self, event: Input.Submitted) -> None:
        date_text = self.query_one("#date-input", Input).value.strip()
        hours_input = self.query_one("#hours-input", Input)
        today = self.tracker.today()
        try:
            day = parse_day(date_text) if date_text else today
        except ValueError:
            self.notify(f"Not a date: {date_text!r}", title="Log hours", severity="warning")
            return
        if day > today:
            self.notify("Cannot log hours in the future", title="Log hours", severity="warning")
            return

        # Local state first, durable write in the background
        entry = self.tracker.log_hours(day, hours_input.value, flush=False)
        hours_input.value = ""
        total = entry.hours if entry else 0.0
        self.query_one("#day-info", Static).update(
            f"{day.isoformat()}: {total:g}h total · quick values: "
            + ", ".join(f"{h:+g}" for h in QUICK_HOURS)
        )
        self._year, self._month = day.year, day.month
        self._refresh_all()
        self._flush_writes()

    # EntryStore.flush runs one at a time; later workers wait their turn
    @work(thread=True)
    def _flush_writes(self) -> None:
        failed = self.tracker.flush()
        if failed:
            self.call_from_thread(
                self.notify,
                f"{len(failed)} change(s) not saved: {failed[0].error}",
                title="Save failed",
                severity="error",
            )
        self.call_from_thread(self._render_status)

    # ── Actions ────────────────────────────────────────────────

    def action_prev_month(self) -> None:
        self._year, self._month = shift_month(self._year, self._month, -1)
        self._render_calendar()

    def action_next_month(self) -> None:
        self._year, self._month = shift_month(self._year, self._month, 1)
        self._render_calendar()

    def action_this_month(self) -> None:
        today = self.tracker.today()
        self._year, self._month = today.year, today.month
        self._render_calendar()

    def action_step_up(self) -> None:
        hours_input = self.query_one("#hours-input", Input)
        hours_input.value = step_hours(hours_input.value, 1)

    def action_step_down(self) -> None:
        hours_input = self.query_one("#hours-input", Input)
        hours_input.value = step_hours(hours_input.value, -1)

    def action_retry(self) -> None:
        self._flush_writes()

    def action_reload(self) -> None:
        if self.tracker.pending_writes:
            self.notify("Save or retry pending changes before reloading", title="Reload", severity="warning")
            return
        self.tracker.load()
        self._refresh_all()

    def action_blur_focus(self) -> None:
        self.set_focus(None)

    def action_quit_app(self) -> None:
        if self.tracker.pending_writes:
            self.tracker.flush()
        self.exit()


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    if not root.exists():
        print(f"Creating workspace at {root}")
    init_workspace(root)
    settings = load_settings(root)
    setup_logging(settings.log_level, handler=TextualHandler())

    app = StudyLogApp(open_tracker(root))
    app.run()


if __name__ == "__main__":
    main()
