"""StudyLog core library — study-hours data layer and averages.

Public API re-exports for convenient imports:
    from studylog import open_tracker, StudyTracker, coerce_hours, ...
"""

# Workspace & paths
from studylog.workspace import (
    workspace_root,
    get_user_timezone,
    today,
    today_str,
    now_local,
    init_workspace,
    config_path,
    entries_path,
    cache_path,
)

# File I/O
from studylog.fileio import (
    read_text,
    read_json,
    read_yaml,
    write_json_atomic,
    write_yaml_atomic,
)

# Configuration
from studylog.config import Settings, load_settings, setup_logging

# Storage
from studylog.backends import (
    DurableStore,
    FileStore,
    StoreError,
    SupabaseStore,
    make_durable_store,
)
from studylog.cache import START_DATE_KEY, FallbackCache, FileCache, MemoryCache
from studylog.store import EntryStore

# Tracker & aggregation
from studylog.tracker import StudyTracker, coerce_hours, open_tracker
from studylog.aggregation import (
    active_weeks,
    compute_dashboard,
    current_week_average,
    days_between,
    last_week_average,
    lifetime_average,
    running_average_until,
    total_days,
    total_hours,
    week_over_week_change,
    week_start,
    weekly_average,
    weekly_chart_series,
)
from studylog.heatmap import (
    PROGRESS_MAX_HOURS,
    QUICK_HOURS,
    WEEKDAY_NAMES,
    heatmap_level,
    heatmap_tone,
    month_grid,
    month_weeks,
    progress_percentage,
    shift_month,
    step_hours,
    trend,
)

# Models
from studylog.models import (
    StudyEntry,
    EntrySet,
    PendingWrite,
    WeeklyDataPoint,
    DashboardSummary,
    CalendarDay,
    parse_day,
)
