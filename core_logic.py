from dataclasses import dataclass, field
from datetime import datetime, timedelta
import math

from config import (
    TASK_HEIGHT, HEADER_HEIGHT, TASK_SPACING, PADDING, MIN_TASK_WIDTH,
    MIN_ZOOM, MAX_ZOOM, TIME_UNITS, DEFAULT_TIME_UNIT, DEFAULT_UNITS_TO_SHOW,
    DEFAULT_UNIT_WIDTH,
)

DAY_MS = 24 * 60 * 60 * 1000

UNIT_DURATIONS_MS = {
    'days': DAY_MS,
    'weeks': 7 * DAY_MS,
    # Flat 30 days; the week/month labels are computed from this too.
    'months': 30 * DAY_MS,
}

WEEKDAY_NAMES = ('Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun')
MONTH_NAMES = ('Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
               'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec')

# Offsets beyond this saturate instead of overflowing datetime.
MAX_OFFSET_MS = 3000 * 365 * DAY_MS


def _today_midnight():
    return datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass
class TimelineConfig:
    """Where the timeline starts and how wide each time unit is drawn."""
    start_date: datetime = field(default_factory=_today_midnight)
    time_unit: str = DEFAULT_TIME_UNIT
    units_to_show: int = DEFAULT_UNITS_TO_SHOW
    unit_width: float = DEFAULT_UNIT_WIDTH

    def __post_init__(self):
        if self.time_unit not in TIME_UNITS:
            raise ValueError(f"Unknown time unit '{self.time_unit}'. Use one of: {', '.join(TIME_UNITS)}.")
        if isinstance(self.units_to_show, bool) or not isinstance(self.units_to_show, int):
            raise ValueError(f"Units to show must be a whole number, got {self.units_to_show!r}.")
        if self.units_to_show <= 0:
            raise ValueError(f"Units to show must be positive, got {self.units_to_show}.")
        if not self.unit_width > 0:
            raise ValueError(f"Unit width must be positive, got {self.unit_width}.")


# --- Time units ---

def unit_duration_ms(time_unit):
    try:
        return UNIT_DURATIONS_MS[time_unit]
    except KeyError:
        raise ValueError(f"Unknown time unit '{time_unit}'.") from None


def unit_duration(time_unit):
    return timedelta(milliseconds=unit_duration_ms(time_unit))


def _add_ms(origin, offset_ms):
    """Adds a millisecond offset to a datetime, saturating instead of raising."""
    if math.isnan(offset_ms):
        return origin
    offset_ms = max(-MAX_OFFSET_MS, min(MAX_OFFSET_MS, offset_ms))
    try:
        return origin + timedelta(milliseconds=offset_ms)
    except OverflowError:
        return datetime.max if offset_ms > 0 else datetime.min


def unit_start(index, config):
    return _add_ms(config.start_date, index * unit_duration_ms(config.time_unit))


def format_unit(index, config):
    """Header labels for the unit at ``index``, independent of the machine locale."""
    unit_date = unit_start(index, config)

    if config.time_unit == 'days':
        return {"main": str(unit_date.day), "sub": WEEKDAY_NAMES[unit_date.weekday()]}
    elif config.time_unit == 'weeks':
        year_start = datetime(unit_date.year, 1, 1)
        week_ms = 7 * DAY_MS
        elapsed_ms = (unit_date - year_start) / timedelta(milliseconds=1)
        week_number = math.ceil(elapsed_ms / week_ms)
        return {"main": f"Week {week_number}", "sub": f"{unit_date.month}/{unit_date.day}"}
    elif config.time_unit == 'months':
        return {"main": MONTH_NAMES[unit_date.month - 1], "sub": str(unit_date.year)}
    return {"main": "", "sub": ""}


def is_current_unit(index, config, today=None):
    # Only day granularity ever highlights today.
    if config.time_unit != 'days':
        return False
    if today is None:
        today = datetime.now().date()
    elif isinstance(today, datetime):
        today = today.date()
    return unit_start(index, config).date() == today


# --- Coordinate mapping ---

def date_to_x(when, config, zoom=1.0, pan=0.0):
    diff_ms = (when - config.start_date) / timedelta(milliseconds=1)
    units = diff_ms / unit_duration_ms(config.time_unit)
    return units * config.unit_width * zoom + pan


def x_to_date(x, config, zoom=1.0, pan=0.0):
    units = (x - pan) / (config.unit_width * zoom)
    return _add_ms(config.start_date, units * unit_duration_ms(config.time_unit))


def clamp_zoom(zoom):
    return max(MIN_ZOOM, min(MAX_ZOOM, zoom))


def row_of(task):
    row = task.get('row') or 0
    try:
        return max(0, int(row))
    except (TypeError, ValueError):
        return 0


def row_top(row):
    return HEADER_HEIGHT + PADDING + row * (TASK_HEIGHT + TASK_SPACING)


def row_at(y):
    return max(0, math.floor((y - HEADER_HEIGHT - PADDING) / (TASK_HEIGHT + TASK_SPACING)))


def resolve_task_rect(task, config, zoom=1.0, pan=0.0):
    """
    Screen rectangle ``(x, y, width, height)`` of a task bar.

    Both the scene builder and pointer hit-testing go through this, so what is
    drawn and what is clickable can never disagree. Short tasks are widened to
    MIN_TASK_WIDTH so they stay legible.
    """
    start_x = date_to_x(task['start'], config, zoom, pan)
    end_x = date_to_x(task['end'], config, zoom, pan)
    width = end_x - start_x
    if not math.isfinite(width) or width < MIN_TASK_WIDTH:
        width = MIN_TASK_WIDTH
    return start_x, row_top(row_of(task)), width, TASK_HEIGHT


def rect_contains(rect, x, y):
    left, top, width, height = rect
    return left <= x <= left + width and top <= y <= top + height
