"""Calendar/date helpers.

All storage uses ISO `YYYY-MM-DD` calendar dates. A user's "today" depends on
their timezone, so every helper that needs the current date takes an optional
IANA timezone name.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import ValidationError

# Python weekday numbers (Monday = 0)
WEEKDAYS = {
    "Monday": 0,
    "Tuesday": 1,
    "Wednesday": 2,
    "Thursday": 3,
    "Friday": 4,
    "Saturday": 5,
    "Sunday": 6,
}


@dataclass(frozen=True)
class ScheduledSlot:
    """One calendar slot of a program: (week, weekday, date, session number)."""

    week: int
    day_of_week: str
    date: date
    session_number: int


def _zone(tz: str | None):
    if tz is None:
        return timezone.utc
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {tz}") from e


def today(tz: str | None = None) -> date:
    """Get the current calendar date in the given timezone (UTC by default)."""
    return datetime.now(_zone(tz)).date()


def utc_today() -> date:
    """Get the current UTC calendar date."""
    return datetime.now(timezone.utc).date()


def parse_date(value: date | datetime | str) -> date:
    """Coerce a date, datetime or `YYYY-MM-DD` string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as e:
            raise ValidationError(f"Invalid date: {value!r}") from e
    raise ValidationError(f"Invalid date: {value!r}")


def previous_day(d: date) -> date:
    return d - timedelta(days=1)


def week_bounds(d: date) -> tuple[date, date]:
    """Sunday-to-Saturday week containing `d`."""
    # weekday(): Monday=0 .. Sunday=6 -> days since Sunday
    start = d - timedelta(days=(d.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def month_bounds(d: date) -> tuple[date, date]:
    """First and last day of the month containing `d`."""
    start = d.replace(day=1)
    if start.month == 12:
        next_month = start.replace(year=start.year + 1, month=1)
    else:
        next_month = start.replace(month=start.month + 1)
    return start, next_month - timedelta(days=1)


def current_program_week(start_date: date, on: date, total_weeks: int) -> int:
    """Week of a program that `on` falls into, clamped to [1, total_weeks]."""
    week = (on - start_date).days // 7 + 1
    return max(1, min(week, total_weeks))


def calculate_workout_dates(
    start: date, weekdays: list[str], total_weeks: int
) -> list[ScheduledSlot]:
    """Compute every (week, weekday) session date of a program.

    Week `w` is anchored at `start + 7 * (w - 1)`; each weekday maps to the
    first date on or after the anchor that falls on it. Session numbers follow
    the order of `weekdays`.

    Args:
        start: Program start date
        weekdays: Weekday names, e.g. ["Monday", "Wednesday"]
        total_weeks: Number of weeks in the program

    Returns:
        Slots ordered by week, then by position in `weekdays`
    """
    for name in weekdays:
        if name not in WEEKDAYS:
            raise ValidationError(f"Invalid weekday: {name}")

    slots = []
    for week in range(1, total_weeks + 1):
        anchor = start + timedelta(days=7 * (week - 1))
        for session_number, name in enumerate(weekdays, start=1):
            offset = (WEEKDAYS[name] - anchor.weekday()) % 7
            slots.append(
                ScheduledSlot(
                    week=week,
                    day_of_week=name,
                    date=anchor + timedelta(days=offset),
                    session_number=session_number,
                )
            )
    return slots
