"""Reminder time generation and weekday lookahead."""
from datetime import date, datetime, time, timedelta
from typing import Callable, Collection, List, Optional

# Any fixed day works; times are only compared within it
_ANCHOR = date(2000, 1, 3)


def compute_daily_reminder_times(
    wake_up: time,
    bed_time: time,
    interval_minutes: int,
) -> List[time]:
    """
    Walk from wake-up to bed time in fixed steps.

    Args:
        wake_up: first reminder of the day.
        bed_time: exclusive upper bound.
        interval_minutes: step between reminders.

    Returns:
        Strictly increasing times, first == wake_up, all < bed_time.
        Empty if interval_minutes <= 0 or wake_up >= bed_time.
    """
    if interval_minutes <= 0 or wake_up >= bed_time:
        return []

    step = timedelta(minutes=interval_minutes)
    current = datetime.combine(_ANCHOR, wake_up)
    end = datetime.combine(_ANCHOR, bed_time)

    times = []
    while current < end:
        times.append(current.time())
        current += step
    return times


def find_next_day(
    start: date,
    is_active: Callable[[int], bool],
    lookahead_days: int = 7,
) -> Optional[date]:
    """
    First date from start (inclusive) whose weekday passes is_active.

    Returns:
        None if no day within lookahead_days qualifies.
    """
    for offset in range(lookahead_days):
        candidate = start + timedelta(days=offset)
        if is_active(candidate.weekday()):
            return candidate
    return None


def find_next_enabled_day(
    start: date,
    enabled_days: Collection[int],
    lookahead_days: int = 7,
) -> Optional[date]:
    return find_next_day(start, lambda weekday: weekday in enabled_days, lookahead_days)
