# backend/automarket/services/slots/config.py
"""
Clock helpers shared by slot calculation.

All times are naive "HH:MM" clock values of the service's own schedule.
"""

from datetime import date

DEFAULT_SLOT_DURATION_MINUTES = 60
MINUTES_PER_DAY = 24 * 60


def time_str_to_minutes(value) -> int:
    """
    Convert "HH:MM" to minutes since midnight.

    Anything that does not parse counts as 00:00.
    """
    try:
        hours, minutes = str(value).split(":")
        return int(hours) * 60 + int(minutes)
    except (TypeError, ValueError):
        return 0


def minutes_to_time_str(total_minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def weekday_index(target_date: date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday."""
    return (target_date.weekday() + 1) % 7
