# backend/automarket/services/slots/calculator.py
"""
Service slot availability calculation.

Pure function of the service schedule and the occupied start times:
no database, no cache, no clock.

Schedule format (Services.working_hours):
    [{"day_of_week": 0..6, "start": "HH:MM", "end": "HH:MM"}, ...]
    0 = Sunday. Several ranges per day are allowed (split shifts).
"""

from collections.abc import Iterable
from datetime import date

from .config import (
    DEFAULT_SLOT_DURATION_MINUTES,
    minutes_to_time_str,
    time_str_to_minutes,
    weekday_index,
)


def compute_available_slots(
    schedule: Iterable[dict] | None,
    slot_duration_minutes: int | None,
    occupied_starts: Iterable[str],
    target_date: date,
) -> list[str]:
    """
    Bookable "HH:MM" start times for target_date, sorted.

    A start t is emitted for a range when t + slot_duration_minutes <= end.
    Overlapping ranges yield each clock time once; a trailing partial
    interval is dropped.
    """
    duration = DEFAULT_SLOT_DURATION_MINUTES if slot_duration_minutes is None else slot_duration_minutes
    if duration <= 0:
        return []

    ranges = _day_ranges(schedule, weekday_index(target_date))
    if not ranges:
        return []

    candidates: set[str] = set()
    for start_str, end_str in ranges:
        start_min = time_str_to_minutes(start_str)
        end_min = time_str_to_minutes(end_str)

        t = start_min
        while t + duration <= end_min:
            candidates.add(minutes_to_time_str(t))
            t += duration

    candidates -= set(occupied_starts)
    return sorted(candidates)


def _day_ranges(schedule: Iterable[dict] | None, weekday: int) -> list[tuple]:
    """Ranges of the schedule that apply to the given weekday (0 = Sunday)."""
    ranges = []
    for item in schedule or []:
        if not isinstance(item, dict):
            continue
        if item.get("day_of_week") != weekday:
            continue
        ranges.append((item.get("start"), item.get("end")))
    return ranges
