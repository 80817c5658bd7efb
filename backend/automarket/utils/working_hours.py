# backend/automarket/utils/working_hours.py
"""
Working hours helpers.

Two shapes are in use:
- workshops: {"sunday": {"open": "08:00", "close": "18:00"}, "friday": {"closed": true}, ...}
- services:  [{"day_of_week": 0, "start": "09:00", "end": "13:00"}, ...]  (0 = Sunday)
"""

import re
from datetime import datetime

DAY_NAMES = ["sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday"]
TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")  # 00:00 - 23:59


def time_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def is_valid_time(value) -> bool:
    return isinstance(value, str) and bool(TIME_RE.match(value))


def validate_working_hours(working_hours) -> tuple[bool, list[str]]:
    """Validate a workshop working-hours object. Returns (is_valid, errors)."""
    if not isinstance(working_hours, dict):
        return False, ["Working hours must be a valid object"]

    errors: list[str] = []
    for day, hours in working_hours.items():
        if str(day).lower() not in DAY_NAMES:
            errors.append(f"Invalid day: {day}. Must be one of: {', '.join(DAY_NAMES)}")
            continue

        if not isinstance(hours, dict):
            errors.append(f"{day}: Hours must be an object with 'open' and 'close' times")
            continue

        if hours.get("closed") is True:
            continue

        open_time = hours.get("open")
        close_time = hours.get("close")

        if not open_time:
            errors.append(f"{day}: Missing 'open' time")
        elif not is_valid_time(open_time):
            errors.append(f"{day}: Invalid 'open' time format. Use HH:mm (e.g., 08:00)")

        if not close_time:
            errors.append(f"{day}: Missing 'close' time")
        elif not is_valid_time(close_time):
            errors.append(f"{day}: Invalid 'close' time format. Use HH:mm (e.g., 18:00)")

        if is_valid_time(open_time) and is_valid_time(close_time):
            if time_to_minutes(open_time) >= time_to_minutes(close_time):
                errors.append(
                    f"{day}: Opening time ({open_time}) must be before closing time ({close_time})"
                )

    return not errors, errors


def is_workshop_open(working_hours, at: datetime | None = None) -> bool:
    if not working_hours:
        return False

    at = at or datetime.now()
    day_name = DAY_NAMES[(at.weekday() + 1) % 7]
    day_hours = working_hours.get(day_name)

    if not day_hours or day_hours.get("closed") is True:
        return False
    if not is_valid_time(day_hours.get("open")) or not is_valid_time(day_hours.get("close")):
        return False

    current = at.hour * 60 + at.minute
    return time_to_minutes(day_hours["open"]) <= current < time_to_minutes(day_hours["close"])


def default_working_hours() -> dict:
    """9 AM - 6 PM, Sunday-Thursday."""
    hours = {day: {"open": "09:00", "close": "18:00"} for day in DAY_NAMES[:5]}
    hours["friday"] = {"closed": True}
    hours["saturday"] = {"closed": True}
    return hours
