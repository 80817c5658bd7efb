# backend/automarket/services/slots/__init__.py
"""
Slots calculation module.

calculator: pure slot generation from weekly working-hour ranges
availability: database reads (service, occupied start times) around it
"""

from .availability import (
    available_slots_for_service,
    get_service_available_slots,
    occupied_start_times,
    parse_target_date,
)
from .calculator import compute_available_slots
from .config import minutes_to_time_str, time_str_to_minutes, weekday_index

__all__ = [
    "available_slots_for_service",
    "compute_available_slots",
    "get_service_available_slots",
    "minutes_to_time_str",
    "occupied_start_times",
    "parse_target_date",
    "time_str_to_minutes",
    "weekday_index",
]
