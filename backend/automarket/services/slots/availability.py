# backend/automarket/services/slots/availability.py
"""
Service availability for a calendar date.

Reads the service schedule and the bookings already holding a slot,
then delegates to compute_available_slots. State is re-read on every call.
"""

from datetime import date, datetime

from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models import NON_OCCUPYING_STATUSES, Bookings, Services
from .calculator import compute_available_slots


def parse_target_date(raw_date: str | None) -> date:
    """Parse a YYYY-MM-DD query value."""
    if not raw_date:
        raise ValidationError("date is required (YYYY-MM-DD)")
    try:
        return datetime.strptime(raw_date, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date: {raw_date!r}, expected YYYY-MM-DD") from None


def occupied_start_times(db: Session, service_id: int, target_date: date) -> set[str]:
    """Start times held by non-cancelled bookings of the service on the date."""
    rows = (
        db.query(Bookings.start_time)
        .filter(
            Bookings.service_id == service_id,
            Bookings.scheduled_date == target_date,
            Bookings.start_time.isnot(None),
            Bookings.status.notin_(NON_OCCUPYING_STATUSES),
        )
        .all()
    )
    return {start_time for (start_time,) in rows}


def available_slots_for_service(db: Session, service: Services, target_date: date) -> list[str]:
    return compute_available_slots(
        service.working_hours,
        service.slot_duration_minutes,
        occupied_start_times(db, service.id, target_date),
        target_date,
    )


def get_service_available_slots(db: Session, service_id: int, raw_date: str | None) -> list[str]:
    """
    Ordered "HH:MM" slots still bookable for a service on a date.

    Raises:
        ValidationError: date missing or not YYYY-MM-DD
        NotFoundError: unknown or inactive service
    """
    target_date = parse_target_date(raw_date)

    service = (
        db.query(Services)
        .filter(Services.id == service_id, Services.is_active == 1)
        .first()
    )
    if not service:
        raise NotFoundError("Service not found")

    return available_slots_for_service(db, service, target_date)
