# backend/automarket/services/bookings.py
"""
Scheduled service bookings.

Creation re-checks slot availability at request time; the partial unique
index on (service_id, scheduled_date, start_time) catches the concurrent
request that passes the check at the same moment. Booking numbers are
drawn from a daily count; a number lost to a concurrent insert is redrawn.

Status changes are plain record updates: any known status may be set by an
admin or the service owner; customers may only cancel their own booking.
"""

import logging
from collections.abc import Callable
from datetime import date

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import AppError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models import BOOKING_STATUSES, Bookings, Services, Vehicles, Workshops
from ..schemas.bookings import BookingCreate
from .access import Actor, can_see_booking, ensure_visible
from .events import EventEmitter
from .slots import available_slots_for_service

logger = logging.getLogger(__name__)

TECHNICIAN_STATUSES = ("IN_PROGRESS", "COMPLETED")
FINAL_STATUSES = ("COMPLETED", "CANCELLED")
BOOKING_NUMBER_ATTEMPTS = 5


def slot_not_available() -> AppError:
    return ConflictError("Booking slot not available", code="BOOKING_NOT_AVAILABLE")


def generate_booking_number(db: Session, prefix: str, on_date: date) -> str:
    """{prefix}-YYYYMMDD-NNN, numbered per prefix and day."""
    stem = f"{prefix}-{on_date.strftime('%Y%m%d')}"
    count = db.query(Bookings).filter(Bookings.booking_number.like(f"{stem}-%")).count()
    return f"{stem}-{count + 1:03d}"


def booking_number_taken(db: Session, booking_number: str) -> bool:
    return db.query(Bookings.id).filter(Bookings.booking_number == booking_number).first() is not None


def flush_numbered_booking(
    db: Session,
    build: Callable[[str], Bookings],
    on_date: date,
    prefix: str = "BK",
) -> Bookings:
    """
    Insert the booking built by `build(number)` under a fresh booking number.

    Two requests can read the same daily count; the loser of the unique
    booking_number race rolls back and draws the next number. Any other
    IntegrityError is re-raised after the rollback.
    """
    for _ in range(BOOKING_NUMBER_ATTEMPTS):
        booking_number = generate_booking_number(db, prefix, on_date)
        booking = build(booking_number)
        db.add(booking)
        try:
            db.flush()
            return booking
        except IntegrityError:
            db.rollback()
            if not booking_number_taken(db, booking_number):
                raise
            logger.warning(f"Booking number {booking_number} taken concurrently, retrying")

    raise ConflictError("Could not allocate a booking number", code="BOOKING_NUMBER_CONFLICT")


def get_booking_for(db: Session, booking_id: int, actor: Actor) -> Bookings:
    booking = db.get(Bookings, booking_id)
    if not booking or not can_see_booking(booking, actor):
        raise NotFoundError("Booking not found", code="BOOKING_NOT_FOUND")
    return booking


def create_booking(
    db: Session,
    actor: Actor,
    data: BookingCreate,
    events: EventEmitter,
) -> Bookings:
    service = ensure_visible(db.get(Services, data.service_id), actor, "Service")
    if not service.is_active:
        raise NotFoundError("Service not found")

    if data.scheduled_date < date.today():
        raise ValidationError("Date cannot be in the past")

    if data.vehicle_id is not None:
        vehicle = db.get(Vehicles, data.vehicle_id)
        if not vehicle or vehicle.user_id != actor.id:
            raise NotFoundError("Vehicle not found", code="VEHICLE_NOT_FOUND")

    workshop = None
    if data.workshop_id is not None:
        workshop = ensure_visible(db.get(Workshops, data.workshop_id), actor, "Workshop")

    available = available_slots_for_service(db, service, data.scheduled_date)
    if data.start_time not in available:
        raise slot_not_available()

    service_id, price = service.id, service.price

    def build(booking_number: str) -> Bookings:
        return Bookings(
            booking_number=booking_number,
            customer_id=actor.id,
            service_id=service_id,
            vehicle_id=data.vehicle_id,
            workshop_id=data.workshop_id,
            scheduled_date=data.scheduled_date,
            start_time=data.start_time,
            status="PENDING",
            notes=data.notes,
            agreed_price=price,
        )

    try:
        booking = flush_numbered_booking(db, build, date.today())
        if workshop is not None:
            workshop.total_bookings = (workshop.total_bookings or 0) + 1
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(
            f"Double booking rejected: service={service_id} "
            f"{data.scheduled_date} {data.start_time}"
        )
        raise slot_not_available() from None

    db.refresh(booking)
    logger.info(f"Booking created: {booking.booking_number} (id={booking.id})")

    payload = {
        "booking_id": booking.id,
        "booking_number": booking.booking_number,
        "service_id": service.id,
        "date": booking.scheduled_date.isoformat(),
        "time": booking.start_time,
    }
    events.emit("booking.created", payload, [actor.id])
    if service.owner_id:
        events.emit("booking.created", payload, [service.owner_id])
    else:
        events.broadcast("admin.booking_created", payload)

    return booking


def update_booking_status(
    db: Session,
    actor: Actor,
    booking_id: int,
    new_status: str,
    events: EventEmitter,
    reason: str | None = None,
) -> Bookings:
    booking = get_booking_for(db, booking_id, actor)

    new_status = new_status.upper()
    if new_status not in BOOKING_STATUSES:
        raise ValidationError(
            f"Unknown status: {new_status}",
            details={"allowed": list(BOOKING_STATUSES)},
        )

    is_owner = booking.service is not None and booking.service.owner_id == actor.id
    if actor.is_admin or (actor.role == "vendor" and is_owner):
        pass
    elif actor.role == "technician" and booking.technician_id == actor.id:
        if new_status not in TECHNICIAN_STATUSES:
            raise ForbiddenError("Technicians can only start or complete their jobs")
    elif booking.customer_id == actor.id:
        if new_status != "CANCELLED":
            raise ForbiddenError("Customers can only cancel their bookings")
        if booking.status in FINAL_STATUSES:
            raise AppError(
                f"Booking is already {booking.status}",
                status_code=400,
                code="INVALID_STATUS_TRANSITION",
            )
    else:
        raise ForbiddenError("Access denied. Insufficient permissions.")

    old_status = booking.status
    booking.status = new_status
    if reason:
        booking.notes = f"{booking.notes}\n{reason}" if booking.notes else reason
    db.commit()
    db.refresh(booking)

    logger.info(f"Booking {booking.id} status: {old_status} → {new_status}")
    events.emit(
        "booking.status_changed",
        {"booking_id": booking.id, "old_status": old_status, "status": new_status},
        [booking.customer_id],
    )
    return booking
