# backend/automarket/routers/bookings.py
# PATCH /{id} = 405 (use /{id}/status), DELETE = 405 (cancel instead)

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..auth import require_roles, require_user
from ..database import get_db
from ..models import Bookings as DBBookings
from ..responses import Envelope, ok, paginate
from ..schemas.bookings import BookingCreate, BookingRead, BookingStatusUpdate
from ..services import bookings as booking_service
from ..services.access import Actor, booking_scope
from ..services.events import EventEmitter, get_events

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=Envelope[list[BookingRead]])
def list_bookings(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    query = db.query(DBBookings).filter(booking_scope(actor))
    if status_filter:
        query = query.filter(DBBookings.status == status_filter.upper())

    query = query.order_by(DBBookings.created_at.desc(), DBBookings.id.desc())
    items, pagination = paginate(query, page, limit)
    return ok(items, pagination=pagination)


@router.get("/{id}", response_model=Envelope[BookingRead])
def get_booking(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    return ok(booking_service.get_booking_for(db, id, actor))


@router.post("/", response_model=Envelope[BookingRead], status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("customer")),
    events: EventEmitter = Depends(get_events),
):
    booking = booking_service.create_booking(db, actor, data, events)
    return ok(booking, "Booking created successfully")


@router.patch("/{id}/status", response_model=Envelope[BookingRead])
def update_booking_status(
    id: int,
    data: BookingStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
    events: EventEmitter = Depends(get_events),
):
    booking = booking_service.update_booking_status(
        db, actor, id, data.status, events, reason=data.reason
    )
    return ok(booking, "Booking status updated")


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
