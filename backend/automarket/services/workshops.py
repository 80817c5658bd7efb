# backend/automarket/services/workshops.py
"""
Certified workshops: coordinates resolution, working-hours validation,
deletion guard and verification.
"""

import logging
from datetime import datetime
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from ..errors import AppError, NotFoundError, ValidationError
from ..models import Bookings, Workshops
from ..schemas.workshops import WorkshopCreate, WorkshopUpdate
from ..utils.maps import is_valid_coordinates, parse_google_maps_url
from ..utils.working_hours import default_working_hours, validate_working_hours

logger = logging.getLogger(__name__)

ACTIVE_BOOKING_STATUSES = ("PENDING", "CONFIRMED", "IN_PROGRESS")


def get_workshop(db: Session, workshop_id: int) -> Workshops:
    obj = db.get(Workshops, workshop_id)
    if not obj:
        raise NotFoundError("Workshop not found", code="WORKSHOP_NOT_FOUND")
    return obj


def resolve_coordinates(
    latitude: Optional[float],
    longitude: Optional[float],
    location_url: Optional[str],
    client: Optional[httpx.Client] = None,
    timeout: float = 5.0,
) -> Optional[tuple[float, float]]:
    """Explicit coordinates win; otherwise try the Google Maps link."""
    if latitude is not None and longitude is not None:
        coords = (latitude, longitude)
    elif location_url:
        coords = parse_google_maps_url(location_url, client, timeout)
        if coords is None:
            raise ValidationError(
                "Could not extract coordinates from the Google Maps URL",
                code="INVALID_LOCATION_URL",
            )
    else:
        return None

    if not is_valid_coordinates(*coords):
        raise ValidationError("Invalid coordinates")
    return coords


def _check_working_hours(working_hours: dict) -> None:
    is_valid, errors = validate_working_hours(working_hours)
    if not is_valid:
        raise ValidationError("Invalid working hours", details=errors)


def create_workshop(
    db: Session,
    data: WorkshopCreate,
    client: Optional[httpx.Client] = None,
    timeout: float = 5.0,
) -> Workshops:
    coords = resolve_coordinates(
        data.latitude, data.longitude, data.location_url, client, timeout
    )
    if coords is None:
        raise ValidationError(
            "Location coordinates are required (latitude/longitude or location_url)",
            code="MISSING_COORDINATES",
        )

    working_hours = data.working_hours or default_working_hours()
    _check_working_hours(working_hours)

    obj = Workshops(
        **data.model_dump(exclude={"latitude", "longitude", "location_url", "working_hours"}),
        latitude=coords[0],
        longitude=coords[1],
        working_hours=working_hours,
        verified_at=datetime.now() if data.is_verified else None,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Workshop created: {obj.name} (id={obj.id})")
    return obj


def update_workshop(
    db: Session,
    workshop_id: int,
    data: WorkshopUpdate,
    client: Optional[httpx.Client] = None,
    timeout: float = 5.0,
) -> Workshops:
    obj = get_workshop(db, workshop_id)
    fields = data.model_dump(exclude_unset=True)

    latitude = fields.pop("latitude", None)
    longitude = fields.pop("longitude", None)
    location_url = fields.pop("location_url", None)
    if location_url or latitude is not None or longitude is not None:
        coords = resolve_coordinates(
            latitude if latitude is not None else obj.latitude,
            longitude if longitude is not None else obj.longitude,
            None if latitude is not None or longitude is not None else location_url,
            client,
            timeout,
        )
        obj.latitude, obj.longitude = coords

    if fields.get("working_hours") is not None:
        _check_working_hours(fields["working_hours"])

    for field, value in fields.items():
        if value is None:
            continue
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)

    logger.info(f"Workshop updated: {workshop_id}")
    return obj


def delete_workshop(db: Session, workshop_id: int) -> None:
    obj = get_workshop(db, workshop_id)

    active = (
        db.query(Bookings)
        .filter(
            Bookings.workshop_id == obj.id,
            Bookings.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        .count()
    )
    if active:
        raise AppError(
            f"Cannot delete workshop with {active} active booking(s)",
            status_code=400,
            code="ACTIVE_BOOKINGS",
        )

    db.delete(obj)
    db.commit()
    logger.info(f"Workshop deleted: {workshop_id}")


def set_verification(db: Session, workshop_id: int, is_verified: bool) -> Workshops:
    obj = get_workshop(db, workshop_id)
    obj.is_verified = 1 if is_verified else 0
    obj.verified_at = datetime.now() if is_verified else None
    db.commit()
    db.refresh(obj)

    logger.info(f"Workshop {workshop_id} verification → {is_verified}")
    return obj
