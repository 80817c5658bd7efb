# backend/automarket/routers/vehicles.py
# All endpoints act on the caller's own vehicles; foreign ids = 404

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..auth import require_user
from ..database import get_db
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Bookings, NON_OCCUPYING_STATUSES
from ..models import Vehicles as DBVehicles
from ..responses import Envelope, ok
from ..schemas.vehicles import VehicleCreate, VehicleRead, VehicleUpdate
from ..services.access import Actor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["vehicles"])

# Bookings in these statuses still need the vehicle
_RELEASED_STATUSES = NON_OCCUPYING_STATUSES + ("COMPLETED", "NO_TECHNICIANS_AVAILABLE")


def _get_own_vehicle(db: Session, vehicle_id: int, actor: Actor) -> DBVehicles:
    obj = db.get(DBVehicles, vehicle_id)
    if not obj or obj.user_id != actor.id:
        raise NotFoundError("Vehicle not found", code="VEHICLE_NOT_FOUND")
    return obj


def _ensure_unique_plate(db: Session, plate: str, exclude_id: int | None = None):
    query = db.query(DBVehicles).filter(DBVehicles.plate_number == plate)
    if exclude_id is not None:
        query = query.filter(DBVehicles.id != exclude_id)
    if query.first():
        raise ConflictError("Vehicle with this plate number already exists")


def _clear_default(db: Session, user_id: int, keep_id: int | None = None):
    query = db.query(DBVehicles).filter(
        DBVehicles.user_id == user_id,
        DBVehicles.is_default == 1,
    )
    if keep_id is not None:
        query = query.filter(DBVehicles.id != keep_id)
    query.update({DBVehicles.is_default: 0}, synchronize_session=False)


@router.get("/", response_model=Envelope[list[VehicleRead]])
def list_vehicles(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    items = (
        db.query(DBVehicles)
        .filter(DBVehicles.user_id == actor.id)
        .order_by(DBVehicles.is_default.desc(), DBVehicles.id)
        .all()
    )
    return ok(items)


@router.get("/{id}", response_model=Envelope[VehicleRead])
def get_vehicle(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    return ok(_get_own_vehicle(db, id, actor))


@router.post("/", response_model=Envelope[VehicleRead], status_code=status.HTTP_201_CREATED)
def create_vehicle(
    data: VehicleCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    _ensure_unique_plate(db, data.plate_number)

    has_vehicles = (
        db.query(DBVehicles.id).filter(DBVehicles.user_id == actor.id).first() is not None
    )
    is_default = data.is_default or not has_vehicles
    if is_default:
        _clear_default(db, actor.id)

    obj = DBVehicles(
        **data.model_dump(exclude={"is_default"}),
        user_id=actor.id,
        is_default=1 if is_default else 0,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Vehicle added: {obj.plate_number} (user={actor.id})")
    return ok(obj, "Vehicle added")


@router.patch("/{id}", response_model=Envelope[VehicleRead])
def update_vehicle(
    id: int,
    data: VehicleUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    obj = _get_own_vehicle(db, id, actor)
    fields = data.model_dump(exclude_unset=True)

    plate = fields.get("plate_number")
    if plate and plate != obj.plate_number:
        _ensure_unique_plate(db, plate, exclude_id=obj.id)

    if fields.get("is_default"):
        _clear_default(db, actor.id, keep_id=obj.id)

    for field, value in fields.items():
        if value is None and field in ("plate_number", "is_default"):
            continue
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return ok(obj, "Vehicle updated")


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_vehicle(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    obj = _get_own_vehicle(db, id, actor)

    in_use = (
        db.query(Bookings.id)
        .filter(
            Bookings.vehicle_id == obj.id,
            Bookings.status.notin_(_RELEASED_STATUSES),
        )
        .first()
    )
    if in_use:
        raise ValidationError(
            "Cannot delete vehicle with active bookings",
            code="VEHICLE_IN_USE",
        )

    db.delete(obj)
    db.commit()
    logger.info(f"Vehicle deleted: {id} (user={actor.id})")
