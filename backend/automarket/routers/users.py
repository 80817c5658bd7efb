# backend/automarket/routers/users.py
# DELETE = soft-delete (is_active), admin only

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_actor, require_roles, require_user
from ..database import get_db
from ..errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ..models import Users as DBUsers
from ..responses import Envelope, ok, paginate
from ..schemas.users import (
    AvailabilityUpdate,
    LocationUpdate,
    UserCreate,
    UserRead,
    UserUpdate,
)
from ..services.access import Actor
from ..utils.maps import is_valid_coordinates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def _get_user(db: Session, user_id: int) -> DBUsers:
    user = db.get(DBUsers, user_id)
    if not user:
        raise NotFoundError("User not found", code="USER_NOT_FOUND")
    return user


@router.post("/", response_model=Envelope[UserRead], status_code=status.HTTP_201_CREATED)
def register_user(
    data: UserCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    if data.role == "admin" and not actor.is_admin:
        raise ForbiddenError("Only admins can create admin users")

    email = data.email.strip().lower()
    if db.query(DBUsers).filter(DBUsers.email == email).first():
        raise ConflictError("Value for email already exists")

    obj = DBUsers(**data.model_dump(exclude={"email"}), email=email)
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"User registered: id={obj.id} role={obj.role}")
    return ok(obj, "User registered")


@router.get("/", response_model=Envelope[list[UserRead]])
def list_users(
    role: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles("admin")),
):
    query = db.query(DBUsers)
    if role:
        query = query.filter(DBUsers.role == role)
    items, pagination = paginate(query.order_by(DBUsers.id), page, limit)
    return ok(items, pagination=pagination)


@router.get("/me", response_model=Envelope[UserRead])
def get_me(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    return ok(_get_user(db, actor.id))


@router.patch("/me", response_model=Envelope[UserRead])
def update_me(
    data: UserUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    obj = _get_user(db, actor.id)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field == "first_name":
            continue
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return ok(obj, "Profile updated")


@router.patch("/me/location", response_model=Envelope[UserRead])
def update_my_location(
    data: LocationUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("technician")),
):
    if not is_valid_coordinates(data.latitude, data.longitude):
        raise ValidationError("Invalid coordinates")

    obj = _get_user(db, actor.id)
    obj.latitude = data.latitude
    obj.longitude = data.longitude
    db.commit()
    db.refresh(obj)
    return ok(obj, "Location updated")


@router.patch("/me/availability", response_model=Envelope[UserRead])
def update_my_availability(
    data: AvailabilityUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("technician")),
):
    obj = _get_user(db, actor.id)
    obj.is_available = 1 if data.is_available else 0
    db.commit()
    db.refresh(obj)

    logger.info(f"Technician {obj.id} availability → {bool(obj.is_available)}")
    return ok(obj, "Availability updated")


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_user(
    id: int,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles("admin")),
):
    obj = _get_user(db, id)
    obj.is_active = 0
    db.commit()
    logger.info(f"User deactivated: {id}")
