# backend/automarket/routers/services.py
# PATCH = owner or admin, DELETE = soft-delete (is_active)
# Domain relation: services -> available slots

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import get_actor, require_roles
from ..database import get_db
from ..models import Services as DBServices
from ..responses import Envelope, ok
from ..schemas.services import ServiceCreate, ServiceRead, ServiceUpdate
from ..services.access import Actor, ensure_can_manage, ensure_visible, visibility_filter
from ..services.slots import get_service_available_slots

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["services"])

# NOT NULL columns: an explicit null in PATCH leaves them untouched
_REQUIRED_FIELDS = ("name", "price", "working_hours", "slot_duration_minutes", "is_active")


# ---------------------------------------------------------------------
# Base CRUD
# ---------------------------------------------------------------------

@router.get("/", response_model=Envelope[list[ServiceRead]])
def list_services(
    category: Optional[str] = None,
    search: Optional[str] = None,
    owner_id: Optional[int] = None,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    query = db.query(DBServices).filter(visibility_filter(DBServices, actor))

    if category:
        query = query.filter(DBServices.category == category)
    if owner_id is not None:
        query = query.filter(DBServices.owner_id == owner_id)
    term = search.strip() if search else ""
    if term:
        query = query.filter(DBServices.name.ilike(f"%{term}%"))

    return ok(query.order_by(DBServices.category, DBServices.id).all())


@router.get("/{id}", response_model=Envelope[ServiceRead])
def get_service(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    obj = ensure_visible(db.get(DBServices, id), actor, "Service")
    return ok(obj)


@router.post("/", response_model=Envelope[ServiceRead], status_code=status.HTTP_201_CREATED)
def create_service(
    data: ServiceCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("admin", "vendor")),
):
    owner_id = actor.id if actor.role == "vendor" else None
    obj = DBServices(**data.model_dump(), owner_id=owner_id)
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Service created: {obj.name} (id={obj.id}, owner={owner_id})")
    return ok(obj, "Service created")


@router.patch("/{id}", response_model=Envelope[ServiceRead])
def update_service(
    id: int,
    data: ServiceUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("admin", "vendor")),
):
    obj = ensure_visible(db.get(DBServices, id), actor, "Service")
    ensure_can_manage(obj, actor)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)

    logger.info(f"Service updated: {id}")
    return ok(obj, "Service updated")


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("admin", "vendor")),
):
    obj = ensure_visible(db.get(DBServices, id), actor, "Service")
    ensure_can_manage(obj, actor)

    obj.is_active = 0
    db.commit()
    logger.info(f"Service deactivated: {id}")


# ---------------------------------------------------------------------
# Domain: Service → available slots
# ---------------------------------------------------------------------

@router.get("/{id}/available-slots", response_model=list[str])
def get_available_slots(
    id: int,
    raw_date: Optional[str] = Query(None, alias="date", description="YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    """Ordered "HH:MM" start times still bookable for the service on that date."""
    return get_service_available_slots(db, id, raw_date)
