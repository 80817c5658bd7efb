# backend/automarket/routers/workshops.py
# Writes = admin only, DELETE = hard delete guarded by active bookings
# Domain relation: workshops -> reviews

from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth import get_actor, require_roles
from ..config import Settings, get_app_settings
from ..database import get_db
from ..models import Workshops as DBWorkshops
from ..responses import Envelope, ok, paginate, paginate_list
from ..schemas.workshops import (
    ReviewCreate,
    ReviewRead,
    WorkshopCreate,
    WorkshopRead,
    WorkshopUpdate,
    WorkshopVerification,
)
from ..services import reviews as review_service
from ..services import workshops as workshop_service
from ..services.access import Actor, ensure_visible, visibility_filter
from ..utils.maps import get_http_client
from ..utils.working_hours import is_workshop_open

router = APIRouter(prefix="/workshops", tags=["workshops"])


# ---------------------------------------------------------------------
# Base CRUD
# ---------------------------------------------------------------------

@router.get("/", response_model=Envelope[list[WorkshopRead]])
def list_workshops(
    city: Optional[str] = None,
    search: Optional[str] = None,
    open_now: bool = False,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    query = db.query(DBWorkshops).filter(visibility_filter(DBWorkshops, actor))

    if city:
        query = query.filter(DBWorkshops.city.ilike(city))
    term = search.strip() if search else ""
    if term:
        pattern = f"%{term}%"
        query = query.filter(or_(
            DBWorkshops.name.ilike(pattern),
            DBWorkshops.description.ilike(pattern),
            DBWorkshops.address.ilike(pattern),
        ))

    query = query.order_by(
        DBWorkshops.average_rating.desc(),
        DBWorkshops.total_bookings.desc(),
        DBWorkshops.id,
    )

    if open_now:
        # Opening hours are JSON, filtered in Python before paging
        rows = [w for w in query.all() if is_workshop_open(w.working_hours)]
        items, pagination = paginate_list(rows, page, limit)
        return ok(items, pagination=pagination)

    items, pagination = paginate(query, page, limit)
    return ok(items, pagination=pagination)


@router.get("/{id}", response_model=Envelope[WorkshopRead])
def get_workshop(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return ok(ensure_visible(db.get(DBWorkshops, id), actor, "Workshop"))


@router.post("/", response_model=Envelope[WorkshopRead], status_code=status.HTTP_201_CREATED)
def create_workshop(
    data: WorkshopCreate,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles("admin")),
    client: httpx.Client = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
):
    obj = workshop_service.create_workshop(db, data, client, settings.maps_expand_timeout)
    return ok(obj, "Workshop created")


@router.patch("/{id}", response_model=Envelope[WorkshopRead])
def update_workshop(
    id: int,
    data: WorkshopUpdate,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles("admin")),
    client: httpx.Client = Depends(get_http_client),
    settings: Settings = Depends(get_app_settings),
):
    obj = workshop_service.update_workshop(db, id, data, client, settings.maps_expand_timeout)
    return ok(obj, "Workshop updated")


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_workshop(
    id: int,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles("admin")),
):
    workshop_service.delete_workshop(db, id)


@router.patch("/{id}/verification", response_model=Envelope[WorkshopRead])
def verify_workshop(
    id: int,
    data: WorkshopVerification,
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles("admin")),
):
    obj = workshop_service.set_verification(db, id, data.is_verified)
    return ok(obj, "Workshop verification updated")


# ---------------------------------------------------------------------
# Domain: Workshop → reviews
# ---------------------------------------------------------------------

@router.get("/{id}/reviews", response_model=Envelope[list[ReviewRead]])
def list_workshop_reviews(
    id: int,
    rating: Optional[int] = Query(None, ge=1, le=5),
    is_verified: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    ensure_visible(db.get(DBWorkshops, id), actor, "Workshop")
    query = review_service.list_reviews_query(db, id, rating, is_verified)
    items, pagination = paginate(query, page, limit)
    return ok(items, pagination=pagination)


@router.post(
    "/{id}/reviews",
    response_model=Envelope[ReviewRead],
    status_code=status.HTTP_201_CREATED,
)
def create_workshop_review(
    id: int,
    data: ReviewCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("customer")),
):
    review = review_service.create_review(
        db, actor, id, data.rating, data.comment, data.booking_id
    )
    return ok(review, "Review submitted")
