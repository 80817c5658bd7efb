# backend/automarket/routers/broadcasts.py
# Customer broadcasts a job → technicians bid → customer accepts one offer

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ..auth import require_roles, require_user
from ..config import Settings, get_app_settings
from ..database import get_db
from ..models import JobBroadcasts as DBJobBroadcasts
from ..responses import Envelope, ok, paginate
from ..schemas.broadcasts import (
    BroadcastCreate,
    BroadcastCreated,
    BroadcastDetail,
    BroadcastRead,
    OfferAccepted,
    OfferCreate,
    OfferRead,
    OfferWithEta,
)
from ..services import dispatch
from ..services.access import Actor
from ..services.events import EventEmitter, get_events

router = APIRouter(prefix="/broadcasts", tags=["broadcasts"])


@router.post("/", response_model=Envelope[BroadcastCreated], status_code=status.HTTP_201_CREATED)
def create_broadcast(
    data: BroadcastCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("customer")),
    settings: Settings = Depends(get_app_settings),
    events: EventEmitter = Depends(get_events),
):
    result = dispatch.create_broadcast(db, actor, data, settings, events)
    return ok(result, "Job broadcast to nearby technicians")


@router.get("/", response_model=Envelope[list[BroadcastRead]])
def list_broadcasts(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    _: Actor = Depends(require_roles("admin")),
):
    query = db.query(DBJobBroadcasts)
    if status_filter:
        query = query.filter(DBJobBroadcasts.status == status_filter.upper())

    query = query.order_by(DBJobBroadcasts.created_at.desc(), DBJobBroadcasts.id.desc())
    items, pagination = paginate(query, page, limit)
    return ok(items, pagination=pagination)


@router.get("/{id}", response_model=Envelope[BroadcastDetail])
def get_broadcast(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_user),
):
    return ok(dispatch.get_broadcast_for(db, id, actor))


@router.post("/{id}/cancel", response_model=Envelope[BroadcastRead])
def cancel_broadcast(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("customer")),
    events: EventEmitter = Depends(get_events),
):
    broadcast = dispatch.cancel_broadcast(db, actor, id, events)
    return ok(broadcast, "Broadcast cancelled")


# ---------------------------------------------------------------------
# Domain: Broadcast → offers
# ---------------------------------------------------------------------

@router.post(
    "/{id}/offers",
    response_model=Envelope[OfferRead],
    status_code=status.HTTP_201_CREATED,
)
def submit_offer(
    id: int,
    data: OfferCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("technician")),
    events: EventEmitter = Depends(get_events),
):
    offer = dispatch.submit_offer(db, actor, id, data.bid_amount, events, data.message)
    return ok(offer, "Offer submitted")


@router.get("/{id}/offers", response_model=Envelope[list[OfferWithEta]])
def list_offers(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("customer", "admin")),
    settings: Settings = Depends(get_app_settings),
):
    return ok(dispatch.list_offers_with_eta(db, actor, id, settings.average_speed_kmh))


@router.post("/{id}/offers/{offer_id}/accept", response_model=Envelope[OfferAccepted])
def accept_offer(
    id: int,
    offer_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("customer")),
    events: EventEmitter = Depends(get_events),
):
    result = dispatch.accept_offer(db, actor, id, offer_id, events)
    return ok(result, "Offer accepted, technician assigned")
