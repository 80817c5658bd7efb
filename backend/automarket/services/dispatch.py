# backend/automarket/services/dispatch.py
"""
Job dispatch: a customer broadcasts a job at a location, available
technicians nearby bid, the customer accepts one offer.

Lifecycle of a broadcast:
    BROADCASTING → COMPLETED  (offer accepted)
                 → CANCELLED  (customer cancelled)
                 → EXPIRED    (no acceptance before expires_at)

The backing booking moves BROADCASTING → TECHNICIAN_ASSIGNED / CANCELLED /
NO_TECHNICIANS_AVAILABLE alongside it.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ..config import Settings
from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import Bookings, JobBroadcasts, JobOffers, Services, Users, Vehicles
from ..schemas.broadcasts import BroadcastCreate
from ..utils.geo import eta_minutes, haversine_km
from .access import Actor, ensure_visible
from .bookings import flush_numbered_booking
from .events import EventEmitter

logger = logging.getLogger(__name__)


def find_nearby_technicians(
    db: Session,
    latitude: float,
    longitude: float,
    radius_km: float,
) -> list[tuple[Users, float]]:
    """Active, available technicians within radius_km, nearest first."""
    technicians = (
        db.query(Users)
        .filter(
            Users.role == "technician",
            Users.is_active == 1,
            Users.is_available == 1,
            Users.latitude.isnot(None),
            Users.longitude.isnot(None),
        )
        .all()
    )

    nearby = []
    for tech in technicians:
        distance = haversine_km(latitude, longitude, tech.latitude, tech.longitude)
        if distance <= radius_km:
            nearby.append((tech, distance))

    nearby.sort(key=lambda item: item[1])
    return nearby


def get_broadcast_for(db: Session, broadcast_id: int, actor: Actor) -> JobBroadcasts:
    """Broadcast visible to admin and the customer who created it."""
    broadcast = db.get(JobBroadcasts, broadcast_id)
    if not broadcast or not (actor.is_admin or broadcast.customer_id == actor.id):
        raise NotFoundError("Broadcast not found", code="BROADCAST_NOT_FOUND")
    return broadcast


def _ensure_open(broadcast: JobBroadcasts, now: datetime) -> None:
    if broadcast.status != "BROADCASTING":
        raise ValidationError(
            f"Broadcast is {broadcast.status}",
            code="BROADCAST_CLOSED",
        )
    if broadcast.expires_at <= now:
        raise ValidationError("Broadcast has expired", code="BROADCAST_EXPIRED")


def create_broadcast(
    db: Session,
    actor: Actor,
    data: BroadcastCreate,
    settings: Settings,
    events: EventEmitter,
) -> dict:
    service = ensure_visible(db.get(Services, data.service_id), actor, "Service")
    if not service.is_active:
        raise NotFoundError("Service not found")

    if data.vehicle_id is not None:
        vehicle = db.get(Vehicles, data.vehicle_id)
        if not vehicle or vehicle.user_id != actor.id:
            raise NotFoundError("Vehicle not found", code="VEHICLE_NOT_FOUND")

    now = datetime.now()
    service_id = service.id

    def build(booking_number: str) -> Bookings:
        return Bookings(
            booking_number=booking_number,
            customer_id=actor.id,
            service_id=service_id,
            vehicle_id=data.vehicle_id,
            status="BROADCASTING",
            notes=data.description,
        )

    booking = flush_numbered_booking(db, build, now.date())

    broadcast = JobBroadcasts(
        booking_id=booking.id,
        customer_id=actor.id,
        service_id=service_id,
        latitude=data.latitude,
        longitude=data.longitude,
        address=data.address,
        radius_km=settings.broadcast_radius_km,
        description=data.description,
        urgency=data.urgency,
        estimated_budget=data.estimated_budget,
        status="BROADCASTING",
        expires_at=now + timedelta(minutes=settings.broadcast_timeout_minutes),
    )
    db.add(broadcast)
    db.flush()

    nearby = find_nearby_technicians(
        db, data.latitude, data.longitude, settings.broadcast_radius_km
    )

    if not nearby:
        booking.status = "NO_TECHNICIANS_AVAILABLE"
        broadcast.status = "EXPIRED"
        db.commit()
        logger.info(f"Broadcast {broadcast.id}: no technicians within {broadcast.radius_km} km")
        raise NotFoundError(
            "No technicians available in your area",
            code="NO_TECHNICIANS",
        )

    db.commit()
    db.refresh(broadcast)

    logger.info(
        f"Broadcast {broadcast.id} created for booking {booking.booking_number}: "
        f"{len(nearby)} technician(s) nearby"
    )

    events.emit(
        "broadcast.created",
        {
            "broadcast_id": broadcast.id,
            "service_id": service.id,
            "service_name": service.name,
            "latitude": broadcast.latitude,
            "longitude": broadcast.longitude,
            "address": broadcast.address,
            "urgency": broadcast.urgency,
            "estimated_budget": broadcast.estimated_budget,
            "expires_at": broadcast.expires_at.isoformat(),
        },
        [tech.id for tech, _ in nearby],
    )

    return {
        "booking_id": booking.id,
        "broadcast_id": broadcast.id,
        "status": broadcast.status,
        "broadcast_until": broadcast.expires_at,
        "nearby_technicians_count": len(nearby),
    }


def submit_offer(
    db: Session,
    actor: Actor,
    broadcast_id: int,
    bid_amount: float,
    events: EventEmitter,
    message: Optional[str] = None,
) -> JobOffers:
    broadcast = db.get(JobBroadcasts, broadcast_id)
    if not broadcast:
        raise NotFoundError("Broadcast not found", code="BROADCAST_NOT_FOUND")

    _ensure_open(broadcast, datetime.now())

    if bid_amount <= 0:
        raise ValidationError("Bid amount must be positive")

    existing = (
        db.query(JobOffers.id)
        .filter(
            JobOffers.broadcast_id == broadcast.id,
            JobOffers.technician_id == actor.id,
        )
        .first()
    )
    if existing:
        raise ConflictError("You have already submitted an offer for this job")

    offer = JobOffers(
        broadcast_id=broadcast.id,
        technician_id=actor.id,
        bid_amount=bid_amount,
        message=message,
        status="PENDING",
    )
    db.add(offer)
    db.commit()
    db.refresh(offer)

    logger.info(f"Offer {offer.id} on broadcast {broadcast.id}: {bid_amount} by technician {actor.id}")
    events.emit(
        "offer.submitted",
        {"broadcast_id": broadcast.id, "offer_id": offer.id, "bid_amount": bid_amount},
        [broadcast.customer_id],
    )
    return offer


def list_offers_with_eta(
    db: Session,
    actor: Actor,
    broadcast_id: int,
    average_speed_kmh: float,
) -> list[dict]:
    """Offers cheapest first, with the technician's current distance and ETA."""
    broadcast = get_broadcast_for(db, broadcast_id, actor)

    result = []
    for offer in broadcast.offers:
        tech = offer.technician
        distance = None
        eta = None
        if tech.latitude is not None and tech.longitude is not None:
            km = haversine_km(broadcast.latitude, broadcast.longitude, tech.latitude, tech.longitude)
            distance = round(km, 1)
            eta = eta_minutes(km, average_speed_kmh)

        result.append({
            "id": offer.id,
            "broadcast_id": offer.broadcast_id,
            "technician_id": offer.technician_id,
            "technician_name": " ".join(filter(None, [tech.first_name, tech.last_name])),
            "bid_amount": offer.bid_amount,
            "message": offer.message,
            "status": offer.status,
            "created_at": offer.created_at,
            "distance_km": distance,
            "eta_minutes": eta,
        })

    return result


def accept_offer(
    db: Session,
    actor: Actor,
    broadcast_id: int,
    offer_id: int,
    events: EventEmitter,
) -> dict:
    """Accept one offer, reject the rest, assign the technician. One commit."""
    broadcast = get_broadcast_for(db, broadcast_id, actor)
    _ensure_open(broadcast, datetime.now())

    offer = next((o for o in broadcast.offers if o.id == offer_id), None)
    if not offer or offer.status != "PENDING":
        raise NotFoundError("Offer not found", code="OFFER_NOT_FOUND")

    rejected_ids = []
    for other in broadcast.offers:
        if other.id == offer.id:
            other.status = "ACCEPTED"
        elif other.status == "PENDING":
            other.status = "REJECTED"
            rejected_ids.append(other.technician_id)

    broadcast.status = "COMPLETED"

    booking = broadcast.booking
    booking.status = "TECHNICIAN_ASSIGNED"
    booking.technician_id = offer.technician_id
    booking.agreed_price = offer.bid_amount

    db.commit()
    db.refresh(booking)

    logger.info(
        f"Offer {offer.id} accepted: booking {booking.booking_number} → "
        f"technician {offer.technician_id} at {offer.bid_amount}"
    )

    events.emit(
        "offer.accepted",
        {"broadcast_id": broadcast.id, "offer_id": offer.id, "booking_id": booking.id},
        [offer.technician_id],
    )
    events.emit(
        "offer.rejected",
        {"broadcast_id": broadcast.id},
        rejected_ids,
    )

    return {
        "booking_id": booking.id,
        "booking_number": booking.booking_number,
        "status": booking.status,
        "technician_id": booking.technician_id,
        "agreed_price": booking.agreed_price,
    }


def cancel_broadcast(
    db: Session,
    actor: Actor,
    broadcast_id: int,
    events: EventEmitter,
) -> JobBroadcasts:
    broadcast = get_broadcast_for(db, broadcast_id, actor)
    if broadcast.status != "BROADCASTING":
        raise ValidationError(
            f"Broadcast is {broadcast.status}",
            code="BROADCAST_CLOSED",
        )

    bidders = []
    for offer in broadcast.offers:
        if offer.status == "PENDING":
            offer.status = "REJECTED"
            bidders.append(offer.technician_id)

    broadcast.status = "CANCELLED"
    broadcast.booking.status = "CANCELLED"
    db.commit()
    db.refresh(broadcast)

    logger.info(f"Broadcast {broadcast.id} cancelled by customer {actor.id}")
    events.emit("broadcast.cancelled", {"broadcast_id": broadcast.id}, bidders)
    return broadcast


def expire_overdue_broadcasts(
    db: Session,
    events: EventEmitter,
    now: Optional[datetime] = None,
) -> int:
    """Mark overdue BROADCASTING broadcasts EXPIRED. Returns how many."""
    now = now or datetime.now()

    overdue = (
        db.query(JobBroadcasts)
        .filter(
            JobBroadcasts.status == "BROADCASTING",
            JobBroadcasts.expires_at <= now,
        )
        .all()
    )
    if not overdue:
        return 0

    for broadcast in overdue:
        broadcast.status = "EXPIRED"
        broadcast.booking.status = "NO_TECHNICIANS_AVAILABLE"
        for offer in broadcast.offers:
            if offer.status == "PENDING":
                offer.status = "REJECTED"

    db.commit()

    for broadcast in overdue:
        logger.info(f"Broadcast {broadcast.id} expired")
        events.emit(
            "broadcast.expired",
            {"broadcast_id": broadcast.id, "booking_id": broadcast.booking_id},
            [broadcast.customer_id],
        )

    return len(overdue)
