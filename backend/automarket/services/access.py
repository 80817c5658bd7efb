# backend/automarket/services/access.py
"""
Access policy: the single place that decides who sees and who manages a row.

Every listing/detail endpoint goes through visibility_filter / ensure_visible,
every mutation through ensure_can_manage. Bookings have their own scope
(booking_scope) because visibility there follows participation, not ownership.

Rules:
- admin: everything
- vendor: active rows + rows they own
- everyone else: active rows (and verified rows, for models that have is_verified)
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import and_, false, or_, select, true

from ..errors import ForbiddenError, NotFoundError
from ..models import Bookings, Services

OWNER_ATTRS = ("owner_id", "user_id", "customer_id")


@dataclass(frozen=True)
class Actor:
    id: Optional[int]
    role: str = "public"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_authenticated(self) -> bool:
        return self.id is not None


ANONYMOUS = Actor(id=None, role="public")


def _owner_id(obj) -> Optional[int]:
    for attr in OWNER_ATTRS:
        if hasattr(obj, attr):
            return getattr(obj, attr)
    return None


def _public_criteria(model) -> list:
    criteria = []
    if hasattr(model, "is_active"):
        criteria.append(model.is_active == 1)
    if hasattr(model, "is_verified"):
        criteria.append(model.is_verified == 1)
    return criteria


def visibility_filter(model, actor: Actor):
    """SQLAlchemy criterion restricting `model` rows to what `actor` may see."""
    if actor.is_admin:
        return true()

    criteria = _public_criteria(model)
    public = and_(*criteria) if criteria else true()

    if actor.role == "vendor" and hasattr(model, "owner_id"):
        return or_(public, model.owner_id == actor.id)

    return public


def is_visible(obj, actor: Actor) -> bool:
    if actor.is_admin:
        return True
    if actor.role == "vendor" and getattr(obj, "owner_id", None) == actor.id:
        return True
    if hasattr(obj, "is_active") and not obj.is_active:
        return False
    if hasattr(obj, "is_verified") and not obj.is_verified:
        return False
    return True


def ensure_visible(obj, actor: Actor, label: str = "Resource"):
    """Return obj, or raise NotFoundError if it is missing or hidden from actor."""
    if obj is None or not is_visible(obj, actor):
        raise NotFoundError(f"{label} not found")
    return obj


def can_manage(obj, actor: Actor) -> bool:
    if actor.is_admin:
        return True
    owner_id = _owner_id(obj)
    return actor.id is not None and owner_id is not None and owner_id == actor.id


def ensure_can_manage(obj, actor: Actor) -> None:
    if not can_manage(obj, actor):
        raise ForbiddenError("Access denied. Insufficient permissions.")


def booking_scope(actor: Actor):
    """Criterion on Bookings: which bookings the actor participates in."""
    if actor.is_admin:
        return true()
    if actor.id is None:
        return false()
    if actor.role == "technician":
        return Bookings.technician_id == actor.id
    if actor.role == "vendor":
        owned = select(Services.id).where(Services.owner_id == actor.id)
        return Bookings.service_id.in_(owned)
    return Bookings.customer_id == actor.id


def can_see_booking(booking: Bookings, actor: Actor) -> bool:
    if actor.is_admin:
        return True
    if actor.id is None:
        return False
    if booking.customer_id == actor.id or booking.technician_id == actor.id:
        return True
    return actor.role == "vendor" and booking.service is not None and booking.service.owner_id == actor.id
