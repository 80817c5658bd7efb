# backend/automarket/auth.py
"""
Caller identity.

Authentication happens upstream (gateway). The gateway forwards the
normalized identity as X-User-Id; here it is only mapped to an active user
and its role.
"""

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from .database import get_db
from .errors import ForbiddenError, UnauthorizedError
from .models import Users
from .services.access import ANONYMOUS, Actor


def get_actor(
    x_user_id: str | None = Header(None),
    db: Session = Depends(get_db),
) -> Actor:
    if not x_user_id:
        return ANONYMOUS

    try:
        user_id = int(x_user_id)
    except ValueError:
        raise UnauthorizedError("Invalid X-User-Id header") from None

    user = db.get(Users, user_id)
    if not user or not user.is_active:
        raise UnauthorizedError("Unknown or inactive user")

    return Actor(id=user.id, role=user.role)


def require_user(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_authenticated:
        raise UnauthorizedError("Authentication required")
    return actor


def require_roles(*roles: str):
    """Dependency factory: authenticated actor with one of the given roles."""

    def dependency(actor: Actor = Depends(require_user)) -> Actor:
        if actor.role not in roles:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return actor

    return dependency
