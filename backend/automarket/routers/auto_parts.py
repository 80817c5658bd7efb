# backend/automarket/routers/auto_parts.py
# PATCH = owner or admin, DELETE = soft-delete (is_active)

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth import get_actor, require_roles
from ..database import get_db
from ..models import AutoParts as DBAutoParts
from ..responses import Envelope, ok, paginate
from ..schemas.auto_parts import AutoPartCreate, AutoPartRead, AutoPartUpdate
from ..services.access import Actor, ensure_can_manage, ensure_visible, visibility_filter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auto-parts", tags=["auto-parts"])


@router.get("/", response_model=Envelope[list[AutoPartRead]])
def list_auto_parts(
    search: Optional[str] = None,
    brand: Optional[str] = None,
    in_stock: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    query = db.query(DBAutoParts).filter(visibility_filter(DBAutoParts, actor))

    term = search.strip() if search else ""
    if term:
        pattern = f"%{term}%"
        query = query.filter(or_(
            DBAutoParts.name.ilike(pattern),
            DBAutoParts.description.ilike(pattern),
            DBAutoParts.part_number.ilike(pattern),
        ))
    if brand:
        query = query.filter(DBAutoParts.brand.ilike(brand))
    if in_stock is True:
        query = query.filter(DBAutoParts.stock > 0)
    elif in_stock is False:
        query = query.filter(DBAutoParts.stock == 0)

    items, pagination = paginate(query.order_by(DBAutoParts.id.desc()), page, limit)
    return ok(items, pagination=pagination)


@router.get("/{id}", response_model=Envelope[AutoPartRead])
def get_auto_part(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
):
    return ok(ensure_visible(db.get(DBAutoParts, id), actor, "Auto part"))


@router.post("/", response_model=Envelope[AutoPartRead], status_code=status.HTTP_201_CREATED)
def create_auto_part(
    data: AutoPartCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("admin", "vendor")),
):
    obj = DBAutoParts(**data.model_dump(), owner_id=actor.id)
    db.add(obj)
    db.commit()
    db.refresh(obj)

    logger.info(f"Auto part created: {obj.name} (id={obj.id}, owner={actor.id})")
    return ok(obj, "Auto part created")


@router.patch("/{id}", response_model=Envelope[AutoPartRead])
def update_auto_part(
    id: int,
    data: AutoPartUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("admin", "vendor")),
):
    obj = ensure_visible(db.get(DBAutoParts, id), actor, "Auto part")
    ensure_can_manage(obj, actor)

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in ("name", "price", "stock", "is_active"):
            continue
        setattr(obj, field, value)

    db.commit()
    db.refresh(obj)
    return ok(obj, "Auto part updated")


@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_auto_part(
    id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_roles("admin", "vendor")),
):
    obj = ensure_visible(db.get(DBAutoParts, id), actor, "Auto part")
    ensure_can_manage(obj, actor)

    obj.is_active = 0
    db.commit()
    logger.info(f"Auto part deactivated: {id}")
