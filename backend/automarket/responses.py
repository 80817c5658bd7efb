# backend/automarket/responses.py
"""
Unified API response envelope.

All success responses: {"success": true, "message": str, "data": ..., "pagination"?: ...}
"""

from math import ceil
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: str = ""
    data: T
    pagination: Optional[Pagination] = None


def ok(data, message: str = "", pagination: Optional[Pagination] = None) -> dict:
    payload = {"success": True, "message": message, "data": data}
    if pagination is not None:
        payload["pagination"] = pagination
    return payload


def paginate(query, page: int, limit: int) -> tuple[list, Pagination]:
    """Apply offset/limit to a SQLAlchemy query and build pagination meta."""
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=ceil(total / limit) or 1,
    )


def paginate_list(items: list, page: int, limit: int) -> tuple[list, Pagination]:
    """Same as paginate, for rows already filtered in Python."""
    start = (page - 1) * limit
    return items[start:start + limit], Pagination(
        page=page,
        limit=limit,
        total=len(items),
        total_pages=ceil(len(items) / limit) or 1,
    )
