# backend/automarket/services/reviews.py
"""
Workshop reviews and the workshop rating aggregate.

A review tied to a completed booking of the reviewer is marked verified;
without a booking a user may leave one unverified review per workshop.
"""

import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..errors import AppError, ForbiddenError, NotFoundError, ValidationError
from ..models import Bookings, WorkshopReviews, Workshops
from .access import Actor

logger = logging.getLogger(__name__)


def update_workshop_rating(db: Session, workshop: Workshops) -> None:
    """Recompute average_rating (1 decimal) and total_reviews. No commit."""
    db.flush()
    average, total = (
        db.query(func.avg(WorkshopReviews.rating), func.count(WorkshopReviews.id))
        .filter(WorkshopReviews.workshop_id == workshop.id)
        .one()
    )
    workshop.average_rating = round(float(average), 1) if average is not None else 0.0
    workshop.total_reviews = total


def create_review(
    db: Session,
    actor: Actor,
    workshop_id: int,
    rating: int,
    comment: Optional[str] = None,
    booking_id: Optional[int] = None,
) -> WorkshopReviews:
    if not 1 <= rating <= 5:
        raise ValidationError("Rating must be between 1 and 5")

    workshop = db.get(Workshops, workshop_id)
    if not workshop or not workshop.is_active:
        raise NotFoundError("Workshop not found", code="WORKSHOP_NOT_FOUND")

    is_verified = False
    if booking_id is not None:
        booking = db.get(Bookings, booking_id)
        if not booking:
            raise NotFoundError("Booking not found", code="BOOKING_NOT_FOUND")
        if booking.customer_id != actor.id:
            raise ForbiddenError("Booking does not belong to user")
        if booking.workshop_id != workshop.id:
            raise ValidationError("Booking is not for this workshop")
        if booking.status != "COMPLETED":
            raise ValidationError("Can only review completed bookings")
        if booking.review is not None:
            raise AppError("Booking already has a review", status_code=400, code="ALREADY_EXISTS")
        is_verified = True
    else:
        existing = (
            db.query(WorkshopReviews.id)
            .filter(
                WorkshopReviews.workshop_id == workshop.id,
                WorkshopReviews.user_id == actor.id,
                WorkshopReviews.booking_id.is_(None),
            )
            .first()
        )
        if existing:
            raise AppError(
                "You have already reviewed this workshop",
                status_code=400,
                code="ALREADY_EXISTS",
            )

    review = WorkshopReviews(
        workshop_id=workshop.id,
        user_id=actor.id,
        booking_id=booking_id,
        rating=rating,
        comment=comment,
        is_verified=1 if is_verified else 0,
    )
    db.add(review)
    update_workshop_rating(db, workshop)
    db.commit()
    db.refresh(review)

    logger.info(
        f"Review {review.id} for workshop {workshop.id}: {rating}★ "
        f"(verified={is_verified}, avg={workshop.average_rating})"
    )
    return review


def list_reviews_query(
    db: Session,
    workshop_id: int,
    rating: Optional[int] = None,
    is_verified: Optional[bool] = None,
):
    query = db.query(WorkshopReviews).filter(WorkshopReviews.workshop_id == workshop_id)
    if rating is not None:
        query = query.filter(WorkshopReviews.rating == rating)
    if is_verified is not None:
        query = query.filter(WorkshopReviews.is_verified == (1 if is_verified else 0))
    return query.order_by(WorkshopReviews.created_at.desc(), WorkshopReviews.id.desc())
