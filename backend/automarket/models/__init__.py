from .entities import (
    BOOKING_STATUSES,
    NON_OCCUPYING_STATUSES,
    ROLES,
    AutoParts,
    Base,
    Bookings,
    JobBroadcasts,
    JobOffers,
    Services,
    Users,
    Vehicles,
    WorkshopReviews,
    Workshops,
    metadata,
)

__all__ = [
    "BOOKING_STATUSES",
    "NON_OCCUPYING_STATUSES",
    "ROLES",
    "AutoParts",
    "Base",
    "Bookings",
    "JobBroadcasts",
    "JobOffers",
    "Services",
    "Users",
    "Vehicles",
    "WorkshopReviews",
    "Workshops",
    "metadata",
]
