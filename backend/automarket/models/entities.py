from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata

ROLES = ("customer", "technician", "vendor", "admin")

# Booking statuses that free the slot they were booked for.
NON_OCCUPYING_STATUSES = ("CANCELLED", "REJECTED", "NO_SHOW")

BOOKING_STATUSES = (
    "PENDING",
    "CONFIRMED",
    "IN_PROGRESS",
    "COMPLETED",
    "CANCELLED",
    "REJECTED",
    "NO_SHOW",
    "BROADCASTING",
    "NO_TECHNICIANS_AVAILABLE",
    "TECHNICIAN_ASSIGNED",
)

_ACTIVE_SLOT_WHERE = text(
    "start_time IS NOT NULL AND status NOT IN ('CANCELLED', 'REJECTED', 'NO_SHOW')"
)


class Users(Base):
    __tablename__ = 'users'

    email = Column(Text, nullable=False, unique=True)
    first_name = Column(Text, nullable=False)
    role = Column(Enum(*ROLES, name='user_role'), nullable=False, server_default=text("'customer'"))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    last_name = Column(Text)
    phone = Column(Text)
    latitude = Column(Float)
    longitude = Column(Float)
    is_available = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(DateTime, server_default=func.now())

    services = relationship('Services', back_populates='owner')
    auto_parts = relationship('AutoParts', back_populates='owner')
    vehicles = relationship('Vehicles', back_populates='user')
    bookings = relationship('Bookings', back_populates='customer', foreign_keys='Bookings.customer_id')
    assigned_bookings = relationship('Bookings', back_populates='technician', foreign_keys='Bookings.technician_id')
    reviews = relationship('WorkshopReviews', back_populates='user')
    offers = relationship('JobOffers', back_populates='technician')


class Services(Base):
    __tablename__ = 'services'

    name = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    working_hours = Column(JSON, nullable=False, default=list)
    slot_duration_minutes = Column(Integer, nullable=False, server_default=text('60'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    owner_id = Column(ForeignKey('users.id', ondelete='SET NULL'))  # NULL = platform service
    description = Column(Text)
    category = Column(Text)
    estimated_duration = Column(Integer)
    created_at = Column(DateTime, server_default=func.now())

    owner = relationship('Users', back_populates='services')
    bookings = relationship('Bookings', back_populates='service')


class Vehicles(Base):
    __tablename__ = 'vehicles'

    user_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    make = Column(Text, nullable=False)
    model = Column(Text, nullable=False)
    plate_number = Column(Text, nullable=False, unique=True)
    is_default = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    year = Column(Integer)
    color = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    user = relationship('Users', back_populates='vehicles')
    bookings = relationship('Bookings', back_populates='vehicle')


class AutoParts(Base):
    __tablename__ = 'auto_parts'

    name = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False, server_default=text('0'))
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    id = Column(Integer, primary_key=True)
    owner_id = Column(ForeignKey('users.id', ondelete='CASCADE'))
    description = Column(Text)
    brand = Column(Text)
    part_number = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    owner = relationship('Users', back_populates='auto_parts')


class Workshops(Base):
    __tablename__ = 'workshops'

    name = Column(Text, nullable=False)
    city = Column(Text, nullable=False, index=True)
    address = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    services = Column(JSON, nullable=False, default=list)
    is_active = Column(Integer, nullable=False, server_default=text('1'))
    is_verified = Column(Integer, nullable=False, server_default=text('0'))
    average_rating = Column(Float, nullable=False, server_default=text('0'))
    total_reviews = Column(Integer, nullable=False, server_default=text('0'))
    total_bookings = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    description = Column(Text)
    email = Column(Text)
    working_hours = Column(JSON)
    verified_at = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())

    bookings = relationship('Bookings', back_populates='workshop')
    reviews = relationship('WorkshopReviews', back_populates='workshop', cascade='all, delete-orphan', passive_deletes=True)


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        Index(
            'uq_bookings_active_slot',
            'service_id', 'scheduled_date', 'start_time',
            unique=True,
            sqlite_where=_ACTIVE_SLOT_WHERE,
            postgresql_where=_ACTIVE_SLOT_WHERE,
        ),
    )

    booking_number = Column(Text, nullable=False, unique=True)
    customer_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id', ondelete='CASCADE'), nullable=False)
    status = Column(Text, nullable=False, server_default=text("'PENDING'"))
    id = Column(Integer, primary_key=True)
    vehicle_id = Column(ForeignKey('vehicles.id', ondelete='SET NULL'))
    workshop_id = Column(ForeignKey('workshops.id', ondelete='SET NULL'))
    technician_id = Column(ForeignKey('users.id', ondelete='SET NULL'))
    scheduled_date = Column(Date)
    start_time = Column(Text)  # "HH:MM"
    notes = Column(Text)
    agreed_price = Column(Float)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    customer = relationship('Users', back_populates='bookings', foreign_keys=[customer_id])
    technician = relationship('Users', back_populates='assigned_bookings', foreign_keys=[technician_id])
    service = relationship('Services', back_populates='bookings')
    vehicle = relationship('Vehicles', back_populates='bookings')
    workshop = relationship('Workshops', back_populates='bookings')
    review = relationship('WorkshopReviews', uselist=False, back_populates='booking')
    broadcast = relationship('JobBroadcasts', uselist=False, back_populates='booking')


class WorkshopReviews(Base):
    __tablename__ = 'workshop_reviews'

    workshop_id = Column(ForeignKey('workshops.id', ondelete='CASCADE'), nullable=False)
    user_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    rating = Column(Integer, nullable=False)
    is_verified = Column(Integer, nullable=False, server_default=text('0'))
    id = Column(Integer, primary_key=True)
    booking_id = Column(ForeignKey('bookings.id', ondelete='SET NULL'), unique=True)
    comment = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    workshop = relationship('Workshops', back_populates='reviews')
    user = relationship('Users', back_populates='reviews')
    booking = relationship('Bookings', back_populates='review')


class JobBroadcasts(Base):
    __tablename__ = 'job_broadcasts'

    booking_id = Column(ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, unique=True)
    customer_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    service_id = Column(ForeignKey('services.id', ondelete='CASCADE'), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    radius_km = Column(Float, nullable=False)
    urgency = Column(Text, nullable=False, server_default=text("'NORMAL'"))
    status = Column(Text, nullable=False, server_default=text("'BROADCASTING'"), index=True)
    expires_at = Column(DateTime, nullable=False)
    id = Column(Integer, primary_key=True)
    address = Column(Text)
    description = Column(Text)
    estimated_budget = Column(Float)
    created_at = Column(DateTime, server_default=func.now())

    booking = relationship('Bookings', back_populates='broadcast')
    offers = relationship('JobOffers', back_populates='broadcast', order_by='JobOffers.bid_amount')


class JobOffers(Base):
    __tablename__ = 'job_offers'
    __table_args__ = (
        UniqueConstraint('broadcast_id', 'technician_id'),
    )

    broadcast_id = Column(ForeignKey('job_broadcasts.id', ondelete='CASCADE'), nullable=False)
    technician_id = Column(ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    bid_amount = Column(Float, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'PENDING'"))
    id = Column(Integer, primary_key=True)
    message = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    broadcast = relationship('JobBroadcasts', back_populates='offers')
    technician = relationship('Users', back_populates='offers')
