# backend/automarket/schemas/broadcasts.py
"""
Pydantic schemas for job dispatch (broadcast → offers → accept).
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field


class BroadcastCreate(BaseModel):
    service_id: int
    vehicle_id: Optional[int] = None
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: Optional[str] = None
    description: Optional[str] = None
    urgency: Literal["NORMAL", "HIGH"] = "NORMAL"
    estimated_budget: Optional[float] = Field(None, ge=0)


class BroadcastCreated(BaseModel):
    booking_id: int
    broadcast_id: int
    status: str
    broadcast_until: datetime
    nearby_technicians_count: int


class OfferCreate(BaseModel):
    bid_amount: float = Field(gt=0)
    message: Optional[str] = None


class OfferRead(BaseModel):
    id: int
    broadcast_id: int
    technician_id: int
    bid_amount: float
    message: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class OfferWithEta(OfferRead):
    """Offer as shown to the customer: distance and ETA of the technician."""
    technician_name: str
    distance_km: Optional[float] = None
    eta_minutes: Optional[int] = None


class BroadcastRead(BaseModel):
    id: int
    booking_id: int
    customer_id: int
    service_id: int
    latitude: float
    longitude: float
    address: Optional[str] = None
    radius_km: float
    description: Optional[str] = None
    urgency: str
    estimated_budget: Optional[float] = None
    status: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BroadcastDetail(BroadcastRead):
    offers: list[OfferRead] = []


class OfferAccepted(BaseModel):
    booking_id: int
    booking_number: str
    status: str
    technician_id: int
    agreed_price: float
