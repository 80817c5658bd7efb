# backend/automarket/schemas/workshops.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class WorkshopCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    city: str = Field(min_length=1)
    address: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    email: Optional[str] = None

    # Either explicit coordinates or a Google Maps link to extract them from
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_url: Optional[str] = None

    working_hours: Optional[dict] = None
    services: list[str] = Field(min_length=1)
    is_active: bool = True
    is_verified: bool = False


class WorkshopUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    city: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_url: Optional[str] = None
    working_hours: Optional[dict] = None
    services: Optional[list[str]] = None
    is_active: Optional[bool] = None


class WorkshopVerification(BaseModel):
    is_verified: bool


class WorkshopRead(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    city: str
    address: str
    phone: str
    email: Optional[str] = None
    latitude: float
    longitude: float
    working_hours: Optional[dict] = None
    services: list[str]
    is_active: bool
    is_verified: bool
    verified_at: Optional[datetime] = None
    average_rating: float
    total_reviews: int
    total_bookings: int
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ReviewCreate(BaseModel):
    rating: int
    comment: Optional[str] = None
    booking_id: Optional[int] = None


class ReviewRead(BaseModel):
    id: int
    workshop_id: int
    user_id: int
    booking_id: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    is_verified: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
